import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from atlas96.backends.lowering import plan_parameters
from atlas96.backends.runtime import ExecutionResult
from atlas96.compiler.analysis import ComplexityTier
from atlas96.compiler.pipeline import compile_tree
from atlas96.config import DEFAULT_CONFIG, EngineConfig
from atlas96.diagnostics import ConstructionError, ErrorCode

from .cache import CacheStats, CompiledOperationCache
from .compiled import CompiledOperation
from .descriptor import OperationDescriptor, canonical_json
from .schema import SchemaRegistry, validate_compiled
from .stdlib import register_stdlib

logger = logging.getLogger(__name__)


def cache_key(descriptor: OperationDescriptor, schema_hash: str, /) -> str:
    """Key covering identity, version, schema content, and every baked input."""
    shape = canonical_json(
        {
            "runtime": [list(pair) for pair in descriptor.runtime],
            "prefer": descriptor.prefer,
        }
    )
    return (
        f"{descriptor.namespace}/{descriptor.name}@{descriptor.version}"
        f"#{schema_hash}:{descriptor.compiled_json}|{shape}"
    )


def _check_runtime_shape(
    descriptor: OperationDescriptor, reads: dict[str, str]
) -> None:
    declared = dict(descriptor.runtime)
    for name, kind in reads.items():
        if name not in declared:
            raise ConstructionError(
                code=ErrorCode.INVALID_DESCRIPTOR,
                message=(
                    f"{descriptor.qualified_name} reads runtime parameter {name!r} "
                    "that its runtime shape does not declare"
                ),
                help=f"declare {name!r} as {kind!r}",
                data={"param": name},
            )
        if declared[name] != kind:
            raise ConstructionError(
                code=ErrorCode.INVALID_DESCRIPTOR,
                message=(
                    f"{descriptor.qualified_name} declares {name!r} as "
                    f"{declared[name]!r} but reads it as {kind!r}"
                ),
                data={"param": name},
            )


@dataclass(slots=True)
class OperationRegistry:
    """Compile-once entry point: descriptor in, cached compiled operation out.

    The cache is safe to share across threads; two threads compiling the same
    descriptor may both do the work, but only one artifact is stored.
    """

    schemas: SchemaRegistry = field(default_factory=SchemaRegistry)
    config: EngineConfig = DEFAULT_CONFIG
    cache: CompiledOperationCache[CompiledOperation] | None = None

    def __post_init__(self) -> None:
        if self.cache is None:
            self.cache = CompiledOperationCache(
                max_entries=self.config.cache_max_entries,
                eviction=self.config.eviction,
            )

    @property
    def _cache(self) -> CompiledOperationCache[CompiledOperation]:
        assert self.cache is not None
        return self.cache

    def key_for(self, descriptor: OperationDescriptor, /) -> str:
        entry = self.schemas.lookup(descriptor.namespace, descriptor.name)
        return cache_key(descriptor, entry.schema_hash)

    def compile(self, descriptor: OperationDescriptor, /) -> CompiledOperation:
        """Return the cached artifact for `descriptor`, compiling on a miss."""
        entry = self.schemas.lookup(descriptor.namespace, descriptor.name)
        key = cache_key(descriptor, entry.schema_hash)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        compiled = descriptor.compiled
        validate_compiled(entry.schema, compiled)
        tree = entry.builder(compiled)
        result = compile_tree(tree, prefer=descriptor.prefer, config=self.config)
        _check_runtime_shape(descriptor, plan_parameters(result.instructions))
        hint = descriptor.complexity_hint
        if hint is not None and hint != result.tier:
            logger.debug(
                "%s: complexity hint %s differs from computed %s",
                descriptor.qualified_name,
                ComplexityTier(hint).name,
                result.tier.name,
            )
        operation = CompiledOperation(
            descriptor=descriptor,
            cache_key=key,
            tier=result.tier,
            backend=result.backend,
            metrics=result.metrics,
            plan=result.plan,
            element_plan=result.element_plan,
        )
        logger.debug("cached %s on %s", key, result.backend.value)
        return self._cache.set_if_absent(key, operation)

    def invoke(
        self,
        descriptor: OperationDescriptor,
        params: Mapping[str, object] | None = None,
        /,
        **kwargs: object,
    ) -> ExecutionResult:
        return self.compile(descriptor).invoke(params, **kwargs)

    def evict(self, descriptor: OperationDescriptor, /) -> bool:
        """Drop one descriptor's artifact; returns whether it was cached."""
        return self._cache.evict(self.key_for(descriptor))

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()


def create_registry(
    *,
    config: EngineConfig = DEFAULT_CONFIG,
    cache: CompiledOperationCache[CompiledOperation] | None = None,
) -> OperationRegistry:
    """Registry preloaded with the standard operation library."""
    schemas = SchemaRegistry()
    register_stdlib(schemas)
    return OperationRegistry(schemas=schemas, config=config, cache=cache)


__all__ = ["OperationRegistry", "cache_key", "create_registry"]
