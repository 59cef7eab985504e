import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from atlas96 import (
    AlgebraicElement,
    BackendKind,
    ComplexityTier,
    ConstructionError,
    ContractViolation,
    EngineConfig,
    ErrorCode,
    OperationDescriptor,
    ProjectedClass,
    RingResult,
    create_registry,
    lift,
)
from atlas96.algebra import scale
from atlas96.generators import TransformOp
from atlas96.ir import AlgebraAtom, BridgeAtom, ParamAtom, RingAtom, seq, transform
from atlas96.registry import CompiledOperationCache, OperationSchema, cache_key
from atlas96.registry.stdlib import (
    RING_NAMESPACE,
    TRANSFORMS_NAMESPACE,
    algebra_descriptor,
    expression_descriptor,
    grade_descriptor,
    lift_descriptor,
    project_descriptor,
    reduce_descriptor,
    ring_descriptor,
    transform_descriptor,
    unit_descriptor,
)


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"version": "1.0"}, "version"),
        ({"namespace": ""}, "namespace"),
        ({"runtime": {"a": "tensor"}}, "runtime"),
        ({"runtime": {"not valid": "value"}}, "runtime"),
        ({"complexity_hint": 4}, "complexity_hint"),
        ({"complexity_hint": True}, "complexity_hint"),
        ({"prefer": "gpu"}, "prefer"),
        ({"compiled": {"x": object()}}, "compiled"),
    ],
)
def test_descriptor_validation(kwargs: dict[str, object], field: str) -> None:
    arguments: dict[str, object] = {"namespace": "demo", "name": "op", **kwargs}
    with pytest.raises(ConstructionError) as excinfo:
        OperationDescriptor.create(**arguments)  # type: ignore[arg-type]
    assert excinfo.value.code == ErrorCode.INVALID_DESCRIPTOR
    assert excinfo.value.data == {"field": field}


def test_descriptor_rejects_duplicate_runtime_names() -> None:
    with pytest.raises(ConstructionError):
        OperationDescriptor("demo", "op", "1.0.0", "{}", (("a", "value"),) * 2)


def test_descriptor_is_immutable_and_hashable() -> None:
    descriptor = transform_descriptor("R", 2)
    compiled = descriptor.compiled
    compiled["k"] = 3
    assert descriptor.compiled == {"k": 2}
    assert descriptor == transform_descriptor("R", 2)
    assert hash(descriptor) == hash(transform_descriptor("R", 2))
    assert descriptor.qualified_name == "stdlib.transforms/R"
    assert descriptor.runtime_names == ("x",)


def test_cache_key_covers_every_baked_input() -> None:
    registry = create_registry()
    key = registry.key_for(ring_descriptor("add96"))
    assert key.startswith("stdlib.ring/add96@1.0.0#")
    assert ':{}|{"prefer":"auto","runtime":[["a","value"],["b","value"]]}' in key
    keys = {
        registry.key_for(ring_descriptor("add96")),
        registry.key_for(ring_descriptor("add96", overflow="track")),
        registry.key_for(ring_descriptor("add96", prefer="algebraic")),
        registry.key_for(transform_descriptor("R", 1)),
        registry.key_for(transform_descriptor("R", 2)),
    }
    assert len(keys) == 5


def test_schema_replacement_changes_cache_key() -> None:
    registry = create_registry()
    descriptor = ring_descriptor("gcd96")
    before = registry.compile(descriptor)
    entry = registry.schemas.lookup(RING_NAMESPACE, "gcd96")
    schema = entry.schema
    registry.schemas.register(
        OperationSchema(
            schema.namespace, schema.name, schema.compiled, schema.runtime, "new"
        ),
        entry.builder,
    )
    after = registry.compile(descriptor)
    assert after is not before
    assert after.cache_key != before.cache_key
    assert after.cache_key == cache_key(
        descriptor, registry.schemas.lookup(RING_NAMESPACE, "gcd96").schema_hash
    )


def test_compile_returns_cached_artifact() -> None:
    registry = create_registry()
    first = registry.compile(ring_descriptor("add96"))
    second = registry.compile(ring_descriptor("add96"))
    assert first is second
    stats = registry.cache_stats()
    assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)
    assert first.tier is ComplexityTier.TIER1
    assert first.backend is BackendKind.PERMUTATION


def test_fifo_eviction() -> None:
    registry = create_registry(config=EngineConfig(cache_max_entries=2))
    descriptors = [transform_descriptor("T", k) for k in (1, 2, 3)]
    first = registry.compile(descriptors[0])
    registry.compile(descriptors[1])
    registry.compile(descriptors[0])
    registry.compile(descriptors[2])
    stats = registry.cache_stats()
    assert stats.evictions == 1
    assert stats.size == 2
    assert registry.compile(descriptors[0]) is not first


def test_lru_eviction_refreshes_on_hit() -> None:
    config = EngineConfig(cache_max_entries=2, eviction="lru")
    registry = create_registry(config=config)
    descriptors = [transform_descriptor("T", k) for k in (1, 2, 3)]
    first = registry.compile(descriptors[0])
    second = registry.compile(descriptors[1])
    registry.compile(descriptors[0])
    registry.compile(descriptors[2])
    assert registry.compile(descriptors[0]) is first
    assert registry.compile(descriptors[1]) is not second


def test_evict_and_clear() -> None:
    registry = create_registry()
    descriptor = unit_descriptor("is_unit96")
    registry.compile(descriptor)
    assert registry.evict(descriptor)
    assert not registry.evict(descriptor)
    registry.compile(descriptor)
    registry.clear_cache()
    stats = registry.cache_stats()
    assert (stats.hits, stats.misses, stats.evictions, stats.size) == (0, 0, 0, 0)


def test_cache_logs_evictions(caplog: pytest.LogCaptureFixture) -> None:
    cache: CompiledOperationCache[str] = CompiledOperationCache(max_entries=1)
    with caplog.at_level(logging.DEBUG, logger="atlas96.registry.cache"):
        cache.set_if_absent("a", "first")
        assert cache.set_if_absent("a", "other") == "first"
        cache.set_if_absent("b", "second")
    assert "evicted compiled operation a" in caplog.text
    assert cache.keys() == ("b",)
    with pytest.raises(ValueError):
        CompiledOperationCache(eviction="random")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("eviction", "expected"), [("lru", ("a", "c")), ("fifo", ("b", "c"))]
)
def test_set_if_absent_hit_follows_eviction_policy(
    eviction: str, expected: tuple[str, ...]
) -> None:
    cache: CompiledOperationCache[str] = CompiledOperationCache(
        max_entries=2, eviction=eviction  # type: ignore[arg-type]
    )
    cache.set_if_absent("a", "first")
    cache.set_if_absent("b", "second")
    assert cache.set_if_absent("a", "again") == "first"
    cache.set_if_absent("c", "third")
    assert set(cache.keys()) == set(expected)
    assert cache.stats().evictions == 1


def test_ring_operations() -> None:
    registry = create_registry()
    assert registry.invoke(ring_descriptor("add96"), a=95, b=1) == 0
    assert registry.invoke(ring_descriptor("add96", overflow="track"), a=95, b=1) == (
        RingResult(0, True)
    )
    assert registry.invoke(ring_descriptor("sub96", overflow="track"), a=3, b=5) == (
        RingResult(94, True)
    )
    assert registry.invoke(ring_descriptor("mul96"), {"a": 12, "b": 9}) == 12
    assert registry.invoke(ring_descriptor("gcd96"), a=36, b=84) == 12
    assert registry.invoke(ring_descriptor("lcm96"), a=12, b=18) == 36


def test_reduction_and_unit_operations() -> None:
    registry = create_registry()
    assert registry.invoke(reduce_descriptor("sum96"), values=[90, 10]) == 4
    assert registry.invoke(reduce_descriptor("product96"), values=[]) == 1
    assert registry.invoke(reduce_descriptor("max96"), values=np.array([3, 70])) == 70
    assert registry.invoke(reduce_descriptor("min96"), values=()) == 0
    assert registry.invoke(unit_descriptor("is_unit96"), n=5) is True
    assert registry.invoke(unit_descriptor("is_unit96"), n=2) is False
    assert registry.invoke(unit_descriptor("factor96"), n=35) == (5, 7)


CLASS_VALUED_CALLS = [
    *(
        (ring_descriptor, name, {}, {"a": a, "b": b})
        for name in ("add96", "sub96", "mul96", "gcd96", "lcm96")
        for a, b in ((95, 1), (3, 5), (36, 84), (0, 17))
    ),
    *(
        (ring_descriptor, name, {"overflow": "track"}, {"a": a, "b": b})
        for name in ("add96", "sub96", "mul96")
        for a, b in ((95, 1), (3, 5), (12, 8))
    ),
    *(
        (reduce_descriptor, name, {}, {"values": values})
        for name in ("sum96", "product96", "max96", "min96")
        for values in ((), (90, 10), (5, 7, 11))
    ),
    *(
        (unit_descriptor, name, {}, {"n": n})
        for name in ("is_unit96", "factor96")
        for n in (0, 1, 10, 35, 95)
    ),
]


@pytest.mark.parametrize(("factory", "name", "options", "params"), CLASS_VALUED_CALLS)
def test_class_valued_operations_agree_across_backends(
    factory, name: str, options: dict[str, str], params: dict[str, object]
) -> None:
    registry = create_registry()
    by_auto = registry.invoke(factory(name, **options), params)
    algebraic = registry.compile(factory(name, prefer="algebraic", **options))
    assert algebraic.backend is BackendKind.ALGEBRAIC
    by_algebraic = algebraic(params)
    assert by_algebraic == by_auto
    assert type(by_algebraic) is type(by_auto)


def test_transform_operations() -> None:
    registry = create_registry()
    assert registry.invoke(transform_descriptor("R"), x=21) == 45
    assert registry.invoke(transform_descriptor("D"), x=0) == 8
    assert registry.invoke(transform_descriptor("T", 9), x=7) == 0
    assert registry.invoke(transform_descriptor("M"), x=8) == 16
    assert registry.invoke(transform_descriptor("R", 4), x=33) == 33


def test_bridge_operations_round_trip() -> None:
    registry = create_registry()
    element = registry.invoke(lift_descriptor(), x=17)
    assert element == lift(17)
    assert registry.invoke(project_descriptor(), x=element) == ProjectedClass(17)
    assert registry.invoke(project_descriptor(), x=17) == ProjectedClass(17)
    assert registry.invoke(lift_descriptor(12)) == lift(12)


def test_element_inputs_use_algebraic_plan() -> None:
    registry = create_registry()
    compiled = registry.compile(transform_descriptor("R"))
    assert compiled.backend is BackendKind.PERMUTATION
    assert compiled(x=lift(21)) == lift(45)
    assert registry.invoke(reduce_descriptor("sum96"), values=[lift(3), 4]) == 7
    assert registry.invoke(ring_descriptor("add96"), a=lift(95), b=1) == 0


def test_algebra_and_grade_operations() -> None:
    registry = create_registry()
    product = registry.invoke(algebra_descriptor("multiply"), x=0, y=lift(9))
    assert product == lift(9)
    assert registry.invoke(algebra_descriptor("scale", scalar=3), x=5) == scale(
        lift(5), 3
    )
    assert registry.invoke(grade_descriptor(1), x=9) == lift(9)
    projected = registry.invoke(grade_descriptor(0), x=9)
    assert isinstance(projected, AlgebraicElement)
    assert not projected.clifford.any()
    assert registry.compile(grade_descriptor(1)).tier is ComplexityTier.TIER2


def test_numpy_inputs_are_coerced() -> None:
    registry = create_registry()
    assert registry.invoke(ring_descriptor("add96"), a=np.int64(95), b=np.array(1)) == 0


@pytest.mark.parametrize(
    ("params", "code"),
    [
        ({"a": 1, "b": 2, "c": 3}, ErrorCode.UNEXPECTED_RUNTIME_PARAM),
        ({"a": 1}, ErrorCode.MISSING_RUNTIME_PARAM),
        ({"a": [1, 2], "b": 2}, ErrorCode.RUNTIME_PARAM_KIND_MISMATCH),
        ({"a": 96, "b": 2}, ErrorCode.CLASS_INDEX_OUT_OF_RANGE),
    ],
)
def test_runtime_parameter_errors(params: dict[str, object], code: ErrorCode) -> None:
    registry = create_registry()
    with pytest.raises(ContractViolation) as excinfo:
        registry.invoke(ring_descriptor("add96"), params)
    assert excinfo.value.code == code


def test_compile_time_parameter_errors() -> None:
    registry = create_registry()
    bad_descriptors = [
        ring_descriptor("gcd96", overflow="track"),
        grade_descriptor(8),
        OperationDescriptor.create(
            TRANSFORMS_NAMESPACE, "R", compiled={"k": "two"}, runtime={"x": "value"}
        ),
        OperationDescriptor.create(
            TRANSFORMS_NAMESPACE, "R", compiled={"power": 2}, runtime={"x": "value"}
        ),
    ]
    for descriptor in bad_descriptors:
        with pytest.raises(ConstructionError) as excinfo:
            registry.compile(descriptor)
        assert excinfo.value.code == ErrorCode.INVALID_COMPILED_PARAM
    with pytest.raises(ConstructionError) as excinfo:
        registry.compile(OperationDescriptor.create("stdlib.ring", "pow96"))
    assert excinfo.value.code == ErrorCode.UNKNOWN_OPERATION


def test_expression_operations() -> None:
    registry = create_registry()
    tree = seq(ParamAtom("x"), transform(TransformOp("R"), RingAtom("add", rhs="b")))
    descriptor = expression_descriptor(tree, runtime={"x": "value", "b": "value"})
    assert registry.invoke(descriptor, x=10, b=5) == 15

    tree = seq(BridgeAtom("lift"), AlgebraAtom("multiply"), BridgeAtom("project"))
    descriptor = expression_descriptor(tree, runtime={"x": "value", "y": "value"})
    compiled = registry.compile(descriptor)
    assert compiled.backend is BackendKind.ALGEBRAIC
    assert compiled(x=0, y=37) == ProjectedClass(37)


def test_expression_runtime_shape_must_match_plan() -> None:
    registry = create_registry()
    tree = RingAtom("add")
    with pytest.raises(ConstructionError) as excinfo:
        registry.compile(expression_descriptor(tree, runtime={"a": "value"}))
    assert excinfo.value.code == ErrorCode.INVALID_DESCRIPTOR
    with pytest.raises(ConstructionError):
        registry.compile(
            expression_descriptor(tree, runtime={"a": "value", "b": "values"})
        )


def test_complexity_hint_mismatch_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    registry = create_registry()
    descriptor = expression_descriptor(
        RingAtom("add"), runtime={"a": "value", "b": "value"}, complexity_hint=3
    )
    with caplog.at_level(logging.DEBUG, logger="atlas96.registry.registry"):
        compiled = registry.compile(descriptor)
    assert compiled.tier is ComplexityTier.TIER1
    assert "complexity hint TIER3 differs from computed TIER1" in caplog.text


def test_concurrent_compilation_stores_one_artifact() -> None:
    registry = create_registry()
    descriptor = transform_descriptor("D", 2)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: registry.compile(descriptor), range(32)))
    assert all(result is results[0] for result in results)
    assert registry.cache_stats().size == 1


def test_independent_registries_compile_identically() -> None:
    descriptor = ring_descriptor("mul96")
    first = create_registry().compile(descriptor)
    second = create_registry().compile(descriptor)
    assert first is not second
    assert first.cache_key == second.cache_key
    assert first.plan == second.plan
    assert first(a=7, b=11) == second(a=7, b=11) == 77


def test_stdlib_registers_every_operation() -> None:
    registry = create_registry()
    operations = registry.schemas.operations()
    assert len(operations) == 22
    assert ("stdlib.compose", "expression") in operations
    assert ("stdlib.bridge", "project_class") in registry.schemas
