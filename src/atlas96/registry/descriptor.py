import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from atlas96.backends.runtime import RuntimeKind
from atlas96.compiler.selection import BACKEND_PREFERENCES, BackendPreference
from atlas96.diagnostics import ConstructionError, ErrorCode

SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
RUNTIME_KINDS: frozenset[str] = frozenset({"value", "values"})


def _invalid(message: str, *, field: str) -> ConstructionError:
    return ConstructionError(
        code=ErrorCode.INVALID_DESCRIPTOR,
        message=f"invalid descriptor: {message}",
        data={"field": field},
    )


def canonical_json(payload: object, /) -> str:
    """Deterministic JSON text used for hashing and cache keys."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class OperationDescriptor:
    """Immutable request to compile one operation.

    Compile-time parameters are stored as canonical JSON so the descriptor is
    hashable and can never be mutated after creation.
    """

    namespace: str
    name: str
    version: str
    compiled_json: str
    runtime: tuple[tuple[str, RuntimeKind], ...]
    complexity_hint: int | None = None
    prefer: BackendPreference = "auto"

    def __post_init__(self) -> None:
        for field in ("namespace", "name", "version"):
            value = getattr(self, field)
            if not isinstance(value, str) or not value:
                raise _invalid(f"{field} must be a non-empty string", field=field)
        if not SEMVER_PATTERN.match(self.version):
            raise _invalid(
                f"version {self.version!r} is not semver (expected X.Y.Z)",
                field="version",
            )
        names = [name for name, _ in self.runtime]
        if len(set(names)) != len(names):
            raise _invalid("runtime parameter names must be unique", field="runtime")
        for name, kind in self.runtime:
            if not isinstance(name, str) or not name.isidentifier():
                raise _invalid(f"runtime parameter name {name!r}", field="runtime")
            if kind not in RUNTIME_KINDS:
                raise _invalid(
                    f"runtime kind {kind!r} for {name!r}; expected 'value' or 'values'",
                    field="runtime",
                )
        hint = self.complexity_hint
        if hint is not None and (
            isinstance(hint, bool) or not isinstance(hint, int) or not 0 <= hint <= 3
        ):
            raise _invalid(
                f"complexity hint {hint!r} must be 0..3", field="complexity_hint"
            )
        if self.prefer not in BACKEND_PREFERENCES:
            raise _invalid(
                f"prefer {self.prefer!r}; expected one of "
                f"{sorted(BACKEND_PREFERENCES)}",
                field="prefer",
            )

    @classmethod
    def create(
        cls,
        namespace: str,
        name: str,
        version: str = "1.0.0",
        *,
        compiled: Mapping[str, Any] | None = None,
        runtime: Mapping[str, RuntimeKind] | None = None,
        complexity_hint: int | None = None,
        prefer: BackendPreference = "auto",
    ) -> "OperationDescriptor":
        """Build a descriptor from plain mappings."""
        try:
            compiled_json = canonical_json(dict(compiled or {}))
        except (TypeError, ValueError) as error:
            raise _invalid(
                f"compile-time parameters are not JSON-serializable: {error}",
                field="compiled",
            ) from error
        return cls(
            namespace=namespace,
            name=name,
            version=version,
            compiled_json=compiled_json,
            runtime=tuple((runtime or {}).items()),
            complexity_hint=complexity_hint,
            prefer=prefer,
        )

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def compiled(self) -> dict[str, Any]:
        """Fresh copy of the compile-time parameters."""
        return json.loads(self.compiled_json)

    @property
    def runtime_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.runtime)


__all__ = ["OperationDescriptor", "RUNTIME_KINDS", "SEMVER_PATTERN", "canonical_json"]
