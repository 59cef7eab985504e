import hashlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from threading import RLock
from typing import Any

from atlas96.diagnostics import ConstructionError, ErrorCode
from atlas96.ir.model import ExprNode

from .descriptor import canonical_json

TreeBuilder = Callable[[Mapping[str, Any]], ExprNode]


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """One compile-time parameter a tree builder accepts."""

    name: str
    type: str
    required: bool = True
    choices: tuple[str | int, ...] = ()
    minimum: int | None = None
    maximum: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "choices": list(self.choices),
            "minimum": self.minimum,
            "maximum": self.maximum,
        }


@dataclass(frozen=True, slots=True)
class OperationSchema:
    """Declarative contract of one registered operation."""

    namespace: str
    name: str
    compiled: tuple[ParamSpec, ...] = ()
    runtime: tuple[tuple[str, str], ...] = ()
    summary: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "name": self.name,
            "compiled": [spec.as_dict() for spec in self.compiled],
            "runtime": [list(pair) for pair in self.runtime],
            "summary": self.summary,
        }

    def content_hash(self) -> str:
        """SHA-256 over the canonical JSON form of this schema."""
        payload = canonical_json(self.as_dict()).encode("utf-8")
        return hashlib.sha256(payload).hexdigest()


def _param_error(schema: OperationSchema, message: str, name: str) -> ConstructionError:
    accepted = [spec.name for spec in schema.compiled]
    return ConstructionError(
        code=ErrorCode.INVALID_COMPILED_PARAM,
        message=f"{schema.namespace}/{schema.name}: {message}",
        help=f"accepted compile-time parameters: {accepted}",
        data={"param": name},
    )


def validate_compiled(schema: OperationSchema, compiled: Mapping[str, Any], /) -> None:
    """Check compile-time parameters against the schema's declared specs."""
    known = {spec.name: spec for spec in schema.compiled}
    for name in compiled:
        if name not in known:
            raise _param_error(schema, f"unknown compile-time parameter {name!r}", name)
    for spec in schema.compiled:
        if spec.name not in compiled:
            if spec.required:
                raise _param_error(
                    schema, f"missing compile-time parameter {spec.name!r}", spec.name
                )
            continue
        value = compiled[spec.name]
        is_int = isinstance(value, int) and not isinstance(value, bool)
        if spec.type == "int" and not is_int:
            raise _param_error(
                schema, f"{spec.name!r} must be an integer, got {value!r}", spec.name
            )
        if spec.type == "str" and not isinstance(value, str):
            raise _param_error(
                schema, f"{spec.name!r} must be a string, got {value!r}", spec.name
            )
        if spec.type == "mapping" and not isinstance(value, Mapping):
            raise _param_error(
                schema, f"{spec.name!r} must be a mapping, got {value!r}", spec.name
            )
        if spec.choices and value not in spec.choices:
            raise _param_error(
                schema,
                f"{spec.name!r} must be one of {list(spec.choices)}, got {value!r}",
                spec.name,
            )
        if spec.minimum is not None and value < spec.minimum:
            raise _param_error(
                schema,
                f"{spec.name!r} must be >= {spec.minimum}, got {value}",
                spec.name,
            )
        if spec.maximum is not None and value > spec.maximum:
            raise _param_error(
                schema,
                f"{spec.name!r} must be <= {spec.maximum}, got {value}",
                spec.name,
            )


@dataclass(frozen=True, slots=True)
class RegisteredOperation:
    schema: OperationSchema
    builder: TreeBuilder
    schema_hash: str


@dataclass(slots=True)
class SchemaRegistry:
    """Schemas and tree builders keyed by `(namespace, name)`."""

    _entries: dict[tuple[str, str], RegisteredOperation] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock)

    def register(self, schema: OperationSchema, builder: TreeBuilder, /) -> None:
        """Register or replace one operation; replacing changes its schema hash."""
        entry = RegisteredOperation(
            schema=schema, builder=builder, schema_hash=schema.content_hash()
        )
        with self._lock:
            self._entries[(schema.namespace, schema.name)] = entry

    def lookup(self, namespace: str, name: str, /) -> RegisteredOperation:
        with self._lock:
            entry = self._entries.get((namespace, name))
        if entry is None:
            raise ConstructionError(
                code=ErrorCode.UNKNOWN_OPERATION,
                message=f"no operation registered as {namespace}/{name}",
                help="register a schema and tree builder before compiling",
                data={"namespace": namespace, "name": name},
            )
        return entry

    def operations(self) -> tuple[tuple[str, str], ...]:
        with self._lock:
            return tuple(sorted(self._entries))

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


__all__ = [
    "OperationSchema",
    "ParamSpec",
    "RegisteredOperation",
    "SchemaRegistry",
    "TreeBuilder",
    "validate_compiled",
]
