from collections.abc import Mapping
from typing import Any

from atlas96.diagnostics import ConstructionError, ErrorCode
from atlas96.generators import TransformOp

from .model import (
    AlgebraAtom,
    BridgeAtom,
    ExprNode,
    GradeAtom,
    LiteralAtom,
    Parallel,
    ParamAtom,
    ReductionAtom,
    RingAtom,
    Sequential,
    Transform,
    UnitAtom,
    transform,
)


def seq(first: ExprNode, *rest: ExprNode) -> ExprNode:
    """Left-nested sequential chain of one or more nodes."""
    node = first
    for item in rest:
        node = Sequential(node, item)
    return node


def par(first: ExprNode, *rest: ExprNode) -> ExprNode:
    """Left-nested parallel chain of one or more nodes."""
    node = first
    for item in rest:
        node = Parallel(node, item)
    return node


def _error(path: str, message: str) -> ConstructionError:
    return ConstructionError(
        code=ErrorCode.INVALID_EXPRESSION,
        message=f"invalid expression at {path}: {message}",
        help="expression nodes are mappings with an 'op' key",
        data={"path": path},
    )


def _fields(
    spec: Mapping[str, Any],
    path: str,
    *,
    required: tuple[str, ...] = (),
    optional: tuple[str, ...] = (),
) -> dict[str, Any]:
    unknown = set(spec) - {"op", *required, *optional}
    if unknown:
        raise _error(path, f"unexpected keys {sorted(unknown)}")
    missing = [key for key in required if key not in spec]
    if missing:
        raise _error(path, f"missing keys {missing}")
    return {key: spec[key] for key in (*required, *optional) if key in spec}


def _children(spec: Mapping[str, Any], path: str) -> list[ExprNode]:
    args = _fields(spec, path, required=("args",))["args"]
    if not isinstance(args, list | tuple) or not args:
        raise _error(path, "'args' must be a non-empty list")
    return [
        expression_from_mapping(arg, path=f"{path}.args[{position}]")
        for position, arg in enumerate(args)
    ]


def expression_from_mapping(spec: object, /, *, path: str = "expr") -> ExprNode:
    """Build an expression tree from its nested-mapping description."""
    if not isinstance(spec, Mapping):
        raise _error(path, f"expected a mapping, got {type(spec).__name__}")
    op = spec.get("op")
    if op == "seq":
        return seq(*_children(spec, path))
    if op == "par":
        return par(*_children(spec, path))
    if op == "transform":
        fields = _fields(spec, path, required=("kind", "child"), optional=("power",))
        try:
            transform_op = TransformOp(fields["kind"], fields.get("power", 1))
        except (TypeError, ValueError) as error:
            raise _error(path, str(error)) from error
        child = expression_from_mapping(fields["child"], path=f"{path}.child")
        return transform(transform_op, child)

    try:
        if op == "literal":
            return LiteralAtom(**_fields(spec, path, required=("value",)))
        if op == "param":
            return ParamAtom(**_fields(spec, path, required=("name",)))
        if op == "ring":
            fields = _fields(
                spec, path, required=("name",), optional=("overflow", "lhs", "rhs")
            )
            return RingAtom(fields.pop("name"), **fields)
        if op == "reduce":
            fields = _fields(spec, path, required=("name",), optional=("source",))
            return ReductionAtom(fields.pop("name"), **fields)
        if op == "unit":
            fields = _fields(spec, path, required=("name",), optional=("source",))
            return UnitAtom(fields.pop("name"), **fields)
        if op == "lift":
            fields = _fields(spec, path, optional=("class_index", "source"))
            return BridgeAtom("lift", **fields)
        if op == "project_class":
            return BridgeAtom("project", **_fields(spec, path, optional=("source",)))
        if op == "grade":
            fields = _fields(spec, path, required=("grade",), optional=("source",))
            return GradeAtom(**fields)
        if op == "algebra":
            fields = _fields(
                spec,
                path,
                required=("name",),
                optional=("operand", "scalar", "source"),
            )
            return AlgebraAtom(fields.pop("name"), **fields)
    except ConstructionError as error:
        if "path" in error.data:
            raise
        raise _error(path, error.message) from error
    raise _error(path, f"unknown op {op!r}")


def expression_to_mapping(node: ExprNode, /) -> dict[str, Any]:
    """Inverse of `expression_from_mapping`, JSON-serializable."""
    if isinstance(node, Sequential | Parallel):
        return {
            "op": node.kind,
            "args": [
                expression_to_mapping(node.left),
                expression_to_mapping(node.right),
            ],
        }
    if isinstance(node, Transform):
        return {
            "op": "transform",
            "kind": node.op.kind.value,
            "power": node.op.power,
            "child": expression_to_mapping(node.child),
        }
    if isinstance(node, LiteralAtom):
        return {"op": "literal", "value": node.value}
    if isinstance(node, ParamAtom):
        return {"op": "param", "name": node.name}
    if isinstance(node, RingAtom):
        return {
            "op": "ring",
            "name": node.op,
            "overflow": node.overflow,
            "lhs": node.lhs,
            "rhs": node.rhs,
        }
    if isinstance(node, ReductionAtom):
        return {"op": "reduce", "name": node.op, "source": node.source}
    if isinstance(node, UnitAtom):
        return {"op": "unit", "name": node.op, "source": node.source}
    if isinstance(node, BridgeAtom):
        if node.op == "project":
            return {"op": "project_class", "source": node.source}
        return {"op": "lift", "class_index": node.class_index, "source": node.source}
    if isinstance(node, GradeAtom):
        return {"op": "grade", "grade": node.grade, "source": node.source}
    return {
        "op": "algebra",
        "name": node.op,
        "operand": node.operand,
        "scalar": node.scalar,
        "source": node.source,
    }


__all__ = ["expression_from_mapping", "expression_to_mapping", "par", "seq"]
