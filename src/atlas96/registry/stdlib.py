"""Standard operation library: schemas, tree builders, descriptor factories."""

from collections.abc import Mapping
from typing import Any

from atlas96.backends.runtime import RuntimeKind
from atlas96.classes.ring import OverflowMode
from atlas96.compiler.selection import BackendPreference
from atlas96.generators import TransformKind, TransformOp
from atlas96.ir.builders import expression_from_mapping, expression_to_mapping
from atlas96.ir.model import (
    AlgebraAtom,
    BridgeAtom,
    ExprNode,
    GradeAtom,
    ParamAtom,
    ReductionAtom,
    RingAtom,
    UnitAtom,
    transform,
)

from .descriptor import OperationDescriptor
from .schema import OperationSchema, ParamSpec, SchemaRegistry, TreeBuilder

RING_NAMESPACE = "stdlib.ring"
REDUCE_NAMESPACE = "stdlib.reduce"
UNITS_NAMESPACE = "stdlib.units"
TRANSFORMS_NAMESPACE = "stdlib.transforms"
GRADE_NAMESPACE = "stdlib.grade"
BRIDGE_NAMESPACE = "stdlib.bridge"
ALGEBRA_NAMESPACE = "stdlib.algebra"
COMPOSE_NAMESPACE = "stdlib.compose"

STDLIB_VERSION = "1.0.0"

_OVERFLOW_SPEC = ParamSpec("overflow", "str", required=False, choices=("drop", "track"))
_VALUE_PAIR = (("a", "value"), ("b", "value"))

_RING_OPERATIONS = {
    "add96": "add",
    "sub96": "sub",
    "mul96": "mul",
    "gcd96": "gcd",
    "lcm96": "lcm",
}
_REDUCE_OPERATIONS = {
    "sum96": "sum",
    "product96": "product",
    "max96": "max",
    "min96": "min",
}
_UNIT_OPERATIONS = {"is_unit96": "is_unit", "factor96": "factor"}


def _ring_builder(op: str) -> TreeBuilder:
    def build(compiled: Mapping[str, Any]) -> ExprNode:
        return RingAtom(op, compiled.get("overflow", "drop"))  # type: ignore[arg-type]

    return build


def _reduce_builder(op: str) -> TreeBuilder:
    def build(compiled: Mapping[str, Any]) -> ExprNode:
        return ReductionAtom(op)  # type: ignore[arg-type]

    return build


def _unit_builder(op: str) -> TreeBuilder:
    def build(compiled: Mapping[str, Any]) -> ExprNode:
        return UnitAtom(op)  # type: ignore[arg-type]

    return build


def _transform_builder(kind: TransformKind) -> TreeBuilder:
    def build(compiled: Mapping[str, Any]) -> ExprNode:
        return transform(TransformOp(kind, compiled.get("k", 1)), ParamAtom("x"))

    return build


def _build_grade(compiled: Mapping[str, Any]) -> ExprNode:
    return GradeAtom(compiled["grade"])


def _build_lift(compiled: Mapping[str, Any]) -> ExprNode:
    return BridgeAtom("lift", compiled.get("class_index"))


def _build_project(compiled: Mapping[str, Any]) -> ExprNode:
    return BridgeAtom("project")


def _algebra_builder(op: str) -> TreeBuilder:
    def build(compiled: Mapping[str, Any]) -> ExprNode:
        scalar = compiled.get("scalar", 1)
        return AlgebraAtom(op, scalar=scalar)  # type: ignore[arg-type]

    return build


def _build_expression(compiled: Mapping[str, Any]) -> ExprNode:
    return expression_from_mapping(compiled["expr"])


def register_stdlib(schemas: SchemaRegistry, /) -> None:
    """Register every standard-library operation on `schemas`."""
    for name, op in _RING_OPERATIONS.items():
        specs = (_OVERFLOW_SPEC,) if op in {"add", "sub", "mul"} else ()
        schemas.register(
            OperationSchema(
                RING_NAMESPACE, name, specs, _VALUE_PAIR, f"{op} two residues mod 96"
            ),
            _ring_builder(op),
        )
    for name, op in _REDUCE_OPERATIONS.items():
        schemas.register(
            OperationSchema(
                REDUCE_NAMESPACE,
                name,
                (),
                (("values", "values"),),
                f"{op} of a sequence of residues mod 96",
            ),
            _reduce_builder(op),
        )
    for name, op in _UNIT_OPERATIONS.items():
        schemas.register(
            OperationSchema(
                UNITS_NAMESPACE, name, (), (("n", "value"),), f"{op} mod 96"
            ),
            _unit_builder(op),
        )
    for kind in TransformKind:
        schemas.register(
            OperationSchema(
                TRANSFORMS_NAMESPACE,
                kind.value,
                (ParamSpec("k", "int", required=False),),
                (("x", "value"),),
                f"apply generator {kind.value}^k",
            ),
            _transform_builder(kind),
        )
    schemas.register(
        OperationSchema(
            GRADE_NAMESPACE,
            "project_grade",
            (ParamSpec("grade", "int", minimum=0, maximum=7),),
            (("x", "value"),),
            "keep one grade of the blade part",
        ),
        _build_grade,
    )
    schemas.register(
        OperationSchema(
            BRIDGE_NAMESPACE,
            "lift",
            (ParamSpec("class_index", "int", required=False, minimum=0, maximum=95),),
            (("x", "value"),),
            "lift a class index to a rank-1 element",
        ),
        _build_lift,
    )
    schemas.register(
        OperationSchema(
            BRIDGE_NAMESPACE,
            "project_class",
            (),
            (("x", "value"),),
            "project a rank-1 element back to its class",
        ),
        _build_project,
    )
    for op in ("multiply", "add"):
        schemas.register(
            OperationSchema(
                ALGEBRA_NAMESPACE,
                op,
                (),
                (("x", "value"), ("y", "value")),
                f"composite {op}",
            ),
            _algebra_builder(op),
        )
    schemas.register(
        OperationSchema(
            ALGEBRA_NAMESPACE,
            "scale",
            (ParamSpec("scalar", "int"),),
            (("x", "value"),),
            "multiply every part by an integer",
        ),
        _algebra_builder("scale"),
    )
    schemas.register(
        OperationSchema(
            COMPOSE_NAMESPACE,
            "expression",
            (ParamSpec("expr", "mapping"),),
            (),
            "arbitrary expression tree",
        ),
        _build_expression,
    )


def ring_descriptor(
    name: str,
    /,
    *,
    overflow: OverflowMode = "drop",
    prefer: BackendPreference = "auto",
) -> OperationDescriptor:
    """Descriptor for `add96`, `sub96`, `mul96`, `gcd96`, or `lcm96`."""
    compiled = {"overflow": overflow} if overflow != "drop" else {}
    return OperationDescriptor.create(
        RING_NAMESPACE,
        name,
        STDLIB_VERSION,
        compiled=compiled,
        runtime=dict(_VALUE_PAIR),
        prefer=prefer,
    )


def reduce_descriptor(
    name: str, /, *, prefer: BackendPreference = "auto"
) -> OperationDescriptor:
    return OperationDescriptor.create(
        REDUCE_NAMESPACE,
        name,
        STDLIB_VERSION,
        runtime={"values": "values"},
        prefer=prefer,
    )


def unit_descriptor(
    name: str, /, *, prefer: BackendPreference = "auto"
) -> OperationDescriptor:
    return OperationDescriptor.create(
        UNITS_NAMESPACE, name, STDLIB_VERSION, runtime={"n": "value"}, prefer=prefer
    )


def transform_descriptor(
    kind: TransformKind | str,
    k: int = 1,
    /,
    *,
    prefer: BackendPreference = "auto",
) -> OperationDescriptor:
    symbol = kind.value if isinstance(kind, TransformKind) else kind
    return OperationDescriptor.create(
        TRANSFORMS_NAMESPACE,
        symbol,
        STDLIB_VERSION,
        compiled={"k": k},
        runtime={"x": "value"},
        prefer=prefer,
    )


def grade_descriptor(
    grade: int, /, *, prefer: BackendPreference = "auto"
) -> OperationDescriptor:
    return OperationDescriptor.create(
        GRADE_NAMESPACE,
        "project_grade",
        STDLIB_VERSION,
        compiled={"grade": grade},
        runtime={"x": "value"},
        prefer=prefer,
    )


def lift_descriptor(
    class_index: int | None = None, /, *, prefer: BackendPreference = "auto"
) -> OperationDescriptor:
    """Lift a baked class index, or the runtime parameter `x` when none is given."""
    if class_index is None:
        return OperationDescriptor.create(
            BRIDGE_NAMESPACE,
            "lift",
            STDLIB_VERSION,
            runtime={"x": "value"},
            prefer=prefer,
        )
    return OperationDescriptor.create(
        BRIDGE_NAMESPACE,
        "lift",
        STDLIB_VERSION,
        compiled={"class_index": class_index},
        prefer=prefer,
    )


def project_descriptor(*, prefer: BackendPreference = "auto") -> OperationDescriptor:
    return OperationDescriptor.create(
        BRIDGE_NAMESPACE,
        "project_class",
        STDLIB_VERSION,
        runtime={"x": "value"},
        prefer=prefer,
    )


def algebra_descriptor(
    name: str, /, *, scalar: int | None = None, prefer: BackendPreference = "auto"
) -> OperationDescriptor:
    """Descriptor for composite `multiply`, `add`, or `scale`."""
    if name == "scale":
        return OperationDescriptor.create(
            ALGEBRA_NAMESPACE,
            name,
            STDLIB_VERSION,
            compiled={"scalar": 1 if scalar is None else scalar},
            runtime={"x": "value"},
            prefer=prefer,
        )
    return OperationDescriptor.create(
        ALGEBRA_NAMESPACE,
        name,
        STDLIB_VERSION,
        runtime={"x": "value", "y": "value"},
        prefer=prefer,
    )


def expression_descriptor(
    expr: ExprNode | Mapping[str, Any],
    /,
    *,
    runtime: Mapping[str, RuntimeKind] | None = None,
    version: str = STDLIB_VERSION,
    complexity_hint: int | None = None,
    prefer: BackendPreference = "auto",
) -> OperationDescriptor:
    """Descriptor compiling an arbitrary tree (or its mapping form)."""
    mapping = expr if isinstance(expr, Mapping) else expression_to_mapping(expr)
    return OperationDescriptor.create(
        COMPOSE_NAMESPACE,
        "expression",
        version,
        compiled={"expr": mapping},
        runtime=runtime,
        complexity_hint=complexity_hint,
        prefer=prefer,
    )


__all__ = [
    "ALGEBRA_NAMESPACE",
    "BRIDGE_NAMESPACE",
    "COMPOSE_NAMESPACE",
    "GRADE_NAMESPACE",
    "REDUCE_NAMESPACE",
    "RING_NAMESPACE",
    "STDLIB_VERSION",
    "TRANSFORMS_NAMESPACE",
    "UNITS_NAMESPACE",
    "algebra_descriptor",
    "expression_descriptor",
    "grade_descriptor",
    "lift_descriptor",
    "project_descriptor",
    "reduce_descriptor",
    "register_stdlib",
    "ring_descriptor",
    "transform_descriptor",
    "unit_descriptor",
]
