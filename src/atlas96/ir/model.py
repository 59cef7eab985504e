from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal, TypeAlias

from atlas96.classes.coords import NUM_CLASSES
from atlas96.classes.ring import OverflowMode, ReductionOpName, RingOpName
from atlas96.diagnostics import ConstructionError, ErrorCode
from atlas96.generators import TransformOp

UnitOpName: TypeAlias = Literal["is_unit", "factor"]
BridgeOpName: TypeAlias = Literal["lift", "project"]
AlgebraOpName: TypeAlias = Literal["multiply", "add", "scale"]

_RING_OPS = frozenset({"add", "sub", "mul", "gcd", "lcm"})
_REDUCTION_OPS = frozenset({"sum", "product", "max", "min"})
_UNIT_OPS = frozenset({"is_unit", "factor"})
_BRIDGE_OPS = frozenset({"lift", "project"})
_ALGEBRA_OPS = frozenset({"multiply", "add", "scale"})


def _invalid(message: str, **data: str | int | bool) -> ConstructionError:
    return ConstructionError(
        code=ErrorCode.INVALID_EXPRESSION, message=message, data=dict(data)
    )


def _check_choice(value: object, choices: frozenset[str], what: str) -> None:
    if value not in choices:
        raise _invalid(f"unknown {what} {value!r}; expected one of {sorted(choices)}")


def _check_name(value: object, what: str) -> None:
    if not isinstance(value, str) or not value.isidentifier():
        raise _invalid(f"{what} must be an identifier string, got {value!r}")


def _check_class_literal(value: object, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(f"{what} must be an integer, got {value!r}")
    if not 0 <= value < NUM_CLASSES:
        raise _invalid(f"{what} must be in 0..95, got {value}")


@dataclass(frozen=True, slots=True)
class LiteralAtom:
    """Constant class index."""

    value: int
    kind: Literal["literal"] = "literal"

    def __post_init__(self) -> None:
        _check_class_literal(self.value, "literal value")


@dataclass(frozen=True, slots=True)
class ParamAtom:
    """Reference to one runtime parameter."""

    name: str
    kind: Literal["param"] = "param"

    def __post_init__(self) -> None:
        _check_name(self.name, "parameter name")


@dataclass(frozen=True, slots=True)
class RingAtom:
    """Ring/lattice operation; the accumulator is the left operand."""

    op: RingOpName
    overflow: OverflowMode = "drop"
    lhs: str = "a"
    rhs: str | int = "b"
    kind: Literal["ring"] = "ring"

    def __post_init__(self) -> None:
        _check_choice(self.op, _RING_OPS, "ring op")
        _check_choice(self.overflow, frozenset({"drop", "track"}), "overflow mode")
        if self.overflow == "track" and self.op in {"gcd", "lcm"}:
            raise _invalid(f"{self.op} has no overflow to track", op=self.op)
        _check_name(self.lhs, "ring lhs")
        if isinstance(self.rhs, str):
            _check_name(self.rhs, "ring rhs")
        else:
            _check_class_literal(self.rhs, "ring rhs literal")

    @property
    def is_terminal(self) -> bool:
        return self.overflow == "track"


@dataclass(frozen=True, slots=True)
class ReductionAtom:
    """Fold a runtime sequence into one class index."""

    op: ReductionOpName
    source: str = "values"
    kind: Literal["reduce"] = "reduce"

    def __post_init__(self) -> None:
        _check_choice(self.op, _REDUCTION_OPS, "reduction op")
        _check_name(self.source, "reduction source")


@dataclass(frozen=True, slots=True)
class UnitAtom:
    """Unit test or factorization of the accumulator."""

    op: UnitOpName
    source: str = "n"
    kind: Literal["unit"] = "unit"

    def __post_init__(self) -> None:
        _check_choice(self.op, _UNIT_OPS, "unit op")
        _check_name(self.source, "unit source")


@dataclass(frozen=True, slots=True)
class BridgeAtom:
    """Lift a class into the algebra, or project the accumulator back."""

    op: BridgeOpName
    class_index: int | None = None
    source: str = "x"
    kind: Literal["bridge"] = "bridge"

    def __post_init__(self) -> None:
        _check_choice(self.op, _BRIDGE_OPS, "bridge op")
        _check_name(self.source, "bridge source")
        if self.class_index is not None:
            if self.op != "lift":
                raise _invalid("only lift takes a baked class index")
            _check_class_literal(self.class_index, "lift class index")


@dataclass(frozen=True, slots=True)
class GradeAtom:
    """Grade projection of the accumulator's blade part."""

    grade: int
    source: str = "x"
    kind: Literal["grade"] = "grade"

    def __post_init__(self) -> None:
        if isinstance(self.grade, bool) or not isinstance(self.grade, int):
            raise _invalid(f"grade must be an integer, got {self.grade!r}")
        if not 0 <= self.grade <= 7:
            raise _invalid(f"grade must be in 0..7, got {self.grade}", grade=self.grade)
        _check_name(self.source, "grade source")


@dataclass(frozen=True, slots=True)
class AlgebraAtom:
    """Composite multiply/add with a runtime operand, or integer scaling."""

    op: AlgebraOpName
    operand: str = "y"
    scalar: int = 1
    source: str = "x"
    kind: Literal["algebra"] = "algebra"

    def __post_init__(self) -> None:
        _check_choice(self.op, _ALGEBRA_OPS, "algebra op")
        _check_name(self.operand, "algebra operand")
        _check_name(self.source, "algebra source")
        if isinstance(self.scalar, bool) or not isinstance(self.scalar, int):
            raise _invalid(f"scalar must be an integer, got {self.scalar!r}")


AtomNode: TypeAlias = (
    LiteralAtom
    | ParamAtom
    | RingAtom
    | ReductionAtom
    | UnitAtom
    | BridgeAtom
    | GradeAtom
    | AlgebraAtom
)


@dataclass(frozen=True, slots=True)
class Sequential:
    """Run `left`, then `right` on its result."""

    left: "ExprNode"
    right: "ExprNode"
    kind: Literal["seq"] = "seq"


@dataclass(frozen=True, slots=True)
class Parallel:
    """Independent branches; evaluated left to right, never folded across."""

    left: "ExprNode"
    right: "ExprNode"
    kind: Literal["par"] = "par"


@dataclass(frozen=True, slots=True)
class Transform:
    """Generator power conjugating its child: `g . child . g^-1`."""

    op: TransformOp
    child: "ExprNode"
    kind: Literal["transform"] = "transform"


ExprNode: TypeAlias = AtomNode | Sequential | Parallel | Transform

ATOM_TYPES = (
    LiteralAtom,
    ParamAtom,
    RingAtom,
    ReductionAtom,
    UnitAtom,
    BridgeAtom,
    GradeAtom,
    AlgebraAtom,
)


def transform(op: TransformOp, child: ExprNode, /) -> ExprNode:
    """Wrap `child` unless the power reduces to the identity."""
    if op.is_identity:
        return child
    return Transform(op, child)


def is_source(atom: AtomNode, /) -> bool:
    """Whether the atom produces a value without reading the accumulator."""
    if isinstance(atom, LiteralAtom | ParamAtom | ReductionAtom):
        return True
    return isinstance(atom, BridgeAtom) and atom.class_index is not None


def is_terminal_atom(atom: AtomNode, /) -> bool:
    """Atoms whose result ends every plan they appear in."""
    if isinstance(atom, RingAtom):
        return atom.is_terminal
    if isinstance(atom, UnitAtom):
        return True
    return isinstance(atom, BridgeAtom) and atom.op == "project"


def iter_atoms(node: ExprNode, /) -> Iterator[AtomNode]:
    """Leaves in evaluation order."""
    if isinstance(node, Sequential | Parallel):
        yield from iter_atoms(node.left)
        yield from iter_atoms(node.right)
    elif isinstance(node, Transform):
        yield from iter_atoms(node.child)
    else:
        yield node


def atom_params(atom: AtomNode, /, *, seeded: bool) -> tuple[str, ...]:
    """Runtime parameters one atom reads, given whether the accumulator is live."""
    if isinstance(atom, ParamAtom):
        return (atom.name,)
    if isinstance(atom, ReductionAtom):
        return (atom.source,)
    if isinstance(atom, LiteralAtom) or is_source(atom):
        return ()
    names: list[str] = []
    if isinstance(atom, RingAtom):
        if not seeded:
            names.append(atom.lhs)
        if isinstance(atom.rhs, str):
            names.append(atom.rhs)
        return tuple(names)
    if not seeded:
        names.append(atom.source)  # type: ignore[union-attr]
    if isinstance(atom, AlgebraAtom) and atom.op != "scale":
        names.append(atom.operand)
    return tuple(names)


def referenced_params(node: ExprNode, /) -> tuple[str, ...]:
    """Distinct runtime parameter names in first-use order."""
    seen: dict[str, None] = {}
    seeded = False
    for atom in iter_atoms(node):
        for name in atom_params(atom, seeded=seeded):
            seen.setdefault(name, None)
        seeded = True
    return tuple(seen)


def node_size(node: ExprNode, /) -> int:
    if isinstance(node, Sequential | Parallel):
        return 1 + node_size(node.left) + node_size(node.right)
    if isinstance(node, Transform):
        return 1 + node_size(node.child)
    return 1


def pretty_print(node: ExprNode, /) -> str:
    """Compact single-line rendering, e.g. `seq(R^1(lit 5), param x)`."""
    if isinstance(node, Sequential):
        return f"seq({pretty_print(node.left)}, {pretty_print(node.right)})"
    if isinstance(node, Parallel):
        return f"par({pretty_print(node.left)}, {pretty_print(node.right)})"
    if isinstance(node, Transform):
        return f"{node.op}({pretty_print(node.child)})"
    if isinstance(node, LiteralAtom):
        return f"lit {node.value}"
    if isinstance(node, ParamAtom):
        return f"param {node.name}"
    if isinstance(node, RingAtom):
        suffix = "!" if node.overflow == "track" else ""
        return f"{node.op}{suffix}({node.lhs}, {node.rhs})"
    if isinstance(node, ReductionAtom):
        return f"{node.op}[{node.source}]"
    if isinstance(node, UnitAtom):
        return f"{node.op}({node.source})"
    if isinstance(node, BridgeAtom):
        if node.class_index is not None:
            return f"lift {node.class_index}"
        return f"{node.op}({node.source})"
    if isinstance(node, GradeAtom):
        return f"grade<{node.grade}>({node.source})"
    if node.op == "scale":
        return f"scale*{node.scalar}({node.source})"
    return f"{node.op}({node.source}, {node.operand})"


__all__ = [
    "ATOM_TYPES",
    "AlgebraAtom",
    "AtomNode",
    "BridgeAtom",
    "ExprNode",
    "GradeAtom",
    "LiteralAtom",
    "Parallel",
    "ParamAtom",
    "ReductionAtom",
    "RingAtom",
    "Sequential",
    "Transform",
    "UnitAtom",
    "atom_params",
    "is_source",
    "is_terminal_atom",
    "iter_atoms",
    "node_size",
    "pretty_print",
    "referenced_params",
    "transform",
]
