from dataclasses import dataclass
from typing import Literal, TypeAlias

from atlas96.classes.ring import OverflowMode, ReductionOpName, RingOpName
from atlas96.generators import TransformOp
from atlas96.ir.model import AlgebraOpName, UnitOpName


@dataclass(frozen=True, slots=True)
class LoadLiteral:
    value: int
    kind: Literal["load_literal"] = "load_literal"


@dataclass(frozen=True, slots=True)
class LoadParam:
    """Replace the accumulator with one runtime parameter."""

    name: str
    kind: Literal["load_param"] = "load_param"


@dataclass(frozen=True, slots=True)
class ApplyTransform:
    op: TransformOp
    kind: Literal["transform"] = "transform"


@dataclass(frozen=True, slots=True)
class RingStep:
    """`acc <- op(acc, rhs)`; track mode ends the plan with a `RingResult`."""

    op: RingOpName
    overflow: OverflowMode
    rhs: str | int
    kind: Literal["ring"] = "ring"


@dataclass(frozen=True, slots=True)
class ReduceStep:
    op: ReductionOpName
    source: str
    kind: Literal["reduce"] = "reduce"


@dataclass(frozen=True, slots=True)
class UnitStep:
    op: UnitOpName
    kind: Literal["unit"] = "unit"


@dataclass(frozen=True, slots=True)
class LiftStep:
    """Lift a baked class index, or the accumulator when none is baked."""

    class_index: int | None = None
    kind: Literal["lift"] = "lift"


@dataclass(frozen=True, slots=True)
class ProjectStep:
    kind: Literal["project"] = "project"


@dataclass(frozen=True, slots=True)
class GradeStep:
    grade: int
    kind: Literal["grade"] = "grade"


@dataclass(frozen=True, slots=True)
class AlgebraStep:
    op: AlgebraOpName
    operand: str
    scalar: int
    kind: Literal["algebra"] = "algebra"


Instruction: TypeAlias = (
    LoadLiteral
    | LoadParam
    | ApplyTransform
    | RingStep
    | ReduceStep
    | UnitStep
    | LiftStep
    | ProjectStep
    | GradeStep
    | AlgebraStep
)
Instructions: TypeAlias = tuple[Instruction, ...]


@dataclass(frozen=True, slots=True)
class PermutationPlan:
    """Straight-line program over a class-index accumulator."""

    instructions: Instructions
    kind: Literal["permutation"] = "permutation"


@dataclass(frozen=True, slots=True)
class AlgebraicPlan:
    """Straight-line program over an algebraic-element accumulator."""

    instructions: Instructions
    kind: Literal["algebraic"] = "algebraic"


ExecutionPlan: TypeAlias = PermutationPlan | AlgebraicPlan


__all__ = [
    "AlgebraStep",
    "AlgebraicPlan",
    "ApplyTransform",
    "ExecutionPlan",
    "GradeStep",
    "Instruction",
    "Instructions",
    "LiftStep",
    "LoadLiteral",
    "LoadParam",
    "PermutationPlan",
    "ProjectStep",
    "ReduceStep",
    "RingStep",
    "UnitStep",
]
