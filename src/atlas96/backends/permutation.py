from atlas96.bridge.conversion import ProjectedClass, lift
from atlas96.classes.automorphisms import apply_transform
from atlas96.classes.ring import (
    LATTICE_OPS,
    REDUCTION_OPS,
    RING_OPS,
    RingResult,
    factor96,
    is_unit96,
)
from atlas96.diagnostics import ContractViolation, ErrorCode, InternalAssertionError

from .instructions import (
    AlgebraStep,
    ApplyTransform,
    GradeStep,
    LiftStep,
    LoadLiteral,
    LoadParam,
    PermutationPlan,
    ProjectStep,
    ReduceStep,
    RingStep,
    UnitStep,
)
from .runtime import ExecutionResult, RuntimeParams, fetch_value, fetch_values


def _as_class(value: object, role: str) -> int:
    if not isinstance(value, int):
        raise ContractViolation(
            code=ErrorCode.RUNTIME_PARAM_KIND_MISMATCH,
            message=(
                f"permutation engine needs a class index for {role}, "
                f"got {type(value).__name__}"
            ),
            help="algebraic elements are executed by the algebraic engine",
        )
    return value


def _accumulator(acc: int | None, instruction: str) -> int:
    if acc is None:
        raise InternalAssertionError(
            f"{instruction} instruction read an unseeded accumulator",
            instruction=instruction,
        )
    return acc


def execute_permutation_plan(
    plan: PermutationPlan, params: RuntimeParams, /
) -> ExecutionResult:
    """Thread one class-index accumulator through the plan."""
    acc: int | None = None
    for instruction in plan.instructions:
        match instruction:
            case LoadLiteral(value=value):
                acc = value
            case LoadParam(name=name):
                acc = _as_class(fetch_value(params, name), f"parameter {name!r}")
            case ApplyTransform(op=op):
                acc = apply_transform(_accumulator(acc, instruction.kind), op)
            case RingStep(op=op, overflow=overflow, rhs=rhs):
                lhs = _accumulator(acc, instruction.kind)
                rhs_value = (
                    rhs
                    if isinstance(rhs, int)
                    else _as_class(fetch_value(params, rhs), f"parameter {rhs!r}")
                )
                if op in LATTICE_OPS:
                    acc = LATTICE_OPS[op](lhs, rhs_value)
                    continue
                outcome = RING_OPS[op](lhs, rhs_value, overflow=overflow)
                if isinstance(outcome, RingResult):
                    return outcome
                acc = outcome
            case ReduceStep(op=op, source=source):
                values = tuple(
                    _as_class(item, f"item of {source!r}")
                    for item in fetch_values(params, source)
                )
                acc = REDUCTION_OPS[op](values)
            case UnitStep(op=op):
                value = _accumulator(acc, instruction.kind)
                return is_unit96(value) if op == "is_unit" else factor96(value)
            case LiftStep(class_index=class_index):
                if class_index is not None:
                    return lift(class_index)
                return lift(_accumulator(acc, instruction.kind))
            case ProjectStep():
                return ProjectedClass(_accumulator(acc, instruction.kind))
            case GradeStep() | AlgebraStep():
                raise InternalAssertionError(
                    f"{instruction.kind} instruction reached the permutation engine",
                    instruction=instruction.kind,
                )
            case _:
                raise InternalAssertionError(f"unknown instruction {instruction!r}")
    return _accumulator(acc, "result")


__all__ = ["execute_permutation_plan"]
