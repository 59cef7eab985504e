from atlas96.algebra.element import (
    AlgebraicElement,
    add,
    multiply,
    project_grade,
    scale,
)
from atlas96.algebra.transforms import apply_element_transform
from atlas96.bridge.conversion import lift, project
from atlas96.classes.ring import (
    LATTICE_OPS,
    REDUCTION_OPS,
    RING_OPS,
    RingResult,
    factor96,
    is_unit96,
)
from atlas96.diagnostics import InternalAssertionError

from .instructions import (
    AlgebraicPlan,
    AlgebraStep,
    ApplyTransform,
    GradeStep,
    LiftStep,
    LoadLiteral,
    LoadParam,
    ProjectStep,
    ReduceStep,
    RingStep,
    UnitStep,
)
from .runtime import (
    ExecutionResult,
    RuntimeParams,
    RuntimeValue,
    fetch_value,
    fetch_values,
    require_class,
)


def as_element(value: RuntimeValue, /) -> AlgebraicElement:
    """Lift class indices; pass elements through."""
    if isinstance(value, AlgebraicElement):
        return value
    return lift(value)


def _accumulator(acc: AlgebraicElement | None, instruction: str) -> AlgebraicElement:
    if acc is None:
        raise InternalAssertionError(
            f"{instruction} instruction read an unseeded accumulator",
            instruction=instruction,
        )
    return acc


def execute_algebraic_plan(
    plan: AlgebraicPlan, params: RuntimeParams, /
) -> ExecutionResult:
    """Thread one algebraic-element accumulator through the plan.

    Ring, reduction, and unit steps work on the class of their operands, so
    those operands must project. Their class results are lifted back unless
    the step ends the plan, in which case the plain class index is returned.
    """
    acc: AlgebraicElement | None = None
    last = len(plan.instructions) - 1
    for position, instruction in enumerate(plan.instructions):
        match instruction:
            case LoadLiteral(value=value):
                acc = lift(value)
            case LoadParam(name=name):
                acc = as_element(fetch_value(params, name))
            case ApplyTransform(op=op):
                acc = apply_element_transform(_accumulator(acc, instruction.kind), op)
            case RingStep(op=op, overflow=overflow, rhs=rhs):
                lhs = require_class(
                    _accumulator(acc, instruction.kind), role="ring lhs"
                )
                rhs_value = (
                    rhs
                    if isinstance(rhs, int)
                    else require_class(
                        fetch_value(params, rhs), role=f"ring rhs {rhs!r}"
                    )
                )
                if op in LATTICE_OPS:
                    outcome = LATTICE_OPS[op](lhs, rhs_value)
                else:
                    outcome = RING_OPS[op](lhs, rhs_value, overflow=overflow)
                if isinstance(outcome, RingResult) or position == last:
                    return outcome
                acc = lift(outcome)
            case ReduceStep(op=op, source=source):
                values = tuple(
                    require_class(item, role=f"item of {source!r}")
                    for item in fetch_values(params, source)
                )
                reduced = REDUCTION_OPS[op](values)
                if position == last:
                    return reduced
                acc = lift(reduced)
            case UnitStep(op=op):
                value = require_class(
                    _accumulator(acc, instruction.kind), role="unit operand"
                )
                return is_unit96(value) if op == "is_unit" else factor96(value)
            case LiftStep(class_index=class_index):
                if class_index is not None:
                    acc = lift(class_index)
                else:
                    acc = _accumulator(acc, instruction.kind)
            case ProjectStep():
                return project(_accumulator(acc, instruction.kind))
            case GradeStep(grade=grade):
                acc = project_grade(_accumulator(acc, instruction.kind), grade)
            case AlgebraStep(op="scale", scalar=scalar):
                acc = scale(_accumulator(acc, instruction.kind), scalar)
            case AlgebraStep(op=op, operand=operand):
                lhs_element = _accumulator(acc, instruction.kind)
                rhs_element = as_element(fetch_value(params, operand))
                if op == "multiply":
                    acc = multiply(lhs_element, rhs_element)
                else:
                    acc = add(lhs_element, rhs_element)
            case _:
                raise InternalAssertionError(f"unknown instruction {instruction!r}")
    return _accumulator(acc, "result")


__all__ = ["as_element", "execute_algebraic_plan"]
