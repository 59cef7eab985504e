from .algebraic import execute_algebraic_plan
from .instructions import AlgebraicPlan, ExecutionPlan, Instruction, PermutationPlan
from .lowering import build_algebraic_plan, build_permutation_plan, lower
from .permutation import execute_permutation_plan
from .runtime import ExecutionResult, RuntimeParams


def execute_plan(plan: ExecutionPlan, params: RuntimeParams, /) -> ExecutionResult:
    """Run a plan on the engine it was lowered for."""
    if isinstance(plan, PermutationPlan):
        return execute_permutation_plan(plan, params)
    return execute_algebraic_plan(plan, params)


__all__ = [
    "AlgebraicPlan",
    "ExecutionPlan",
    "ExecutionResult",
    "Instruction",
    "PermutationPlan",
    "RuntimeParams",
    "build_algebraic_plan",
    "build_permutation_plan",
    "execute_algebraic_plan",
    "execute_permutation_plan",
    "execute_plan",
    "lower",
]
