import logging
from dataclasses import dataclass

from atlas96.backends.instructions import AlgebraicPlan, ExecutionPlan, Instructions
from atlas96.backends.lowering import (
    build_algebraic_plan,
    build_permutation_plan,
    lower,
)
from atlas96.config import DEFAULT_CONFIG, EngineConfig
from atlas96.ir.model import ExprNode, pretty_print

from .analysis import ComplexityTier, TreeMetrics, analyze, classify
from .rewrite import normalize
from .selection import BackendKind, BackendPreference, select_backend

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompilationResult:
    """Everything compilation derives from one expression tree."""

    normalized: ExprNode
    metrics: TreeMetrics
    tier: ComplexityTier
    backend: BackendKind
    instructions: Instructions
    plan: ExecutionPlan
    element_plan: AlgebraicPlan


def compile_tree(
    tree: ExprNode,
    /,
    *,
    prefer: BackendPreference = "auto",
    config: EngineConfig = DEFAULT_CONFIG,
) -> CompilationResult:
    """Normalize, classify, select, and lower one tree."""
    normalized = normalize(tree)
    metrics = analyze(normalized)
    tier = classify(metrics, config=config)
    backend = select_backend(tier, metrics, prefer=prefer)
    instructions = lower(normalized)
    element_plan = build_algebraic_plan(instructions)
    plan: ExecutionPlan
    if backend is BackendKind.PERMUTATION:
        plan = build_permutation_plan(instructions)
    else:
        plan = element_plan
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "compiled %s -> %s (%s, %d instructions)",
            pretty_print(normalized),
            backend.value,
            tier.name,
            len(instructions),
        )
    return CompilationResult(
        normalized=normalized,
        metrics=metrics,
        tier=tier,
        backend=backend,
        instructions=instructions,
        plan=plan,
        element_plan=element_plan,
    )


__all__ = ["CompilationResult", "compile_tree"]
