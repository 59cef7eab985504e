from dataclasses import dataclass
from enum import IntEnum

from atlas96.config import DEFAULT_CONFIG, EngineConfig
from atlas96.ir.model import (
    AlgebraAtom,
    BridgeAtom,
    ExprNode,
    GradeAtom,
    Parallel,
    Sequential,
    Transform,
    iter_atoms,
    referenced_params,
)


class ComplexityTier(IntEnum):
    """Ordered complexity classes driving backend choice."""

    TIER0 = 0
    TIER1 = 1
    TIER2 = 2
    TIER3 = 3


@dataclass(frozen=True, slots=True)
class TreeMetrics:
    """Structural measurements of one normalized tree."""

    sequential_depth: int
    parallel_width: int
    grade_projections: int
    algebra_products: int
    runtime_params: tuple[str, ...]
    interior_lift: bool

    @property
    def algebraic_atoms(self) -> int:
        return self.grade_projections + self.algebra_products


def sequential_depth(node: ExprNode, /) -> int:
    """Atoms along the longest sequential chain."""
    if isinstance(node, Sequential):
        return sequential_depth(node.left) + sequential_depth(node.right)
    if isinstance(node, Parallel):
        return max(sequential_depth(node.left), sequential_depth(node.right))
    if isinstance(node, Transform):
        return sequential_depth(node.child)
    return 1


def parallel_width(node: ExprNode, /) -> int:
    """Atoms across the widest parallel fan-out."""
    if isinstance(node, Parallel):
        return parallel_width(node.left) + parallel_width(node.right)
    if isinstance(node, Sequential):
        return max(parallel_width(node.left), parallel_width(node.right))
    if isinstance(node, Transform):
        return parallel_width(node.child)
    return 1


def _has_interior_lift(node: ExprNode, *, under_transform: bool, is_last: bool) -> bool:
    if isinstance(node, Sequential | Parallel):
        return _has_interior_lift(
            node.left, under_transform=under_transform, is_last=False
        ) or _has_interior_lift(
            node.right, under_transform=under_transform, is_last=is_last
        )
    if isinstance(node, Transform):
        return _has_interior_lift(node.child, under_transform=True, is_last=is_last)
    if isinstance(node, BridgeAtom) and node.op == "lift":
        return under_transform or not is_last
    return False


def analyze(node: ExprNode, /) -> TreeMetrics:
    atoms = tuple(iter_atoms(node))
    return TreeMetrics(
        sequential_depth=sequential_depth(node),
        parallel_width=parallel_width(node),
        grade_projections=sum(isinstance(atom, GradeAtom) for atom in atoms),
        algebra_products=sum(isinstance(atom, AlgebraAtom) for atom in atoms),
        runtime_params=referenced_params(node),
        interior_lift=_has_interior_lift(node, under_transform=False, is_last=True),
    )


def classify(
    metrics: TreeMetrics, /, *, config: EngineConfig = DEFAULT_CONFIG
) -> ComplexityTier:
    """Assign the complexity tier of one analyzed tree."""
    if not metrics.runtime_params:
        return ComplexityTier.TIER0
    if (
        metrics.algebraic_atoms == 0
        and metrics.sequential_depth <= config.tier1_max_depth
        and metrics.parallel_width <= config.tier1_max_width
    ):
        return ComplexityTier.TIER1
    if (
        1 <= metrics.algebraic_atoms <= config.tier2_max_algebraic_atoms
        and metrics.sequential_depth <= config.tier2_max_depth
    ):
        return ComplexityTier.TIER2
    return ComplexityTier.TIER3


__all__ = [
    "ComplexityTier",
    "TreeMetrics",
    "analyze",
    "classify",
    "parallel_width",
    "sequential_depth",
]
