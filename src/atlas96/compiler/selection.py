import logging
from enum import Enum
from typing import Literal, TypeAlias

from atlas96.diagnostics import ConstructionError, ErrorCode

from .analysis import ComplexityTier, TreeMetrics

logger = logging.getLogger(__name__)

BackendPreference: TypeAlias = Literal["permutation", "algebraic", "auto"]

BACKEND_PREFERENCES: frozenset[str] = frozenset({"permutation", "algebraic", "auto"})


class BackendKind(str, Enum):
    PERMUTATION = "permutation"
    ALGEBRAIC = "algebraic"


def select_backend(
    tier: ComplexityTier,
    metrics: TreeMetrics,
    *,
    prefer: BackendPreference = "auto",
) -> BackendKind:
    """Pick the execution engine for one analyzed tree.

    Grade projections and composite algebra atoms always need the algebraic
    engine. Otherwise an explicit preference wins, and `auto` uses the
    permutation engine for Tier0/Tier1 unless a lift feeds later instructions.
    """
    if prefer not in BACKEND_PREFERENCES:
        raise ConstructionError(
            code=ErrorCode.INVALID_DESCRIPTOR,
            message=f"unknown backend preference {prefer!r}",
            help="use 'permutation', 'algebraic', or 'auto'",
        )
    if metrics.algebraic_atoms:
        if prefer == "permutation":
            logger.debug(
                "overriding 'permutation' preference: tree needs algebraic atoms"
            )
        return BackendKind.ALGEBRAIC
    if prefer == "permutation":
        if metrics.interior_lift:
            raise ConstructionError(
                code=ErrorCode.INVALID_PLAN_SHAPE,
                message="lift produces an algebraic element the permutation engine "
                "cannot thread through later instructions",
                help="prefer 'algebraic' or 'auto' for this expression",
            )
        return BackendKind.PERMUTATION
    if prefer == "algebraic":
        return BackendKind.ALGEBRAIC
    if tier <= ComplexityTier.TIER1 and not metrics.interior_lift:
        return BackendKind.PERMUTATION
    return BackendKind.ALGEBRAIC


__all__ = [
    "BACKEND_PREFERENCES",
    "BackendKind",
    "BackendPreference",
    "select_backend",
]
