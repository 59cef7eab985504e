from .conversion import (
    NOT_RANK_ONE,
    NotRankOne,
    ProjectedClass,
    is_rank_one,
    lift,
    project,
)
from .validation import (
    BridgeValidationReport,
    check_algebraic_laws,
    check_permutation_laws,
    run_bridge_validation,
)

__all__ = [
    "BridgeValidationReport",
    "NOT_RANK_ONE",
    "NotRankOne",
    "ProjectedClass",
    "check_algebraic_laws",
    "check_permutation_laws",
    "is_rank_one",
    "lift",
    "project",
    "run_bridge_validation",
]
