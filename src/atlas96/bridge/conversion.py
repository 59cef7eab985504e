from dataclasses import dataclass
from typing import Final, TypeAlias

import numpy as np

from atlas96.algebra.clifford import CONTEXT_BLADES, basis_blade
from atlas96.algebra.element import AlgebraicElement
from atlas96.algebra.group_algebra import Z3_ORDER, Z4_ORDER, extract_power, group_power
from atlas96.classes.coords import decode, encode

_CONTEXT_POSITIONS: dict[int, int] = {
    blade: position for position, blade in enumerate(CONTEXT_BLADES)
}


@dataclass(frozen=True, slots=True)
class ProjectedClass:
    """Successful projection onto one class index."""

    index: int
    kind: str = "class"


@dataclass(frozen=True, slots=True)
class NotRankOne:
    """Projection outcome for elements with no class equivalent."""

    kind: str = "not_rank_one"

    def __repr__(self) -> str:
        return "NOT_RANK_ONE"


NOT_RANK_ONE: Final = NotRankOne()

ProjectionResult: TypeAlias = ProjectedClass | NotRankOne


def lift(index: int, /) -> AlgebraicElement:
    """Rank-1 element `b_l (x) r^h2 (x) tau^d` for one class index."""
    h2, d, ctx = decode(index)
    return AlgebraicElement(
        basis_blade(CONTEXT_BLADES[ctx]),
        group_power(Z4_ORDER, h2),
        group_power(Z3_ORDER, d),
    )


def _context_of(clifford: np.ndarray) -> int | None:
    nonzero = np.flatnonzero(clifford)
    if nonzero.size != 1 or clifford[nonzero[0]] != 1:
        return None
    return _CONTEXT_POSITIONS.get(int(nonzero[0]))


def project(element: AlgebraicElement, /) -> ProjectionResult:
    """Recover the class of a rank-1 element; `NOT_RANK_ONE` otherwise."""
    ctx = _context_of(element.clifford)
    if ctx is None:
        return NOT_RANK_ONE
    h2 = extract_power(element.z4)
    if h2 is None:
        return NOT_RANK_ONE
    d = extract_power(element.z3)
    if d is None:
        return NOT_RANK_ONE
    return ProjectedClass(encode(h2, d, ctx))


def is_rank_one(element: AlgebraicElement, /) -> bool:
    return isinstance(project(element), ProjectedClass)


__all__ = [
    "NOT_RANK_ONE",
    "NotRankOne",
    "ProjectedClass",
    "ProjectionResult",
    "is_rank_one",
    "lift",
    "project",
]
