import operator
from dataclasses import dataclass

try:
    from typing import Self
except ImportError:  # pragma: no cover
    from typing_extensions import Self

import numpy as np

from .clifford import (
    NUM_BLADES,
    as_multivector,
    blade_name,
    clifford_add,
    clifford_conjugation,
    clifford_product,
    clifford_scale,
    grade_involution,
    grade_project,
    reversion,
    scalar_multivector,
    zero_multivector,
)
from .group_algebra import (
    Z3_ORDER,
    Z4_ORDER,
    as_group_element,
    group_add,
    group_identity,
    group_multiply,
    group_scale,
    group_zero,
)


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, slots=True, eq=False)
class AlgebraicElement:
    """Composite element `clifford (x) z4 (x) z3` with exact integer coefficients."""

    clifford: np.ndarray
    z4: np.ndarray
    z3: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "clifford", _frozen(as_multivector(self.clifford)))
        object.__setattr__(self, "z4", _frozen(as_group_element(self.z4, Z4_ORDER)))
        object.__setattr__(self, "z3", _frozen(as_group_element(self.z3, Z3_ORDER)))

    @classmethod
    def identity(cls) -> Self:
        return cls(
            scalar_multivector(1), group_identity(Z4_ORDER), group_identity(Z3_ORDER)
        )

    @classmethod
    def zero(cls) -> Self:
        return cls(zero_multivector(), group_zero(Z4_ORDER), group_zero(Z3_ORDER))

    def replace(
        self,
        *,
        clifford: np.ndarray | None = None,
        z4: np.ndarray | None = None,
        z3: np.ndarray | None = None,
    ) -> "AlgebraicElement":
        """Return a copy with some parts swapped out."""
        return AlgebraicElement(
            self.clifford if clifford is None else clifford,
            self.z4 if z4 is None else z4,
            self.z3 if z3 is None else z3,
        )

    def is_zero(self) -> bool:
        return not (self.clifford.any() or self.z4.any() or self.z3.any())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AlgebraicElement):
            return NotImplemented
        return (
            np.array_equal(self.clifford, other.clifford)
            and np.array_equal(self.z4, other.z4)
            and np.array_equal(self.z3, other.z3)
        )

    def __hash__(self) -> int:
        return hash(
            (
                tuple(self.clifford.tolist()),
                tuple(self.z4.tolist()),
                tuple(self.z3.tolist()),
            )
        )

    def __mul__(self, other: "AlgebraicElement") -> "AlgebraicElement":
        if not isinstance(other, AlgebraicElement):
            return NotImplemented
        return multiply(self, other)

    def __add__(self, other: "AlgebraicElement") -> "AlgebraicElement":
        if not isinstance(other, AlgebraicElement):
            return NotImplemented
        return add(self, other)

    def __str__(self) -> str:
        blade_terms = [
            f"{int(self.clifford[blade])}*{blade_name(blade)}"
            for blade in range(NUM_BLADES)
            if self.clifford[blade]
        ]
        z4_terms = [f"{int(c)}*r^{i}" for i, c in enumerate(self.z4) if c]
        z3_terms = [f"{int(c)}*t^{i}" for i, c in enumerate(self.z3) if c]
        parts = (
            " + ".join(terms) if terms else "0"
            for terms in (blade_terms, z4_terms, z3_terms)
        )
        return " (x) ".join(f"({part})" for part in parts)

    def __repr__(self) -> str:
        return f"AlgebraicElement({self})"


def _check_scalar(scalar: object) -> int:
    if isinstance(scalar, bool):
        raise TypeError("scalar must be an integer, not bool")
    try:
        return operator.index(scalar)  # type: ignore[arg-type]
    except TypeError as error:
        raise TypeError(
            f"scalar must be an integer, got {type(scalar).__name__}"
        ) from error


def multiply(lhs: AlgebraicElement, rhs: AlgebraicElement, /) -> AlgebraicElement:
    """Component-wise product: geometric product and two group convolutions."""
    return AlgebraicElement(
        clifford_product(lhs.clifford, rhs.clifford),
        group_multiply(lhs.z4, rhs.z4),
        group_multiply(lhs.z3, rhs.z3),
    )


def add(lhs: AlgebraicElement, rhs: AlgebraicElement, /) -> AlgebraicElement:
    return AlgebraicElement(
        clifford_add(lhs.clifford, rhs.clifford),
        group_add(lhs.z4, rhs.z4),
        group_add(lhs.z3, rhs.z3),
    )


def scale(element: AlgebraicElement, scalar: int, /) -> AlgebraicElement:
    """Multiply every part by an integer scalar."""
    value = _check_scalar(scalar)
    return AlgebraicElement(
        clifford_scale(element.clifford, value),
        group_scale(element.z4, value),
        group_scale(element.z3, value),
    )


def power(element: AlgebraicElement, exponent: int, /) -> AlgebraicElement:
    """Repeated product by squaring; exponent 0 is the identity."""
    if exponent < 0:
        raise ValueError("exponent must be non-negative")
    result = AlgebraicElement.identity()
    base = element
    remaining = exponent
    while remaining:
        if remaining & 1:
            result = multiply(result, base)
        base = multiply(base, base)
        remaining >>= 1
    return result


def project_grade(element: AlgebraicElement, grade: int, /) -> AlgebraicElement:
    """Grade projection of the blade part; the group parts pass through."""
    return element.replace(clifford=grade_project(element.clifford, grade))


def involute(element: AlgebraicElement, /) -> AlgebraicElement:
    return element.replace(clifford=grade_involution(element.clifford))


def reverse(element: AlgebraicElement, /) -> AlgebraicElement:
    return element.replace(clifford=reversion(element.clifford))


def conjugate(element: AlgebraicElement, /) -> AlgebraicElement:
    return element.replace(clifford=clifford_conjugation(element.clifford))


__all__ = [
    "AlgebraicElement",
    "add",
    "conjugate",
    "involute",
    "multiply",
    "power",
    "project_grade",
    "reverse",
    "scale",
]
