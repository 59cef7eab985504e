"""Octonion channel over the seven imaginary units e1..e7.

Multiplication among imaginary units follows the Fano plane: on each
oriented line `(a, b, c)` we have `e_a e_b = e_c` and its cyclic shifts.
"""

from functools import lru_cache

import numpy as np
import opt_einsum
from opt_einsum.contract import ContractExpression

from .clifford import COEFFICIENT_DTYPE, exact_contract, to_coefficients

OCTONION_DIMENSION = 8

FANO_LINES: tuple[tuple[int, int, int], ...] = (
    (1, 2, 4),
    (2, 3, 5),
    (3, 4, 6),
    (4, 5, 7),
    (5, 6, 1),
    (6, 7, 2),
    (7, 1, 3),
)


def _check_unit(index: int, /) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 1 <= index <= 7:
        raise ValueError(f"imaginary unit index must be in 1..7, got {index!r}")


@lru_cache(maxsize=1)
def _cross_table() -> dict[tuple[int, int], tuple[int, int]]:
    table: dict[tuple[int, int], tuple[int, int]] = {}
    for a, b, c in FANO_LINES:
        for x, y, z in ((a, b, c), (b, c, a), (c, a, b)):
            table[(x, y)] = (z, 1)
            table[(y, x)] = (z, -1)
    return table


def cross_product(i: int, j: int, /) -> tuple[int, int]:
    """Return `(k, sign)` with `e_i e_j = sign * e_k`; `(0, 0)` when `i == j`."""
    _check_unit(i)
    _check_unit(j)
    if i == j:
        return (0, 0)
    return _cross_table()[(i, j)]


def is_fano_line(i: int, j: int, k: int, /) -> bool:
    """Whether `(i, j, k)` is an oriented line up to cyclic rotation."""
    return (i, j, k) in {
        rotation
        for a, b, c in FANO_LINES
        for rotation in ((a, b, c), (b, c, a), (c, a, b))
    }


def lines_containing(index: int, /) -> tuple[tuple[int, int, int], ...]:
    _check_unit(index)
    return tuple(line for line in FANO_LINES if index in line)


@lru_cache(maxsize=1)
def octonion_structure_tensor() -> np.ndarray:
    """`O[i, j, k]` with `e_i e_j = sum_k O[i, j, k] e_k`, `e_0 = 1`."""
    tensor = np.zeros((OCTONION_DIMENSION,) * 3, dtype=np.int8)
    for i in range(OCTONION_DIMENSION):
        tensor[0, i, i] = 1
        tensor[i, 0, i] = 1
    for i in range(1, OCTONION_DIMENSION):
        tensor[i, i, 0] = -1
        for j in range(1, OCTONION_DIMENSION):
            if i != j:
                k, sign = cross_product(i, j)
                tensor[i, j, k] = sign
    tensor.setflags(write=False)
    return tensor


@lru_cache(maxsize=1)
def _cayley_expression() -> ContractExpression:
    return opt_einsum.contract_expression(
        "i,j,ijk->k",
        (OCTONION_DIMENSION,),
        (OCTONION_DIMENSION,),
        octonion_structure_tensor(),
        constants=[2],
    )


def as_octonion(values: object, /) -> np.ndarray:
    array = np.asarray(values)
    if array.shape != (OCTONION_DIMENSION,):
        raise ValueError(
            f"octonion must have shape ({OCTONION_DIMENSION},), got {array.shape}"
        )
    return to_coefficients(array, label="octonion")


def octonion_unit(index: int, /) -> np.ndarray:
    """Basis octonion `e_index` (`e_0` is the real unit)."""
    values = np.zeros(OCTONION_DIMENSION, dtype=COEFFICIENT_DTYPE)
    values[index] = 1
    return values


def cayley_product(lhs: object, rhs: object, /) -> np.ndarray:
    return exact_contract(_cayley_expression(), as_octonion(lhs), as_octonion(rhs))


def octonion_conjugate(values: object, /) -> np.ndarray:
    conjugated = as_octonion(values)
    conjugated[1:] *= -1
    return conjugated


def octonion_norm_squared(values: object, /) -> int:
    array = as_octonion(values)
    return int(array @ array)


def is_alternative(lhs: object, rhs: object, /) -> bool:
    """Check `x(xy) = (xx)y` and `(yx)x = y(xx)` for one pair."""
    x = as_octonion(lhs)
    y = as_octonion(rhs)
    xx = cayley_product(x, x)
    left = np.array_equal(
        cayley_product(x, cayley_product(x, y)), cayley_product(xx, y)
    )
    right = np.array_equal(
        cayley_product(cayley_product(y, x), x), cayley_product(y, xx)
    )
    return left and right


def is_norm_multiplicative(lhs: object, rhs: object, /) -> bool:
    """Check `|xy|^2 = |x|^2 |y|^2` for one pair."""
    product = cayley_product(lhs, rhs)
    return octonion_norm_squared(product) == (
        octonion_norm_squared(lhs) * octonion_norm_squared(rhs)
    )


__all__ = [
    "FANO_LINES",
    "OCTONION_DIMENSION",
    "as_octonion",
    "cayley_product",
    "cross_product",
    "is_alternative",
    "is_fano_line",
    "is_norm_multiplicative",
    "lines_containing",
    "octonion_conjugate",
    "octonion_norm_squared",
    "octonion_structure_tensor",
    "octonion_unit",
]
