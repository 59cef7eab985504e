"""Integer group algebras of the cyclic groups Z4 and Z3.

An element is a coefficient vector `c` meaning `sum_i c[i] g^i`.
"""

from functools import lru_cache

import numpy as np
import opt_einsum
from opt_einsum.contract import ContractExpression

from .clifford import COEFFICIENT_DTYPE, exact_contract, to_coefficients

Z4_ORDER = 4
Z3_ORDER = 3


def as_group_element(values: object, order: int, /) -> np.ndarray:
    """Coerce to a fresh integer coefficient vector of the given order."""
    array = np.asarray(values)
    if array.shape != (order,):
        raise ValueError(
            f"group coefficients must have shape ({order},), got {array.shape}"
        )
    return to_coefficients(array, label="group")


def group_zero(order: int, /) -> np.ndarray:
    return np.zeros(order, dtype=COEFFICIENT_DTYPE)


def group_power(order: int, power: int, /) -> np.ndarray:
    """Basis element `g^power`."""
    values = group_zero(order)
    values[power % order] = 1
    return values


def group_identity(order: int, /) -> np.ndarray:
    return group_power(order, 0)


@lru_cache(maxsize=8)
def cyclic_structure_tensor(order: int, /) -> np.ndarray:
    """`G[i, j, k] = 1` exactly when `k = (i + j) mod order`."""
    tensor = np.zeros((order, order, order), dtype=np.int8)
    for lhs in range(order):
        for rhs in range(order):
            tensor[lhs, rhs, (lhs + rhs) % order] = 1
    tensor.setflags(write=False)
    return tensor


@lru_cache(maxsize=8)
def _convolution_expression(order: int, /) -> ContractExpression:
    return opt_einsum.contract_expression(
        "i,j,ijk->k",
        (order,),
        (order,),
        cyclic_structure_tensor(order),
        constants=[2],
    )


def group_multiply(lhs: np.ndarray, rhs: np.ndarray, /) -> np.ndarray:
    """Cyclic convolution of coefficient vectors."""
    if lhs.shape != rhs.shape:
        raise ValueError("group algebra operands must have the same order")
    return exact_contract(_convolution_expression(lhs.shape[0]), lhs, rhs)


def group_add(lhs: np.ndarray, rhs: np.ndarray, /) -> np.ndarray:
    if lhs.shape != rhs.shape:
        raise ValueError("group algebra operands must have the same order")
    return lhs + rhs


def group_scale(values: np.ndarray, scalar: int, /) -> np.ndarray:
    return values * scalar


def group_antipode(values: np.ndarray, /) -> np.ndarray:
    """Linear extension of `g -> g^-1`: `c'[i] = c[-i mod n]`."""
    return np.roll(values[::-1], 1).astype(COEFFICIENT_DTYPE, copy=True)


def left_multiply_power(values: np.ndarray, power: int, /) -> np.ndarray:
    """`g^power * x`."""
    return group_multiply(group_power(values.shape[0], power), values)


def right_multiply_power(values: np.ndarray, power: int, /) -> np.ndarray:
    """`x * g^power`."""
    return group_multiply(values, group_power(values.shape[0], power))


def extract_power(values: np.ndarray, /) -> int | None:
    """Return `k` when `values` is exactly the basis element `g^k`."""
    nonzero = np.flatnonzero(values)
    if nonzero.size != 1 or values[nonzero[0]] != 1:
        return None
    return int(nonzero[0])


__all__ = [
    "Z3_ORDER",
    "Z4_ORDER",
    "as_group_element",
    "cyclic_structure_tensor",
    "extract_power",
    "group_add",
    "group_antipode",
    "group_identity",
    "group_multiply",
    "group_power",
    "group_scale",
    "group_zero",
    "left_multiply_power",
    "right_multiply_power",
]
