"""Integer Clifford algebra Cl(0,7) on bitmask-indexed blades.

Blade `b` is the wedge of the generators whose bits are set: bit `i - 1`
stands for `e_i`. Every generator squares to -1.

Coefficients are stored as Python integers in object arrays, so sums and
products never wrap. Contractions run in int64 whenever the operand sizes
bound the result below the int64 range.
"""

from functools import lru_cache

import numpy as np
import opt_einsum
from opt_einsum.contract import ContractExpression

from atlas96.diagnostics import ContractViolation, ErrorCode

NUM_GENERATORS = 7
NUM_BLADES = 1 << NUM_GENERATORS
MAX_GRADE = NUM_GENERATORS
COEFFICIENT_DTYPE = np.dtype(object)

_INT64_SAFE_BOUND = 1 << 62

# Scalar followed by e1..e7; the blades a class index can land on.
CONTEXT_BLADES: tuple[int, ...] = (0,) + tuple(
    1 << (generator - 1) for generator in range(1, NUM_GENERATORS + 1)
)

BLADE_GRADES = np.array(
    [bin(blade).count("1") for blade in range(NUM_BLADES)], dtype=np.int64
)


def blade_grade(blade: int, /) -> int:
    return bin(blade).count("1")


def blade_from_generators(*generators: int) -> int:
    """Bitmask of the wedge of distinct generators, e.g. `(1, 3) -> e13`."""
    blade = 0
    for generator in generators:
        if not 1 <= generator <= NUM_GENERATORS:
            raise ValueError(f"generator index must be in 1..7, got {generator}")
        bit = 1 << (generator - 1)
        if blade & bit:
            raise ValueError(f"generator e{generator} repeated in blade")
        blade |= bit
    return blade


def blade_name(blade: int, /) -> str:
    if blade == 0:
        return "1"
    digits = "".join(
        str(generator)
        for generator in range(1, NUM_GENERATORS + 1)
        if blade & (1 << (generator - 1))
    )
    return f"e{digits}"


def blade_product(lhs: int, rhs: int, /) -> tuple[int, int]:
    """Return `(sign, blade)` with `e_lhs * e_rhs = sign * e_blade`."""
    swaps = 0
    shifted = lhs >> 1
    while shifted:
        swaps += bin(shifted & rhs).count("1")
        shifted >>= 1
    swaps += bin(lhs & rhs).count("1")
    sign = -1 if swaps % 2 else 1
    return sign, lhs ^ rhs


@lru_cache(maxsize=1)
def clifford_structure_tensor() -> np.ndarray:
    """Dense `C[i, j, k]` with `e_i * e_j = sum_k C[i, j, k] e_k`."""
    tensor = np.zeros((NUM_BLADES, NUM_BLADES, NUM_BLADES), dtype=np.int8)
    for lhs in range(NUM_BLADES):
        for rhs in range(NUM_BLADES):
            sign, blade = blade_product(lhs, rhs)
            tensor[lhs, rhs, blade] = sign
    tensor.setflags(write=False)
    return tensor


def to_coefficients(array: np.ndarray, /, *, label: str) -> np.ndarray:
    """Fresh exact copy of an integer-valued array."""
    if array.dtype == COEFFICIENT_DTYPE:
        integral = all(
            isinstance(value, int | np.integer) and not isinstance(value, bool)
            for value in array.flat
        )
    else:
        integral = np.issubdtype(array.dtype, np.integer)
    if not integral:
        raise TypeError(f"{label} coefficients must be integers")
    coefficients = np.empty(array.shape, dtype=COEFFICIENT_DTYPE)
    coefficients.flat[:] = [int(value) for value in array.flat]
    return coefficients


def _max_abs(values: np.ndarray) -> int:
    return max((abs(int(value)) for value in values.flat), default=0)


def exact_contract(
    expression: ContractExpression, lhs: np.ndarray, rhs: np.ndarray, /
) -> np.ndarray:
    """Evaluate a bilinear `i,j,ijk->k` contraction with exact coefficients.

    Every output coefficient is a sum of at most `len(lhs)` products of
    entries with unit structure constants.
    """
    bound = _max_abs(lhs) * _max_abs(rhs) * lhs.shape[0]
    if bound < _INT64_SAFE_BOUND:
        result = expression(lhs.astype(np.int64), rhs.astype(np.int64))
    else:
        result = expression(lhs, rhs)
    return to_coefficients(np.asarray(result), label="contraction")


@lru_cache(maxsize=1)
def _product_expression() -> ContractExpression:
    return opt_einsum.contract_expression(
        "i,j,ijk->k",
        (NUM_BLADES,),
        (NUM_BLADES,),
        clifford_structure_tensor(),
        constants=[2],
        optimize="auto",
    )


def as_multivector(values: object, /) -> np.ndarray:
    """Coerce to a fresh integer coefficient vector of length 128."""
    array = np.asarray(values)
    if array.shape != (NUM_BLADES,):
        raise ValueError(
            f"blade coefficients must have shape ({NUM_BLADES},), got {array.shape}"
        )
    return to_coefficients(array, label="blade")


def zero_multivector() -> np.ndarray:
    return np.zeros(NUM_BLADES, dtype=COEFFICIENT_DTYPE)


def basis_blade(blade: int, coefficient: int = 1, /) -> np.ndarray:
    if not 0 <= blade < NUM_BLADES:
        raise ValueError(f"blade must be in 0..{NUM_BLADES - 1}, got {blade}")
    values = zero_multivector()
    values[blade] = coefficient
    return values


def scalar_multivector(value: int = 1, /) -> np.ndarray:
    return basis_blade(0, value)


def clifford_product(lhs: np.ndarray, rhs: np.ndarray, /) -> np.ndarray:
    """Geometric product of two multivectors."""
    return exact_contract(_product_expression(), lhs, rhs)


def clifford_add(lhs: np.ndarray, rhs: np.ndarray, /) -> np.ndarray:
    return lhs + rhs


def clifford_scale(values: np.ndarray, scalar: int, /) -> np.ndarray:
    return values * scalar


def clifford_negate(values: np.ndarray, /) -> np.ndarray:
    return -values


def check_grade(grade: object, /) -> int:
    if isinstance(grade, bool) or not isinstance(grade, int):
        grade_ok = False
    else:
        grade_ok = 0 <= grade <= MAX_GRADE
    if not grade_ok:
        raise ContractViolation(
            code=ErrorCode.GRADE_OUT_OF_RANGE,
            message=f"grade must be an integer in 0..{MAX_GRADE}, got {grade!r}",
        )
    return grade


def grade_project(values: np.ndarray, grade: int, /) -> np.ndarray:
    """Keep only the blades of one grade; mixed input is reshaped, not rejected."""
    check_grade(grade)
    return np.where(BLADE_GRADES == grade, values, 0).astype(COEFFICIENT_DTYPE)


def grades_present(values: np.ndarray, /) -> tuple[int, ...]:
    return tuple(sorted({int(BLADE_GRADES[blade]) for blade in np.flatnonzero(values)}))


def scalar_part(values: np.ndarray, /) -> int:
    return int(values[0])


def _grade_signs(sign_of_grade: np.ndarray) -> np.ndarray:
    return sign_of_grade[BLADE_GRADES]


_INVOLUTION_SIGNS = _grade_signs(
    np.array([(-1) ** grade for grade in range(MAX_GRADE + 1)], dtype=np.int64)
)
_REVERSION_SIGNS = _grade_signs(
    np.array(
        [(-1) ** (grade * (grade - 1) // 2) for grade in range(MAX_GRADE + 1)],
        dtype=np.int64,
    )
)


def grade_involution(values: np.ndarray, /) -> np.ndarray:
    """Negate odd grades."""
    return values * _INVOLUTION_SIGNS


def reversion(values: np.ndarray, /) -> np.ndarray:
    """Reverse generator order in every blade."""
    return values * _REVERSION_SIGNS


def clifford_conjugation(values: np.ndarray, /) -> np.ndarray:
    return values * (_INVOLUTION_SIGNS * _REVERSION_SIGNS)


__all__ = [
    "BLADE_GRADES",
    "COEFFICIENT_DTYPE",
    "CONTEXT_BLADES",
    "MAX_GRADE",
    "NUM_BLADES",
    "NUM_GENERATORS",
    "as_multivector",
    "basis_blade",
    "blade_from_generators",
    "blade_grade",
    "blade_name",
    "blade_product",
    "check_grade",
    "clifford_add",
    "clifford_conjugation",
    "clifford_negate",
    "clifford_product",
    "clifford_scale",
    "clifford_structure_tensor",
    "exact_contract",
    "grade_involution",
    "grade_project",
    "grades_present",
    "reversion",
    "scalar_multivector",
    "scalar_part",
    "to_coefficients",
    "zero_multivector",
]
