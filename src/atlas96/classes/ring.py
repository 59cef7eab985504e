from collections.abc import Iterable
from dataclasses import dataclass
from math import gcd
from typing import Literal, TypeAlias

from .coords import NUM_CLASSES, check_class_index

OverflowMode: TypeAlias = Literal["drop", "track"]
RingOpName: TypeAlias = Literal["add", "sub", "mul", "gcd", "lcm"]
ReductionOpName: TypeAlias = Literal["sum", "product", "max", "min"]

_OVERFLOW_MODES: frozenset[str] = frozenset({"drop", "track"})


@dataclass(frozen=True, slots=True)
class RingResult:
    """Ring value paired with an explicitly requested overflow flag."""

    value: int
    overflow: bool


def _check_mode(overflow: str) -> None:
    if overflow not in _OVERFLOW_MODES:
        raise ValueError(f"overflow mode must be 'drop' or 'track', got {overflow!r}")


def _finish(raw: int, overflowed: bool, overflow: OverflowMode) -> int | RingResult:
    value = raw % NUM_CLASSES
    if overflow == "track":
        return RingResult(value=value, overflow=overflowed)
    return value


def add96(a: int, b: int, /, *, overflow: OverflowMode = "drop") -> int | RingResult:
    """Add mod 96; track mode reports `a + b >= 96`."""
    _check_mode(overflow)
    raw = check_class_index(a, name="lhs") + check_class_index(b, name="rhs")
    return _finish(raw, raw >= NUM_CLASSES, overflow)


def sub96(a: int, b: int, /, *, overflow: OverflowMode = "drop") -> int | RingResult:
    """Subtract mod 96; track mode reports borrow (`a - b < 0`)."""
    _check_mode(overflow)
    raw = check_class_index(a, name="lhs") - check_class_index(b, name="rhs")
    return _finish(raw, raw < 0, overflow)


def mul96(a: int, b: int, /, *, overflow: OverflowMode = "drop") -> int | RingResult:
    """Multiply mod 96; track mode reports `a * b >= 96`."""
    _check_mode(overflow)
    raw = check_class_index(a, name="lhs") * check_class_index(b, name="rhs")
    return _finish(raw, raw >= NUM_CLASSES, overflow)


def gcd96(a: int, b: int, /) -> int:
    """Greatest common divisor of two residues; `gcd96(0, 0) == 0`."""
    return gcd(check_class_index(a, name="lhs"), check_class_index(b, name="rhs"))


def lcm96(a: int, b: int, /) -> int:
    """Least common multiple reduced mod 96; zero if either operand is zero."""
    lhs = check_class_index(a, name="lhs")
    rhs = check_class_index(b, name="rhs")
    if lhs == 0 or rhs == 0:
        return 0
    return (lhs * rhs // gcd(lhs, rhs)) % NUM_CLASSES


def sum96(values: Iterable[int], /) -> int:
    total = 0
    for value in values:
        operand = check_class_index(value, name="reduction operand")
        total = (total + operand) % NUM_CLASSES
    return total


def product96(values: Iterable[int], /) -> int:
    total = 1
    for value in values:
        operand = check_class_index(value, name="reduction operand")
        total = (total * operand) % NUM_CLASSES
    return total


def max96(values: Iterable[int], /) -> int:
    """Largest residue, or 0 for an empty sequence."""
    checked = [check_class_index(value, name="reduction operand") for value in values]
    return max(checked, default=0)


def min96(values: Iterable[int], /) -> int:
    """Smallest residue, or 0 for an empty sequence."""
    checked = [check_class_index(value, name="reduction operand") for value in values]
    return min(checked, default=0)


UNITS_96: tuple[int, ...] = tuple(
    n for n in range(NUM_CLASSES) if gcd(n, NUM_CLASSES) == 1
)


def is_unit96(n: int, /) -> bool:
    """Whether `n` is invertible mod 96, i.e. coprime to 96."""
    return gcd(check_class_index(n), NUM_CLASSES) == 1


def factor96(n: int, /) -> tuple[int, ...]:
    """Trial-divide by the non-trivial units.

    Units factor exactly (`product96(factor96(u)) == u`). Non-units keep only
    the unit divisors that were found, and residues with no unit divisor
    factor to themselves.
    """
    value = check_class_index(n)
    if value in (0, 1):
        return (value,)
    factors: list[int] = []
    remaining = value
    for unit in UNITS_96[1:]:
        while remaining > 1 and remaining % unit == 0:
            factors.append(unit)
            remaining = (remaining // unit) % NUM_CLASSES
    return tuple(factors) if factors else (value,)


RING_OPS = {
    "add": add96,
    "sub": sub96,
    "mul": mul96,
}
LATTICE_OPS = {
    "gcd": gcd96,
    "lcm": lcm96,
}
REDUCTION_OPS = {
    "sum": sum96,
    "product": product96,
    "max": max96,
    "min": min96,
}


__all__ = [
    "LATTICE_OPS",
    "OverflowMode",
    "REDUCTION_OPS",
    "RING_OPS",
    "ReductionOpName",
    "RingOpName",
    "RingResult",
    "UNITS_96",
    "add96",
    "factor96",
    "gcd96",
    "is_unit96",
    "lcm96",
    "max96",
    "min96",
    "mul96",
    "product96",
    "sub96",
    "sum96",
]
