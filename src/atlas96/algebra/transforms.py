from collections.abc import Iterable
from functools import lru_cache

import numpy as np

from atlas96.generators import GENERATOR_PERIODS, TransformKind, TransformOp

from .clifford import CONTEXT_BLADES, NUM_BLADES
from .element import AlgebraicElement
from .group_algebra import group_antipode, left_multiply_power, right_multiply_power

_TWIST_PERIOD = GENERATOR_PERIODS[TransformKind.TWIST]


@lru_cache(maxsize=_TWIST_PERIOD)
def _twist_gather(power: int, /) -> np.ndarray:
    """Index array `g` such that the twisted coefficients are `values[g]`."""
    gather = np.arange(NUM_BLADES)
    for position, blade in enumerate(CONTEXT_BLADES):
        target = CONTEXT_BLADES[(position + power) % _TWIST_PERIOD]
        gather[target] = blade
    gather.setflags(write=False)
    return gather


def transform_r(element: AlgebraicElement, k: int = 1, /) -> AlgebraicElement:
    """Left-multiply the Z4 part by `r^k`."""
    return element.replace(z4=left_multiply_power(element.z4, k))


def transform_d(element: AlgebraicElement, k: int = 1, /) -> AlgebraicElement:
    """Right-multiply the Z3 part by `tau^k`."""
    return element.replace(z3=right_multiply_power(element.z3, k))


def transform_t(element: AlgebraicElement, k: int = 1, /) -> AlgebraicElement:
    """Cycle the scalar and e1..e7 coefficients k steps; other blades stay put."""
    return element.replace(clifford=element.clifford[_twist_gather(k % _TWIST_PERIOD)])


def transform_m(element: AlgebraicElement, /) -> AlgebraicElement:
    """Antipode of the Z3 part."""
    return element.replace(z3=group_antipode(element.z3))


def apply_element_transform(
    element: AlgebraicElement, op: TransformOp, /
) -> AlgebraicElement:
    if op.kind is TransformKind.ROTATE:
        return transform_r(element, op.power)
    if op.kind is TransformKind.TRIALITY:
        return transform_d(element, op.power)
    if op.kind is TransformKind.TWIST:
        return transform_t(element, op.power)
    if op.power:
        return transform_m(element)
    return element


def apply_element_transforms(
    element: AlgebraicElement, ops: Iterable[TransformOp], /
) -> AlgebraicElement:
    """Apply transforms left to right (first op applied first)."""
    value = element
    for op in ops:
        value = apply_element_transform(value, op)
    return value


__all__ = [
    "apply_element_transform",
    "apply_element_transforms",
    "transform_d",
    "transform_m",
    "transform_r",
    "transform_t",
]
