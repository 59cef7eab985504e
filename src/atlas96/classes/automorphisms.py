from collections.abc import Iterable

from atlas96.generators import TransformKind, TransformOp

from .coords import D_PERIOD, H2_PERIOD, L_PERIOD, check_class_index, decode, encode

_MIRROR_D = (0, 2, 1)


def apply_rotation(index: int, k: int = 1, /) -> int:
    """R^k: advance the quadrant coordinate `h2` by k (mod 4)."""
    h2, d, ctx = decode(index)
    return encode((h2 + k) % H2_PERIOD, d, ctx)


def apply_triality(index: int, k: int = 1, /) -> int:
    """D^k: advance the modality coordinate `d` by k (mod 3)."""
    h2, d, ctx = decode(index)
    return encode(h2, (d + k) % D_PERIOD, ctx)


def apply_twist(index: int, k: int = 1, /) -> int:
    """T^k: advance the context coordinate `l` by k (mod 8)."""
    h2, d, ctx = decode(index)
    return encode(h2, d, (ctx + k) % L_PERIOD)


def apply_mirror(index: int, /) -> int:
    """M: swap modalities 1 and 2, fixing 0."""
    h2, d, ctx = decode(index)
    return encode(h2, _MIRROR_D[d], ctx)


def apply_transform(index: int, op: TransformOp, /) -> int:
    """Apply one generator power to a class index."""
    if op.kind is TransformKind.ROTATE:
        return apply_rotation(index, op.power)
    if op.kind is TransformKind.TRIALITY:
        return apply_triality(index, op.power)
    if op.kind is TransformKind.TWIST:
        return apply_twist(index, op.power)
    if op.power:
        return apply_mirror(index)
    return check_class_index(index)


def apply_transforms(index: int, ops: Iterable[TransformOp], /) -> int:
    """Apply transforms left to right (first op applied first)."""
    value = index
    for op in ops:
        value = apply_transform(value, op)
    return value


__all__ = [
    "apply_mirror",
    "apply_rotation",
    "apply_transform",
    "apply_transforms",
    "apply_triality",
    "apply_twist",
]
