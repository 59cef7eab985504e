from .automorphisms import (
    apply_mirror,
    apply_rotation,
    apply_transform,
    apply_transforms,
    apply_triality,
    apply_twist,
)
from .coords import NUM_CLASSES, ClassCoordinates, check_class_index, decode, encode
from .ring import (
    UNITS_96,
    RingResult,
    add96,
    factor96,
    gcd96,
    is_unit96,
    lcm96,
    max96,
    min96,
    mul96,
    product96,
    sub96,
    sum96,
)

__all__ = [
    "ClassCoordinates",
    "NUM_CLASSES",
    "RingResult",
    "UNITS_96",
    "add96",
    "apply_mirror",
    "apply_rotation",
    "apply_transform",
    "apply_transforms",
    "apply_triality",
    "apply_twist",
    "check_class_index",
    "decode",
    "encode",
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
