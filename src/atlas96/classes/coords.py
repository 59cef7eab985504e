from typing import NamedTuple

from atlas96.diagnostics import ContractViolation, ErrorCode

NUM_CLASSES = 96
H2_PERIOD = 4
D_PERIOD = 3
L_PERIOD = 8


class ClassCoordinates(NamedTuple):
    """Coordinate triple of one class: `class = 24*h2 + 8*d + l`."""

    h2: int
    d: int
    l: int


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_class_index(index: object, /, *, name: str = "class index") -> int:
    """Return `index` unchanged when it is a valid class index, else raise."""
    if not _is_int(index) or not 0 <= index < NUM_CLASSES:  # type: ignore[operator]
        raise ContractViolation(
            code=ErrorCode.CLASS_INDEX_OUT_OF_RANGE,
            message=f"{name} must be an integer in 0..95, got {index!r}",
            help="class indices enumerate the 96 classes as 24*h2 + 8*d + l",
            data={"name": name},
        )
    return index  # type: ignore[return-value]


def decode(index: int, /) -> ClassCoordinates:
    """Split a class index into its `(h2, d, l)` coordinates."""
    value = check_class_index(index)
    h2, remainder = divmod(value, 24)
    d, ctx = divmod(remainder, 8)
    return ClassCoordinates(h2, d, ctx)


def encode(h2: int, d: int, ctx: int, /) -> int:
    """Join coordinates back into a class index."""
    for name, value, period in (
        ("h2", h2, H2_PERIOD),
        ("d", d, D_PERIOD),
        ("l", ctx, L_PERIOD),
    ):
        if not _is_int(value) or not 0 <= value < period:
            raise ContractViolation(
                code=ErrorCode.CLASS_INDEX_OUT_OF_RANGE,
                message=f"coordinate {name} must be in 0..{period - 1}, got {value!r}",
                data={"coordinate": name},
            )
    return 24 * h2 + 8 * d + ctx


__all__ = [
    "ClassCoordinates",
    "D_PERIOD",
    "H2_PERIOD",
    "L_PERIOD",
    "NUM_CLASSES",
    "check_class_index",
    "decode",
    "encode",
]
