from dataclasses import dataclass
from enum import Enum


class TransformKind(str, Enum):
    """The four structural automorphism generators."""

    ROTATE = "R"
    TRIALITY = "D"
    TWIST = "T"
    MIRROR = "M"


GENERATOR_PERIODS: dict[TransformKind, int] = {
    TransformKind.ROTATE: 4,
    TransformKind.TRIALITY: 3,
    TransformKind.TWIST: 8,
    TransformKind.MIRROR: 2,
}


def coerce_transform_kind(kind: "TransformKind | str", /) -> TransformKind:
    """Accept either the enum member or its one-letter symbol."""
    if isinstance(kind, TransformKind):
        return kind
    try:
        return TransformKind(kind)
    except ValueError as error:
        raise ValueError(
            f"unknown transform kind {kind!r}; expected one of R, D, T, M"
        ) from error


@dataclass(frozen=True, slots=True)
class TransformOp:
    """One generator raised to a power, reduced modulo the generator period."""

    kind: TransformKind
    power: int = 1

    def __post_init__(self) -> None:
        kind = coerce_transform_kind(self.kind)
        if isinstance(self.power, bool) or not isinstance(self.power, int):
            raise TypeError("transform power must be an integer")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "power", self.power % GENERATOR_PERIODS[kind])

    @property
    def period(self) -> int:
        return GENERATOR_PERIODS[self.kind]

    @property
    def is_identity(self) -> bool:
        return self.power == 0

    def inverse(self) -> "TransformOp":
        """Return the inverse power of the same generator."""
        return TransformOp(self.kind, -self.power)

    def compose(self, other: "TransformOp", /) -> "TransformOp":
        """Fold two same-generator powers into one."""
        if other.kind is not self.kind:
            raise ValueError("only same-generator transforms can be folded")
        return TransformOp(self.kind, self.power + other.power)

    def __str__(self) -> str:
        if self.kind is TransformKind.MIRROR:
            return "M"
        return f"{self.kind.value}^{self.power}"


__all__ = [
    "GENERATOR_PERIODS",
    "TransformKind",
    "TransformOp",
    "coerce_transform_kind",
]
