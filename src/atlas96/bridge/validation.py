"""Exhaustive cross-checks that the two engines agree."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from atlas96.algebra.element import AlgebraicElement
from atlas96.algebra.transforms import apply_element_transform
from atlas96.classes.automorphisms import apply_transform
from atlas96.classes.coords import NUM_CLASSES
from atlas96.generators import GENERATOR_PERIODS, TransformKind, TransformOp

from .conversion import ProjectedClass, lift, project

NONTRIVIAL_POWERS: tuple[TransformOp, ...] = tuple(
    TransformOp(kind, power)
    for kind in TransformKind
    for power in range(1, GENERATOR_PERIODS[kind])
)


@dataclass(frozen=True, slots=True)
class BridgeFailure:
    """One class/transform pair where the engines disagree."""

    index: int
    op: TransformOp | None
    expected: int
    actual: ProjectedClass | None


@dataclass(frozen=True, slots=True)
class BridgeValidationReport:
    checks: int
    failures: tuple[BridgeFailure, ...]

    @property
    def passed(self) -> bool:
        return not self.failures


def _projected(element: AlgebraicElement) -> ProjectedClass | None:
    outcome = project(element)
    return outcome if isinstance(outcome, ProjectedClass) else None


def run_bridge_validation(
    ops: Iterable[TransformOp] = NONTRIVIAL_POWERS,
) -> BridgeValidationReport:
    """Round-trip every class, then every class under every given power."""
    checks = 0
    failures: list[BridgeFailure] = []
    op_list = tuple(ops)
    for index in range(NUM_CLASSES):
        lifted = lift(index)
        checks += 1
        actual = _projected(lifted)
        if actual is None or actual.index != index:
            failures.append(BridgeFailure(index, None, index, actual))
        for op in op_list:
            checks += 1
            expected = apply_transform(index, op)
            actual = _projected(apply_element_transform(lifted, op))
            if actual is None or actual.index != expected:
                failures.append(BridgeFailure(index, op, expected, actual))
    return BridgeValidationReport(checks=checks, failures=tuple(failures))


def _op(symbol: str, power: int = 1) -> TransformOp:
    return TransformOp(TransformKind(symbol), power)


_LAWS: tuple[tuple[str, tuple[TransformOp, ...], tuple[TransformOp, ...]], ...] = (
    ("R^4 = id", (_op("R"),) * 4, ()),
    ("D^3 = id", (_op("D"),) * 3, ()),
    ("T^8 = id", (_op("T"),) * 8, ()),
    ("M^2 = id", (_op("M"),) * 2, ()),
    ("RD = DR", (_op("R"), _op("D")), (_op("D"), _op("R"))),
    ("RT = TR", (_op("R"), _op("T")), (_op("T"), _op("R"))),
    ("DT = TD", (_op("D"), _op("T")), (_op("T"), _op("D"))),
    ("MDM = D^2", (_op("M"), _op("D"), _op("M")), (_op("D", 2),)),
)


def _failed_laws(
    values: Iterable[object], apply: Callable[[object, TransformOp], object]
) -> tuple[str, ...]:
    failed: list[str] = []
    samples = tuple(values)
    for name, lhs_ops, rhs_ops in _LAWS:
        for value in samples:
            lhs = value
            for op in lhs_ops:
                lhs = apply(lhs, op)
            rhs = value
            for op in rhs_ops:
                rhs = apply(rhs, op)
            if lhs != rhs:
                failed.append(name)
                break
    return tuple(failed)


def check_permutation_laws() -> tuple[str, ...]:
    """Names of generator laws violated on any class index (empty when sound)."""
    return _failed_laws(range(NUM_CLASSES), apply_transform)  # type: ignore[arg-type]


def check_algebraic_laws(elements: Iterable[AlgebraicElement]) -> tuple[str, ...]:
    """Names of generator laws violated on any of the given elements."""
    return _failed_laws(elements, apply_element_transform)  # type: ignore[arg-type]


__all__ = [
    "BridgeFailure",
    "BridgeValidationReport",
    "NONTRIVIAL_POWERS",
    "check_algebraic_laws",
    "check_permutation_laws",
    "run_bridge_validation",
]
