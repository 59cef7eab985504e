from collections.abc import Mapping, Sequence
from typing import Literal, TypeAlias

from array_api_compat import array_namespace, is_array_api_obj

from atlas96.algebra.element import AlgebraicElement
from atlas96.bridge.conversion import ProjectedClass, ProjectionResult, project
from atlas96.classes.coords import check_class_index
from atlas96.classes.ring import RingResult
from atlas96.diagnostics import ContractViolation, ErrorCode

RuntimeKind: TypeAlias = Literal["value", "values"]
RuntimeValue: TypeAlias = int | AlgebraicElement
RuntimeSequence: TypeAlias = tuple[RuntimeValue, ...]
RuntimeParams: TypeAlias = Mapping[str, RuntimeValue | RuntimeSequence]

ExecutionResult: TypeAlias = (
    int
    | AlgebraicElement
    | RingResult
    | ProjectionResult
    | tuple[int, ...]
    | bool
)


def _kind_mismatch(name: str, expected: str, value: object) -> ContractViolation:
    return ContractViolation(
        code=ErrorCode.RUNTIME_PARAM_KIND_MISMATCH,
        message=(
            f"runtime parameter {name!r} must be {expected}, "
            f"got {type(value).__name__}"
        ),
        data={"param": name, "expected": expected},
    )


def _from_array(value: object, name: str) -> int | tuple[int, ...]:
    """Convert an Array API integer scalar or 1-D array into Python ints."""
    xp = array_namespace(value)
    if not xp.isdtype(value.dtype, "integral"):  # type: ignore[attr-defined]
        raise _kind_mismatch(name, "an integer array", value)
    ndim = value.ndim  # type: ignore[attr-defined]
    if ndim == 0:
        return int(value)  # type: ignore[call-overload]
    if ndim == 1:
        length = value.shape[0]  # type: ignore[attr-defined]
        return tuple(int(value[i]) for i in range(length))  # type: ignore[index]
    raise _kind_mismatch(name, "a scalar or 1-D array", value)


def coerce_value(value: object, name: str, /) -> RuntimeValue:
    """Accept a class index (int or integer 0-d array) or an algebraic element."""
    if isinstance(value, AlgebraicElement):
        return value
    if isinstance(value, bool):
        raise _kind_mismatch(name, "a class index or algebraic element", value)
    if is_array_api_obj(value):
        converted = _from_array(value, name)
        if isinstance(converted, tuple):
            raise _kind_mismatch(name, "a class index or algebraic element", value)
        value = converted
    if not isinstance(value, int):
        raise _kind_mismatch(name, "a class index or algebraic element", value)
    return check_class_index(value, name=f"runtime parameter {name!r}")


def coerce_values(value: object, name: str, /) -> RuntimeSequence:
    """Accept a sequence (or 1-D integer array) of class indices/elements."""
    if is_array_api_obj(value):
        converted = _from_array(value, name)
        if not isinstance(converted, tuple):
            raise _kind_mismatch(name, "a sequence of values", value)
        value = converted
    if isinstance(value, str | bytes | AlgebraicElement) or not isinstance(
        value, Sequence
    ):
        raise _kind_mismatch(name, "a sequence of values", value)
    return tuple(
        coerce_value(item, f"{name}[{position}]") for position, item in enumerate(value)
    )


def coerce_runtime_value(
    value: object, name: str, kind: RuntimeKind, /
) -> RuntimeValue | RuntimeSequence:
    if kind == "values":
        return coerce_values(value, name)
    return coerce_value(value, name)


def contains_element(value: object, /) -> bool:
    if isinstance(value, AlgebraicElement):
        return True
    return isinstance(value, tuple) and any(
        isinstance(item, AlgebraicElement) for item in value
    )


def fetch_param(params: RuntimeParams, name: str, /) -> RuntimeValue | RuntimeSequence:
    try:
        return params[name]
    except KeyError:
        raise ContractViolation(
            code=ErrorCode.MISSING_RUNTIME_PARAM,
            message=f"missing runtime parameter {name!r}",
            data={"param": name},
        ) from None


def fetch_value(params: RuntimeParams, name: str, /) -> RuntimeValue:
    value = fetch_param(params, name)
    if isinstance(value, tuple):
        raise _kind_mismatch(name, "a single value", value)
    return value


def fetch_values(params: RuntimeParams, name: str, /) -> RuntimeSequence:
    value = fetch_param(params, name)
    if not isinstance(value, tuple):
        raise _kind_mismatch(name, "a sequence of values", value)
    return value


def require_class(value: RuntimeValue, /, *, role: str) -> int:
    """Class index of an int, or of a rank-1 element."""
    if not isinstance(value, AlgebraicElement):
        return value
    outcome = project(value)
    if isinstance(outcome, ProjectedClass):
        return outcome.index
    raise ContractViolation(
        code=ErrorCode.NOT_RANK_ONE_OPERAND,
        message=f"{role} is not a rank-1 element and has no class index",
        help="ring, reduction, and unit operations need class-valued operands",
        data={"role": role},
    )


__all__ = [
    "ExecutionResult",
    "RuntimeKind",
    "RuntimeParams",
    "RuntimeSequence",
    "RuntimeValue",
    "coerce_runtime_value",
    "coerce_value",
    "coerce_values",
    "contains_element",
    "fetch_param",
    "fetch_value",
    "fetch_values",
    "require_class",
]
