import pytest

from atlas96 import (
    ConstructionError,
    ContractViolation,
    EngineError,
    ErrorCode,
    InternalAssertionError,
)


def test_construction_error_exposes_structured_fields() -> None:
    error = ConstructionError(
        code=ErrorCode.INVALID_DESCRIPTOR,
        message="invalid descriptor: version '1.0' is not semver",
        help="use X.Y.Z",
        related=("descriptor",),
        data={"field": "version"},
    )

    assert error.code == "invalid_descriptor"
    assert error.external_code == "INVALID_DESCRIPTOR"
    assert error.severity == "error"
    assert error.channel == "construction_error"
    assert error.help == "use X.Y.Z"
    assert error.related == ("descriptor",)
    assert error.data == {"field": "version"}
    assert str(error) == "invalid descriptor: version '1.0' is not semver"
    assert isinstance(error, EngineError)
    assert isinstance(error, ValueError)


def test_contract_violation_accepts_upper_snake_codes() -> None:
    error = ContractViolation(code="MISSING_RUNTIME_PARAM", message="missing 'x'")
    assert error.code == ErrorCode.MISSING_RUNTIME_PARAM
    assert error.channel == "contract_violation"
    assert error.data == {}


@pytest.mark.parametrize("code", ["", "has space", "9lives", "Mixed-Case"])
def test_engine_error_rejects_malformed_codes(code: str) -> None:
    with pytest.raises(ValueError):
        ConstructionError(code=code, message="bad code")


def test_engine_error_rejects_bad_payloads() -> None:
    with pytest.raises(ValueError):
        ConstructionError(code="invalid_expression", message="  ")
    with pytest.raises(ValueError):
        ConstructionError(code="invalid_expression", message="x", related=("",))
    with pytest.raises(TypeError):
        ConstructionError(
            code="invalid_expression",
            message="x",
            data={"value": 1.5},  # type: ignore[dict-item]
        )
    with pytest.raises(TypeError):
        ConstructionError(code=7, message="x")  # type: ignore[arg-type]


def test_internal_assertion_error_carries_instruction() -> None:
    error = InternalAssertionError(
        "grade reached permutation engine", instruction="grade"
    )
    assert isinstance(error, AssertionError)
    assert not isinstance(error, EngineError)
    assert error.code == "backend_invariant_violated"
    assert error.instruction == "grade"
    assert str(error) == "grade reached permutation engine"
