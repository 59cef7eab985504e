from enum import Enum
from typing import Literal, TypeAlias

DiagnosticSeverity: TypeAlias = Literal["error"]
DiagnosticValue: TypeAlias = str | int | bool


class ErrorCode(str, Enum):
    """Canonical internal diagnostic codes."""

    INVALID_DESCRIPTOR = "invalid_descriptor"
    UNKNOWN_OPERATION = "unknown_operation"
    INVALID_COMPILED_PARAM = "invalid_compiled_param"
    INVALID_EXPRESSION = "invalid_expression"
    INVALID_PLAN_SHAPE = "invalid_plan_shape"
    CLASS_INDEX_OUT_OF_RANGE = "class_index_out_of_range"
    GRADE_OUT_OF_RANGE = "grade_out_of_range"
    MISSING_RUNTIME_PARAM = "missing_runtime_param"
    UNEXPECTED_RUNTIME_PARAM = "unexpected_runtime_param"
    RUNTIME_PARAM_KIND_MISMATCH = "runtime_param_kind_mismatch"
    NOT_RANK_ONE_OPERAND = "not_rank_one_operand"
    BACKEND_INVARIANT_VIOLATED = "backend_invariant_violated"


class EngineError(ValueError):
    """Structured base error for compilation/invocation diagnostics."""

    channel = "error"
    severity: DiagnosticSeverity
    code: str
    external_code: str
    help: str | None
    related: tuple[str, ...]
    data: dict[str, DiagnosticValue]
    message: str

    @staticmethod
    def _normalize_code(code: str | ErrorCode) -> str:
        """Normalize code to canonical internal `snake_case` form."""
        if isinstance(code, ErrorCode):
            return code.value

        if not isinstance(code, str):
            raise TypeError("diagnostic code must be a string or ErrorCode")
        if not code or any(char.isspace() for char in code):
            raise ValueError("diagnostic code must be non-empty without whitespace")

        lowered = code.lower()
        if lowered[0].isalpha() and all(
            char.islower() or char.isdigit() or char == "_" for char in lowered
        ):
            return lowered
        raise ValueError("diagnostic code must be snake_case or UPPER_SNAKE")

    @staticmethod
    def _normalize_data(data: dict[str, DiagnosticValue]) -> dict[str, DiagnosticValue]:
        """Validate and copy diagnostic payload data."""
        normalized_data: dict[str, DiagnosticValue] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                raise TypeError("diagnostic data keys must be strings")
            if not isinstance(value, str | int | bool):
                raise TypeError(
                    "diagnostic data values must be str, int, or bool entries"
                )
            normalized_data[key] = value
        return normalized_data

    def __init__(
        self,
        *,
        code: str | ErrorCode,
        message: str,
        help: str | None = None,
        related: tuple[str, ...] = (),
        data: dict[str, DiagnosticValue] | None = None,
    ) -> None:
        """Build one structured engine error."""
        normalized_code = self._normalize_code(code)
        if not isinstance(message, str) or not message.strip():
            raise ValueError("diagnostic message must be a non-empty string")
        if help is not None and not isinstance(help, str):
            raise TypeError("diagnostic help must be a string or None")
        if any(not isinstance(note, str) or not note.strip() for note in related):
            raise ValueError("related diagnostics must be non-empty strings")

        self.code = normalized_code
        self.external_code = normalized_code.upper()
        self.severity = "error"
        self.help = help
        self.related = tuple(related)
        self.data = self._normalize_data({} if data is None else data)
        self.message = message
        super().__init__(message)


class ConstructionError(EngineError):
    """Malformed descriptor or compile-time parameters; raised while compiling."""

    channel = "construction_error"


class ContractViolation(EngineError):
    """Caller-side misuse: bad runtime parameters or out-of-range class indices."""

    channel = "contract_violation"


class InternalAssertionError(AssertionError):
    """Backend invariant broken by a plan that should never have been lowered."""

    def __init__(self, message: str, *, instruction: str | None = None) -> None:
        self.code = ErrorCode.BACKEND_INVARIANT_VIOLATED.value
        self.instruction = instruction
        super().__init__(message)


__all__ = [
    "ConstructionError",
    "ContractViolation",
    "EngineError",
    "ErrorCode",
    "InternalAssertionError",
]
