from .algebra import AlgebraicElement
from .bridge import NOT_RANK_ONE, NotRankOne, ProjectedClass, lift, project
from .classes import RingResult, decode, encode
from .compiler import BackendKind, ComplexityTier
from .config import DEFAULT_CONFIG, EngineConfig
from .diagnostics import (
    ConstructionError,
    ContractViolation,
    EngineError,
    ErrorCode,
    InternalAssertionError,
)
from .generators import TransformKind, TransformOp
from .registry import (
    CompiledOperation,
    CompiledOperationCache,
    OperationDescriptor,
    OperationRegistry,
    create_registry,
)

__all__ = [
    "AlgebraicElement",
    "BackendKind",
    "CompiledOperation",
    "CompiledOperationCache",
    "ComplexityTier",
    "ConstructionError",
    "ContractViolation",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "EngineError",
    "ErrorCode",
    "InternalAssertionError",
    "NOT_RANK_ONE",
    "NotRankOne",
    "OperationDescriptor",
    "OperationRegistry",
    "ProjectedClass",
    "RingResult",
    "TransformKind",
    "TransformOp",
    "create_registry",
    "decode",
    "encode",
    "lift",
    "project",
]
