from .cache import CacheStats, CompiledOperationCache
from .compiled import CompiledOperation
from .descriptor import OperationDescriptor
from .registry import OperationRegistry, cache_key, create_registry
from .schema import OperationSchema, ParamSpec, SchemaRegistry

__all__ = [
    "CacheStats",
    "CompiledOperation",
    "CompiledOperationCache",
    "OperationDescriptor",
    "OperationRegistry",
    "OperationSchema",
    "ParamSpec",
    "SchemaRegistry",
    "cache_key",
    "create_registry",
]
