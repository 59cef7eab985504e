from .analysis import ComplexityTier, TreeMetrics, analyze, classify
from .pipeline import CompilationResult, compile_tree
from .rewrite import canonicalize_chains, extract_chains, normalize
from .selection import BackendKind, BackendPreference, select_backend

__all__ = [
    "BackendKind",
    "BackendPreference",
    "CompilationResult",
    "ComplexityTier",
    "TreeMetrics",
    "analyze",
    "canonicalize_chains",
    "classify",
    "compile_tree",
    "extract_chains",
    "normalize",
    "select_backend",
]
