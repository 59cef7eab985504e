from dataclasses import dataclass
from typing import Literal, TypeAlias

EvictionPolicy: TypeAlias = Literal["fifo", "lru"]

_EVICTION_POLICIES: frozenset[str] = frozenset({"fifo", "lru"})


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Tunable limits for compilation, tier classification, and caching."""

    cache_max_entries: int = 256
    eviction: EvictionPolicy = "fifo"
    tier1_max_depth: int = 3
    tier1_max_width: int = 2
    tier2_max_depth: int = 8
    tier2_max_algebraic_atoms: int = 2

    def __post_init__(self) -> None:
        if self.eviction not in _EVICTION_POLICIES:
            raise ValueError(
                f"eviction must be one of {sorted(_EVICTION_POLICIES)}, "
                f"got {self.eviction!r}"
            )
        for name in (
            "cache_max_entries",
            "tier1_max_depth",
            "tier1_max_width",
            "tier2_max_depth",
            "tier2_max_algebraic_atoms",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


DEFAULT_CONFIG = EngineConfig()


__all__ = ["DEFAULT_CONFIG", "EngineConfig", "EvictionPolicy"]
