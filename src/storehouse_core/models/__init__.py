"""Domain models for storehouse-cache."""

from storehouse_core.models.entry import CacheEntry
from storehouse_core.models.sweep import SweepResult

__all__ = [
    "CacheEntry",
    "SweepResult",
]
