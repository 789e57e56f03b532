"""Domain models for PomPulse."""

from .stats import PersistentStats, STAT_KEYS

__all__ = ["PersistentStats", "STAT_KEYS"]
