"""Error types for branch-stats."""

from __future__ import annotations


class BranchStatsError(RuntimeError):
    """Base error for branch-stats operations."""


class TransportError(BranchStatsError):
    """Raised when no response reached the caller (timeout, connection error)."""


class StoreWriteError(BranchStatsError):
    """Raised when a blob could not be persisted."""


class IndexWriteError(BranchStatsError):
    """Raised when the player index could not be updated."""


class ConfigError(BranchStatsError):
    """User-facing configuration error."""
