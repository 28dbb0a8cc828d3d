"""Read-through cache for Halo Waypoint statistics."""

from branch_stats.repo import AcquireOutcome, AcquireResult, WaypointRepository
from branch_stats.resources import ResourceKey, ResourceKind, normalize_identifier

__version__ = "0.1.0"

__all__ = [
    "AcquireOutcome",
    "AcquireResult",
    "ResourceKey",
    "ResourceKind",
    "WaypointRepository",
    "__version__",
    "normalize_identifier",
]
