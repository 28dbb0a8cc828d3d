"""Resource kinds, their static storage/TTL tables, and cache keys."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from branch_stats.models import (
    Challenges,
    GameHistory,
    Metadata,
    Playlists,
    ServiceRecord,
    WaypointEnvelope,
)

_WHITESPACE_RE = re.compile(r"\s")


class ResourceKind(Enum):
    """Closed set of cacheable Waypoint resources."""

    SERVICE_RECORD = "service-record"
    GAME_HISTORY = "game-history"
    METADATA = "metadata"
    PLAYLISTS = "playlists"
    CHALLENGES = "challenges"

    @property
    def prefix(self) -> str:
        return KIND_PREFIXES[self]

    @property
    def ttl(self) -> timedelta:
        return KIND_TTLS[self]

    @property
    def model(self) -> type[WaypointEnvelope]:
        return KIND_MODELS[self]

    @property
    def per_player(self) -> bool:
        return self not in SINGLETON_NAMES


# Storage prefixes are shared with data written by earlier deployments.
KIND_PREFIXES: dict[ResourceKind, str] = {
    ResourceKind.SERVICE_RECORD: "player-service-record",
    ResourceKind.GAME_HISTORY: "player-game-history",
    ResourceKind.METADATA: "other",
    ResourceKind.PLAYLISTS: "other",
    ResourceKind.CHALLENGES: "other",
}

SERVICE_RECORD_TTL = timedelta(minutes=8)
GAME_HISTORY_TTL = timedelta(minutes=5)
METADATA_TTL = timedelta(minutes=14)

KIND_TTLS: dict[ResourceKind, timedelta] = {
    ResourceKind.SERVICE_RECORD: SERVICE_RECORD_TTL,
    ResourceKind.GAME_HISTORY: GAME_HISTORY_TTL,
    ResourceKind.METADATA: METADATA_TTL,
    ResourceKind.PLAYLISTS: METADATA_TTL,
    ResourceKind.CHALLENGES: METADATA_TTL,
}

KIND_MODELS: dict[ResourceKind, type[WaypointEnvelope]] = {
    ResourceKind.SERVICE_RECORD: ServiceRecord,
    ResourceKind.GAME_HISTORY: GameHistory,
    ResourceKind.METADATA: Metadata,
    ResourceKind.PLAYLISTS: Playlists,
    ResourceKind.CHALLENGES: Challenges,
}

SINGLETON_NAMES: dict[ResourceKind, str] = {
    ResourceKind.METADATA: "metadata",
    ResourceKind.PLAYLISTS: "playlists",
    ResourceKind.CHALLENGES: "challenges",
}


def normalize_identifier(name: str) -> str:
    """Fold a gamertag into its storage identifier.

    Lower-cases and maps every whitespace character to a hyphen, so
    ``"John Doe"``, ``"john-doe"`` and ``"JOHN DOE"`` share one key.
    Applying it to its own output is a no-op.
    """
    identifier = _WHITESPACE_RE.sub("-", name.strip().lower())
    if not identifier:
        raise ValueError("gamertag must not be empty")
    if "/" in identifier or "\\" in identifier or identifier in {".", ".."}:
        raise ValueError(f"invalid gamertag: {name!r}")
    return identifier


@dataclass(frozen=True)
class ResourceKey:
    """Identity of one cached resource: ``(kind, identifier)``.

    ``gamertag`` keeps the caller's spelling for the outbound URL and the
    player index; it does not take part in equality.
    """

    kind: ResourceKind
    identifier: str
    gamertag: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if normalize_identifier(self.identifier) != self.identifier:
            raise ValueError(f"identifier is not normalized: {self.identifier!r}")

    @classmethod
    def player(cls, kind: ResourceKind, gamertag: str) -> ResourceKey:
        if not kind.per_player:
            raise ValueError(f"{kind.value} is a global resource")
        return cls(kind=kind, identifier=normalize_identifier(gamertag), gamertag=gamertag.strip())

    @classmethod
    def singleton(cls, kind: ResourceKind) -> ResourceKey:
        if kind.per_player:
            raise ValueError(f"{kind.value} requires a gamertag")
        return cls(kind=kind, identifier=SINGLETON_NAMES[kind])

    def path(self) -> str:
        return f"{self.kind.prefix}/{self.identifier}.json"

    @property
    def label(self) -> str:
        return f"{self.kind.value}:{self.identifier}"
