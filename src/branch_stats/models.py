"""Pydantic models for the Waypoint response envelope and cached payloads.

Only the envelope fields the cache policy inspects are declared; every other
upstream field is preserved as an extra so cached payloads round-trip intact.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResponseCode(IntEnum):
    """Waypoint envelope status codes the cache treats as success."""

    OKAY = 0
    PLAYER_FOUND = 1


SUCCESS_CODES: frozenset[int] = frozenset({ResponseCode.OKAY, ResponseCode.PLAYER_FOUND})


class WaypointEnvelope(BaseModel):
    """Status envelope shared by every Waypoint response."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    status_code: int = Field(alias="StatusCode", strict=True)
    status_reason: str | None = Field(default=None, alias="StatusReason")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ServiceRecord(WaypointEnvelope):
    gamertag: str | None = Field(default=None, alias="Gamertag")
    service_tag: str | None = Field(default=None, alias="ServiceTag")


class GameHistory(WaypointEnvelope):
    gamertag: str | None = Field(default=None, alias="Gamertag")
    games: list[dict[str, Any]] = Field(default_factory=list, alias="Games")


class Metadata(WaypointEnvelope):
    pass


class Playlists(WaypointEnvelope):
    playlists: list[dict[str, Any]] = Field(default_factory=list, alias="Playlists")


class Challenges(WaypointEnvelope):
    challenges: list[dict[str, Any]] = Field(default_factory=list, alias="Challenges")
