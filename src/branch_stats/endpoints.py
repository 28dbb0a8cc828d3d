"""Waypoint endpoint templates per resource kind."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from branch_stats.resources import ResourceKey, ResourceKind

SERVICE_RECORD_TEMPLATE = "{language}/players/{gamertag}/{game}/servicerecord"
GAME_HISTORY_TEMPLATE = "{language}/players/{gamertag}/{game}/matches"
METADATA_TEMPLATE = "{language}/{game}/metadata"
PLAYLISTS_URL_TEMPLATE = "https://presence.svc.halowaypoint.com/{language}/{game}/playlists"
CHALLENGES_TEMPLATE = "{language}/{game}/challenges"

ENDPOINT_TEMPLATES: dict[ResourceKind, str] = {
    ResourceKind.SERVICE_RECORD: SERVICE_RECORD_TEMPLATE,
    ResourceKind.GAME_HISTORY: GAME_HISTORY_TEMPLATE,
    ResourceKind.METADATA: METADATA_TEMPLATE,
    ResourceKind.PLAYLISTS: PLAYLISTS_URL_TEMPLATE,
    ResourceKind.CHALLENGES: CHALLENGES_TEMPLATE,
}

# Kinds whose endpoints require the X-343-Authorization-Spartan header.
SPARTAN_AUTH_KINDS = frozenset({ResourceKind.PLAYLISTS, ResourceKind.CHALLENGES})


@dataclass(frozen=True)
class Endpoint:
    """One outbound request: a relative path or absolute URL plus auth needs."""

    path: str
    label: str
    spartan_auth: bool = False


def endpoint_for(key: ResourceKey, *, language: str, game: str) -> Endpoint:
    template = ENDPOINT_TEMPLATES[key.kind]
    gamertag = quote(key.gamertag or key.identifier, safe="")
    path = template.format(language=language, game=game, gamertag=gamertag)
    return Endpoint(path=path, label=key.label, spartan_auth=key.kind in SPARTAN_AUTH_KINDS)
