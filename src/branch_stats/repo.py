"""Read-through repository for Waypoint resources with stale fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import cast

from pydantic import ValidationError

from branch_stats.cache_store import BlobStore, FilesystemBlobStore
from branch_stats.endpoints import endpoint_for
from branch_stats.errors import IndexWriteError, StoreWriteError, TransportError
from branch_stats.freshness import CacheEntry, is_fresh
from branch_stats.io_utils import safe_relative_path
from branch_stats.models import (
    Challenges,
    GameHistory,
    Metadata,
    Playlists,
    ServiceRecord,
    WaypointEnvelope,
)
from branch_stats.player_index import FilesystemPlayerIndex, PlayerIndex
from branch_stats.resources import ResourceKey, ResourceKind
from branch_stats.settings import Settings
from branch_stats.singleflight import KeyedLocks
from branch_stats.time_utils import Clock, utc_now
from branch_stats.validate import TransportFailure, Unusable, Usable, Verdict, validate_response
from branch_stats.waypoint_client import Fetcher, WaypointClient

logger = logging.getLogger(__name__)


def blob_root(data_dir: Path, game: str) -> Path:
    """Blob container for one game; each game keeps its own key space."""
    return safe_relative_path(data_dir / "blobs", game.strip())


def index_root(data_dir: Path, game: str) -> Path:
    return safe_relative_path(data_dir / "index", game.strip())


class AcquireOutcome(StrEnum):
    FRESH = "fresh"
    REFRESHED = "refreshed"
    STALE_SERVED = "stale_served"
    ABSENT = "absent"


@dataclass(frozen=True)
class AcquireResult:
    """Payload returned by one acquire plus how it was obtained."""

    key: ResourceKey
    payload: WaypointEnvelope | None
    outcome: AcquireOutcome
    cached_at: datetime | None
    verdict: Verdict | None = None


class WaypointRepository:
    """Serve Waypoint resources from the blob store, refreshing when stale.

    A fresh entry is returned without any outbound call. A stale or missing
    entry triggers exactly one fetch; if that fetch does not yield a usable
    payload, the previous payload is returned (however old), else ``None``.
    Transport and validation failures never raise to the caller.
    """

    def __init__(
        self,
        *,
        store: BlobStore,
        fetcher: Fetcher,
        index: PlayerIndex | None = None,
        clock: Clock = utc_now,
        language: str = "en-US",
        game: str = "h4",
        single_flight: bool = True,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.index = index
        self.language = language
        self.game = game
        self._clock = clock
        self._locks = KeyedLocks() if single_flight else None

    @classmethod
    def from_settings(
        cls, settings: Settings, *, fetcher: Fetcher | None = None, clock: Clock = utc_now
    ) -> WaypointRepository:
        root = Path(settings.data_dir)
        return cls(
            store=FilesystemBlobStore(blob_root(root, settings.waypoint_game), clock=clock),
            fetcher=fetcher or WaypointClient(settings),
            index=FilesystemPlayerIndex(index_root(root, settings.waypoint_game)),
            clock=clock,
            language=settings.waypoint_language,
            game=settings.waypoint_game,
        )

    def acquire(self, key: ResourceKey) -> WaypointEnvelope | None:
        return self.acquire_result(key).payload

    def acquire_result(self, key: ResourceKey) -> AcquireResult:
        if self._locks is None:
            return self._acquire(key)
        # Waiters re-probe after the leader, so they see its write instead of refetching.
        with self._locks.hold(key):
            return self._acquire(key)

    def _load_cached(self, key: ResourceKey) -> CacheEntry[WaypointEnvelope] | None:
        handle = self.store.get(key.path())
        if handle is None:
            return None
        if handle.last_modified is None:
            logger.warning("cached blob %s has no timestamp; treating as absent", handle.key)
            return None
        payload = self.store.read_typed(handle, key.kind.model)
        if payload is None:
            logger.warning("cached blob %s is unreadable; treating as absent", handle.key)
            return None
        return CacheEntry(payload=payload, cached_at=handle.last_modified)

    def _acquire(self, key: ResourceKey) -> AcquireResult:
        now = self._clock()
        cached = self._load_cached(key)
        if cached is not None and is_fresh(cached, key.kind.ttl, now):
            logger.debug("cache hit for %s", key.label)
            return AcquireResult(
                key=key,
                payload=cached.payload,
                outcome=AcquireOutcome.FRESH,
                cached_at=cached.cached_at,
            )

        verdict, payload = self._refresh(key)
        if payload is not None:
            return AcquireResult(
                key=key,
                payload=payload,
                outcome=AcquireOutcome.REFRESHED,
                cached_at=now,
                verdict=verdict,
            )
        if cached is not None:
            logger.warning("serving stale %s after failed refresh: %s", key.label, verdict)
            return AcquireResult(
                key=key,
                payload=cached.payload,
                outcome=AcquireOutcome.STALE_SERVED,
                cached_at=cached.cached_at,
                verdict=verdict,
            )
        logger.warning("no data available for %s: %s", key.label, verdict)
        return AcquireResult(
            key=key, payload=None, outcome=AcquireOutcome.ABSENT, cached_at=None, verdict=verdict
        )

    def _refresh(self, key: ResourceKey) -> tuple[Verdict, WaypointEnvelope | None]:
        endpoint = endpoint_for(key, language=self.language, game=self.game)
        try:
            response = self.fetcher.fetch(endpoint)
        except TransportError as exc:
            return TransportFailure(error=str(exc)), None

        verdict = validate_response(response)
        if not isinstance(verdict, Usable):
            return verdict, None
        model = key.kind.model
        try:
            payload = model.model_validate_json(verdict.raw)
        except ValidationError:
            return (
                Unusable(
                    reason=f"payload does not match {model.__name__}",
                    http_status=response.status_code,
                    status_code=verdict.envelope.status_code,
                ),
                None,
            )

        logger.info("refreshed %s in %dms", key.label, response.duration_ms)
        self._persist(key, verdict.raw)
        self._record_player(key)
        return verdict, payload

    def _persist(self, key: ResourceKey, raw: bytes) -> None:
        try:
            self.store.write(key.path(), raw)
        except StoreWriteError as exc:
            logger.warning("could not persist %s: %s", key.label, exc)

    def _record_player(self, key: ResourceKey) -> None:
        if self.index is None or not key.kind.per_player:
            return
        try:
            self.index.record_seen(
                key.identifier, gamertag=key.gamertag or key.identifier, kind=key.kind
            )
        except IndexWriteError as exc:
            logger.warning("could not index %s: %s", key.label, exc)

    def service_record(self, gamertag: str) -> ServiceRecord | None:
        key = ResourceKey.player(ResourceKind.SERVICE_RECORD, gamertag)
        return cast(ServiceRecord | None, self.acquire(key))

    def game_history(self, gamertag: str) -> GameHistory | None:
        key = ResourceKey.player(ResourceKind.GAME_HISTORY, gamertag)
        return cast(GameHistory | None, self.acquire(key))

    def metadata(self) -> Metadata | None:
        return cast(Metadata | None, self.acquire(ResourceKey.singleton(ResourceKind.METADATA)))

    def playlists(self) -> Playlists | None:
        return cast(Playlists | None, self.acquire(ResourceKey.singleton(ResourceKind.PLAYLISTS)))

    def challenges(self) -> Challenges | None:
        return cast(
            Challenges | None, self.acquire(ResourceKey.singleton(ResourceKind.CHALLENGES))
        )
