"""HTTP client for the Halo Waypoint API."""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Protocol

import httpx

from branch_stats.endpoints import Endpoint
from branch_stats.errors import TransportError
from branch_stats.settings import Settings

SPARTAN_HEADER = "X-343-Authorization-Spartan"


@dataclass(frozen=True)
class FetchResponse:
    """Raw outcome of one request that reached the server."""

    status_code: int
    content: bytes
    duration_ms: int


class Fetcher(Protocol):
    def fetch(self, endpoint: Endpoint) -> FetchResponse: ...


class WaypointClient:
    """Thin single-attempt HTTP client around the Waypoint services.

    Non-2xx responses are returned as-is; only failures where no response
    arrived raise ``TransportError``.
    """

    def __init__(
        self, settings: Settings, *, transport: httpx.BaseTransport | None = None
    ) -> None:
        self.settings = settings
        self._base_url = settings.waypoint_base_url.rstrip("/")
        limits = httpx.Limits(max_connections=8, max_keepalive_connections=4)
        self._http = httpx.Client(
            timeout=settings.waypoint_timeout_s,
            limits=limits,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> WaypointClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def fetch(self, endpoint: Endpoint) -> FetchResponse:
        headers: dict[str, str] = {}
        if endpoint.spartan_auth:
            headers[SPARTAN_HEADER] = str(self.settings.spartan_token).strip()
        started = perf_counter()
        try:
            response = self._http.get(self._url(endpoint.path), headers=headers)
            content = response.content
        except httpx.HTTPError as exc:
            raise TransportError(f"{endpoint.label} failed with transport error: {exc}") from exc
        return FetchResponse(
            status_code=response.status_code,
            content=content,
            duration_ms=int((perf_counter() - started) * 1000),
        )
