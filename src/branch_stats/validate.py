"""Classification of raw Waypoint responses into cache verdicts."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from pydantic import ValidationError

from branch_stats.models import SUCCESS_CODES, WaypointEnvelope
from branch_stats.waypoint_client import FetchResponse


@dataclass(frozen=True)
class Usable:
    raw: bytes
    envelope: WaypointEnvelope


@dataclass(frozen=True)
class Unusable:
    """The remote answered, but the answer cannot be cached."""

    reason: str
    http_status: int | None = None
    status_code: int | None = None


@dataclass(frozen=True)
class TransportFailure:
    """No response reached the caller."""

    error: str


Verdict = Usable | Unusable | TransportFailure


def validate_payload(
    raw: bytes, *, success_codes: Collection[int] = SUCCESS_CODES
) -> Usable | Unusable:
    """Parse the status envelope of ``raw``; never raises."""
    if not raw.strip():
        return Unusable(reason="empty body")
    try:
        envelope = WaypointEnvelope.model_validate_json(raw)
    except ValidationError as exc:
        return Unusable(reason=f"unparseable envelope ({exc.error_count()} errors)")
    if envelope.status_code not in success_codes:
        return Unusable(
            reason=f"status code {envelope.status_code} not allowed",
            status_code=envelope.status_code,
        )
    return Usable(raw=raw, envelope=envelope)


def validate_response(
    response: FetchResponse, *, success_codes: Collection[int] = SUCCESS_CODES
) -> Usable | Unusable:
    """Validate an HTTP response: status 200, non-empty body, allowed envelope code."""
    if response.status_code != 200:
        return Unusable(
            reason=f"http status {response.status_code}", http_status=response.status_code
        )
    verdict = validate_payload(response.content, success_codes=success_codes)
    if isinstance(verdict, Unusable):
        return Unusable(
            reason=verdict.reason,
            http_status=response.status_code,
            status_code=verdict.status_code,
        )
    return verdict
