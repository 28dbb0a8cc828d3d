"""Key-addressed blob store for raw Waypoint payloads."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from branch_stats.errors import StoreWriteError
from branch_stats.io_utils import atomic_write_bytes, atomic_write_json, safe_relative_path
from branch_stats.time_utils import Clock, iso_z, parse_iso_z, utc_now

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class StoredBlob:
    """Existence and metadata probe for one stored blob."""

    key: str
    path: Path
    last_modified: datetime | None


class BlobStore(Protocol):
    def get(self, key: str) -> StoredBlob | None: ...

    def read_typed(self, handle: StoredBlob, model: type[M]) -> M | None: ...

    def read_raw(self, handle: StoredBlob) -> bytes | None: ...

    def write(self, key: str, raw: bytes) -> None: ...


class FilesystemBlobStore:
    """Blob store rooted at a directory.

    Payloads live at ``{root}/{key}``; the write time lives in a sidecar
    ``{root}/.meta/{key}`` so probes never read the payload itself.
    """

    def __init__(self, root: Path | str, *, clock: Clock = utc_now) -> None:
        self.root = Path(root)
        self.meta_dir = self.root / ".meta"
        self._clock = clock
        self.root.mkdir(parents=True, exist_ok=True)

    def _blob_path(self, key: str) -> Path:
        return safe_relative_path(self.root, key)

    def _meta_path(self, key: str) -> Path:
        return safe_relative_path(self.meta_dir, key)

    def _load_last_modified(self, key: str) -> datetime | None:
        path = self._meta_path(key)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(payload, dict):
            return None
        return parse_iso_z(str(payload.get("cached_at_utc", "")))

    def get(self, key: str) -> StoredBlob | None:
        path = self._blob_path(key)
        if not path.is_file():
            return None
        return StoredBlob(key=key, path=path, last_modified=self._load_last_modified(key))

    def read_raw(self, handle: StoredBlob) -> bytes | None:
        try:
            return handle.path.read_bytes()
        except OSError:
            return None

    def read_typed(self, handle: StoredBlob, model: type[M]) -> M | None:
        raw = self.read_raw(handle)
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError:
            return None

    def write(self, key: str, raw: bytes) -> None:
        # Payload before meta: a failure in between leaves an old timestamp,
        # which reads as stale rather than as falsely fresh.
        try:
            atomic_write_bytes(self._blob_path(key), raw)
            atomic_write_json(self._meta_path(key), {"cached_at_utc": iso_z(self._clock())})
        except OSError as exc:
            raise StoreWriteError(f"failed to write blob {key}: {exc}") from exc
