"""Side index of players that have been fetched successfully."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from branch_stats.errors import IndexWriteError
from branch_stats.io_utils import atomic_write_json, safe_relative_path
from branch_stats.resources import ResourceKind


class PlayerIndex(Protocol):
    def record_seen(self, identifier: str, *, gamertag: str, kind: ResourceKind) -> None: ...


class FilesystemPlayerIndex:
    """One JSON record per player under ``{root}/players``; writes replace."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.players_dir = self.root / "players"
        self.players_dir.mkdir(parents=True, exist_ok=True)

    def _record_path(self, identifier: str) -> Path:
        return safe_relative_path(self.players_dir, f"{identifier}.json")

    def record_seen(self, identifier: str, *, gamertag: str, kind: ResourceKind) -> None:
        record = {"identifier": identifier, "gamertag": gamertag, "kind": kind.value}
        try:
            atomic_write_json(self._record_path(identifier), record)
        except OSError as exc:
            raise IndexWriteError(f"failed to index player {identifier}: {exc}") from exc

    def get(self, identifier: str) -> dict[str, Any] | None:
        path = self._record_path(identifier)
        if not path.exists():
            return None
        payload = json.loads(path.read_text(encoding="utf-8"))
        return payload if isinstance(payload, dict) else None

    def list_seen(self) -> list[str]:
        return sorted(path.stem for path in self.players_dir.glob("*.json"))
