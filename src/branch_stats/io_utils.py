"""Atomic file write helpers."""

from __future__ import annotations

import json
import os
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Any


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers never observe a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".tmp-{path.name}-{uuid.uuid4().hex}")
    try:
        with tmp_path.open("wb") as handle:
            handle.write(data)
        os.replace(tmp_path, path)
    except OSError:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
        raise


def atomic_write_json(path: Path, value: Any) -> None:
    payload = json.dumps(value, sort_keys=True, ensure_ascii=True, indent=2) + "\n"
    atomic_write_bytes(path, payload.encode("utf-8"))


def safe_relative_path(root: Path, key: str) -> Path:
    """Resolve ``key`` under ``root``, rejecting absolute keys and parent hops."""
    relative = Path(key)
    if not key or relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"invalid storage key: {key!r}")
    return root / relative
