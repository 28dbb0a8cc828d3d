from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from branch_stats.cache_store import FilesystemBlobStore
from branch_stats.errors import StoreWriteError
from branch_stats.models import ServiceRecord

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
KEY = "player-service-record/john-doe.json"


def test_missing_key_probes_as_absent(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path)

    assert store.get(KEY) is None


def test_write_then_probe_reads_back_bytes_and_timestamp(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    raw = b'{"StatusCode": 0, "Gamertag": "John Doe"}'

    store.write(KEY, raw)
    handle = store.get(KEY)

    assert handle is not None
    assert handle.last_modified == T0
    assert store.read_raw(handle) == raw
    record = store.read_typed(handle, ServiceRecord)
    assert record is not None
    assert record.gamertag == "John Doe"
    assert (tmp_path / "player-service-record" / "john-doe.json").read_bytes() == raw


def test_overwrite_replaces_value(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    store.write(KEY, b'{"StatusCode": 0, "Gamertag": "old"}')
    store.write(KEY, b'{"StatusCode": 0, "Gamertag": "new"}')

    handle = store.get(KEY)
    assert handle is not None
    record = store.read_typed(handle, ServiceRecord)
    assert record is not None
    assert record.gamertag == "new"
    leftovers = [path.name for path in tmp_path.rglob(".tmp-*")]
    assert leftovers == []


def test_blob_without_meta_has_no_timestamp(tmp_path: Path) -> None:
    path = tmp_path / "other" / "metadata.json"
    path.parent.mkdir(parents=True)
    path.write_bytes(b'{"StatusCode": 0}')
    store = FilesystemBlobStore(tmp_path)

    handle = store.get("other/metadata.json")

    assert handle is not None
    assert handle.last_modified is None


def test_corrupt_meta_has_no_timestamp(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    store.write(KEY, b'{"StatusCode": 0}')
    (tmp_path / ".meta" / KEY).write_text(json.dumps(["nope"]), encoding="utf-8")

    handle = store.get(KEY)

    assert handle is not None
    assert handle.last_modified is None


def test_read_typed_returns_none_for_undecodable_blob(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    store.write(KEY, b"{truncated")

    handle = store.get(KEY)

    assert handle is not None
    assert store.read_typed(handle, ServiceRecord) is None


def test_write_failure_raises_store_write_error(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    (tmp_path / "player-service-record").write_text("not a directory", encoding="utf-8")

    with pytest.raises(StoreWriteError):
        store.write(KEY, b'{"StatusCode": 0}')


def test_keys_cannot_escape_root(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path / "blobs")

    with pytest.raises(ValueError):
        store.get("../outside.json")


def test_typed_payload_dumps_back_to_stored_fields(tmp_path: Path) -> None:
    store = FilesystemBlobStore(tmp_path, clock=lambda: T0)
    raw = b'{"StatusCode": 1, "Gamertag": "John Doe", "Extra": {"Kills": 3}}'
    store.write(KEY, raw)
    handle = store.get(KEY)
    assert handle is not None

    record = store.read_typed(handle, ServiceRecord)

    assert record is not None
    assert record.to_json_dict() == json.loads(raw)
