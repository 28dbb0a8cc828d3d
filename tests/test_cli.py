from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from branch_stats import cli
from branch_stats.cache_store import FilesystemBlobStore
from branch_stats.endpoints import Endpoint
from branch_stats.errors import TransportError
from branch_stats.player_index import FilesystemPlayerIndex
from branch_stats.resources import ResourceKind
from branch_stats.waypoint_client import FetchResponse


class _FakeClient:
    calls: list[Endpoint] = []
    response: FetchResponse | None = None

    def __init__(self, settings) -> None:
        self.settings = settings

    def __enter__(self) -> _FakeClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    def fetch(self, endpoint: Endpoint) -> FetchResponse:
        type(self).calls.append(endpoint)
        if type(self).response is None:
            raise TransportError("offline")
        return type(self).response


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger("branch_stats")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[_FakeClient]:
    _FakeClient.calls = []
    _FakeClient.response = None
    monkeypatch.setattr(cli, "WaypointClient", _FakeClient)
    return _FakeClient


def test_cli_serves_fresh_cache_without_network(
    tmp_path: Path, fake_client: type[_FakeClient], capsys: pytest.CaptureFixture[str]
) -> None:
    store = FilesystemBlobStore(tmp_path / "blobs" / "h4")
    store.write("other/metadata.json", b'{"StatusCode": 0, "Version": 3}')

    code = cli.main(["--data-dir", str(tmp_path), "metadata", "--detail"])

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert fake_client.calls == []
    assert out["outcome"] == "fresh"
    assert out["key"] == "other/metadata.json"
    assert out["data"] == {"StatusCode": 0, "Version": 3}


def test_cli_fetches_player_and_lists_index(
    tmp_path: Path, fake_client: type[_FakeClient], capsys: pytest.CaptureFixture[str]
) -> None:
    fake_client.response = FetchResponse(
        status_code=200, content=b'{"StatusCode": 1, "Gamertag": "John Doe"}', duration_ms=1
    )

    code = cli.main(["--data-dir", str(tmp_path), "service-record", "John Doe"])
    record = json.loads(capsys.readouterr().out)
    players_code = cli.main(["--data-dir", str(tmp_path), "players"])
    players = json.loads(capsys.readouterr().out)

    assert code == 0
    assert record["Gamertag"] == "John Doe"
    assert players_code == 0
    assert players == [
        {"gamertag": "John Doe", "identifier": "john-doe", "kind": "service-record"}
    ]
    assert FilesystemPlayerIndex(tmp_path / "index" / "h4").list_seen() == ["john-doe"]


def test_cli_reports_absent_data(
    tmp_path: Path, fake_client: type[_FakeClient], capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["--data-dir", str(tmp_path), "game-history", "Nobody Here"])

    captured = capsys.readouterr()
    assert code == 1
    assert json.loads(captured.out) is None
    assert "no data available for game-history:nobody-here" in captured.err
    assert len(fake_client.calls) == 1


def test_cli_rejects_bad_log_level_and_gamertag(
    tmp_path: Path, fake_client: type[_FakeClient], capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--data-dir", str(tmp_path), "--log-level", "chatty", "metadata"]) == 2
    assert cli.main(["--data-dir", str(tmp_path), "service-record", "a/b"]) == 2
    assert fake_client.calls == []


def test_cli_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 0
    assert "branch-stats" in capsys.readouterr().out


def test_global_commands_cover_all_singleton_kinds() -> None:
    kinds = set(cli.GLOBAL_COMMANDS.values()) | set(cli.PLAYER_COMMANDS.values())
    assert kinds == set(ResourceKind)
