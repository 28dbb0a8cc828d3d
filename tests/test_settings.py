from __future__ import annotations

import pytest

from branch_stats.settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPARTAN_TOKEN", raising=False)
    monkeypatch.delenv("BRANCH_STATS_SPARTAN_TOKEN", raising=False)
    monkeypatch.delenv("BRANCH_STATS_DATA_DIR", raising=False)

    settings = Settings(_env_file=None)

    assert settings.waypoint_base_url == "https://stats.svc.halowaypoint.com"
    assert settings.waypoint_timeout_s == 10.0
    assert settings.waypoint_language == "en-US"
    assert settings.waypoint_game == "h4"
    assert settings.spartan_token == ""
    assert settings.data_dir == "data/branch_stats"
    assert settings.log_level == "WARNING"


def test_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRANCH_STATS_DATA_DIR", "/srv/branch")
    monkeypatch.setenv("BRANCH_STATS_WAYPOINT_TIMEOUT_S", "2.5")
    monkeypatch.setenv("SPARTAN_TOKEN", "v2=abc")

    settings = Settings(_env_file=None)

    assert settings.data_dir == "/srv/branch"
    assert settings.waypoint_timeout_s == 2.5
    assert settings.spartan_token == "v2=abc"
