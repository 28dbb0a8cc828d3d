"""CLI entrypoint for branch-stats."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from branch_stats.errors import BranchStatsError, ConfigError
from branch_stats.logging_config import configure_logging
from branch_stats.player_index import FilesystemPlayerIndex
from branch_stats.repo import AcquireOutcome, AcquireResult, WaypointRepository, index_root
from branch_stats.resources import ResourceKey, ResourceKind
from branch_stats.settings import Settings
from branch_stats.time_utils import iso_z
from branch_stats.waypoint_client import WaypointClient

GLOBAL_COMMANDS = {
    "metadata": ResourceKind.METADATA,
    "playlists": ResourceKind.PLAYLISTS,
    "challenges": ResourceKind.CHALLENGES,
}
PLAYER_COMMANDS = {
    "service-record": ResourceKind.SERVICE_RECORD,
    "game-history": ResourceKind.GAME_HISTORY,
}


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if args.data_dir.strip():
        overrides["data_dir"] = args.data_dir.strip()
    if args.base_url.strip():
        overrides["waypoint_base_url"] = args.base_url.strip()
    if args.game.strip():
        overrides["waypoint_game"] = args.game.strip()
    if args.log_level.strip():
        overrides["log_level"] = args.log_level.strip()
    return Settings(**overrides)


def _result_payload(result: AcquireResult, *, detail: bool) -> Any:
    data = result.payload.to_json_dict() if result.payload is not None else None
    if not detail:
        return data
    return {
        "key": result.key.path(),
        "outcome": result.outcome.value,
        "cached_at_utc": iso_z(result.cached_at) if result.cached_at else None,
        "verdict": type(result.verdict).__name__ if result.verdict is not None else None,
        "data": data,
    }


def _cmd_acquire(args: argparse.Namespace, settings: Settings) -> int:
    if args.command in PLAYER_COMMANDS:
        key = ResourceKey.player(PLAYER_COMMANDS[args.command], args.gamertag)
    else:
        key = ResourceKey.singleton(GLOBAL_COMMANDS[args.command])
    with WaypointClient(settings) as client:
        repo = WaypointRepository.from_settings(settings, fetcher=client)
        result = repo.acquire_result(key)
    print(json.dumps(_result_payload(result, detail=args.detail), sort_keys=True, indent=2))
    if result.outcome == AcquireOutcome.ABSENT:
        print(f"no data available for {key.label}", file=sys.stderr)
        return 1
    return 0


def _cmd_players(args: argparse.Namespace, settings: Settings) -> int:
    index = FilesystemPlayerIndex(index_root(Path(settings.data_dir), settings.waypoint_game))
    rows = [index.get(identifier) for identifier in index.list_seen()]
    print(json.dumps([row for row in rows if row is not None], sort_keys=True, indent=2))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="branch-stats")
    parser.add_argument(
        "--data-dir", default="", help="Override storage root (default from settings)."
    )
    parser.add_argument("--base-url", default="", help="Override Waypoint stats base URL.")
    parser.add_argument("--game", default="", help="Waypoint game key (default h4).")
    parser.add_argument("--log-level", default="", help="Logging level (default WARNING).")
    subparsers = parser.add_subparsers(dest="command")

    for name, kind in PLAYER_COMMANDS.items():
        sub = subparsers.add_parser(name, help=f"Show a player's {kind.value}")
        sub.add_argument("gamertag")
        sub.add_argument("--detail", action="store_true", help="Include cache outcome.")
        sub.set_defaults(func=_cmd_acquire)

    for name, kind in GLOBAL_COMMANDS.items():
        sub = subparsers.add_parser(name, help=f"Show global {kind.value}")
        sub.add_argument("--detail", action="store_true", help="Include cache outcome.")
        sub.set_defaults(func=_cmd_acquire)

    players = subparsers.add_parser("players", help="List players seen so far")
    players.set_defaults(func=_cmd_players)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        settings = _load_settings(args)
        try:
            configure_logging(settings.log_level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return int(func(args, settings))
    except (BranchStatsError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
