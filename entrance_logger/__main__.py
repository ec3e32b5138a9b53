"""Command-line interface for the entrance logger.

Run:
    python -m entrance_logger list --search library
    python -m entrance_logger log LIB-01 1 --lat 40.0 --lng -75.0 --accuracy 8
    python -m entrance_logger serve --sheet-file sheets.json --seed
"""
from __future__ import annotations

import argparse
import asyncio
import functools
import getpass
import logging
import sys

from .config import Config, load_config
from .connectivity import ConnectivityMonitor
from .const import BUNDLED_BUILDINGS, MESSAGE_INCORRECT_PASSWORD, SHEET_BUILDINGS
from .coordinator import EntranceLoggerCoordinator
from .errors import EntranceLoggerError, GeolocationError
from .geolocation import PositionProvider, StaticLocationSource
from .requests import check_availability
from .server import run_server
from .sheet_store import SheetLogStore
from .storage import JsonFileStore, LocalStorage, MemoryStore

_LOGGER = logging.getLogger(__name__)


def build_coordinator(config: Config, args: argparse.Namespace) -> EntranceLoggerCoordinator:
    source = None
    if getattr(args, "lat", None) is not None and getattr(args, "lng", None) is not None:
        source = StaticLocationSource(args.lat, args.lng, args.accuracy)
    probe = None
    if config.endpoint:
        probe = functools.partial(check_availability, config.endpoint, config.request_timeout)
    return EntranceLoggerCoordinator(
        config,
        LocalStorage(JsonFileStore(config.storage_path)),
        PositionProvider(source),
        ConnectivityMonitor(probe=probe, interval=config.probe_interval),
    )


async def _login(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> bool:
    password = args.password if args.password is not None else getpass.getpass("Team password: ")
    if not await coordinator.async_login(password, args.name):
        print(MESSAGE_INCORRECT_PASSWORD, file=sys.stderr)
        return False
    if coordinator.data.degraded_reason:
        print(f"Working in offline mode: {coordinator.data.degraded_reason}", file=sys.stderr)
    return True


async def _cmd_list(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> int:
    coordinator.set_query(args.search or "")
    data = coordinator.data
    for view in data.visible:
        flag = " [under construction]" if view.under_construction else ""
        print(f"{view.building.id:<10} {view.building.name:<32} {view.status}{flag}")
    print(f"Progress: {data.progress}%  ({len(data.queued)} pending sync)")
    return 0


async def _cmd_log(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> int:
    building = coordinator.find_building(args.building_id)
    if building is None:
        print(f"Unknown building {args.building_id}", file=sys.stderr)
        return 2
    try:
        result = await coordinator.async_log_entrance(
            building, args.entrance, args.under_construction, args.enhanced
        )
    except GeolocationError as err:
        print(err.message, file=sys.stderr)
        return 1
    print(result.message)
    return 0


async def _cmd_sync(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> int:
    connectivity = coordinator.connectivity
    before = len(coordinator.queue)
    # An offline -> online transition drains the queue through the restored listener
    if args.watch:
        connectivity.start()
    else:
        await connectivity.async_probe()

    while True:
        if connectivity.is_online:
            await coordinator.async_sync()
        remaining = len(coordinator.queue)
        if not remaining or not args.watch:
            break
        _LOGGER.debug("%s submissions still queued, retrying in %ss", remaining, connectivity.interval)
        await asyncio.sleep(connectivity.interval)

    if not connectivity.is_online:
        print("Remote store unreachable", file=sys.stderr)
    print(f"Synced {max(before - remaining, 0)}, {remaining} still queued")
    return 0 if remaining == 0 else 1


async def _cmd_delete(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> int:
    deleted = await coordinator.async_delete_logs(args.building_id, args.entrance, args.latest)
    print(f"Deleted {deleted} log entries")
    return 0


async def _cmd_undo(coordinator: EntranceLoggerCoordinator, args: argparse.Namespace) -> int:
    deleted = await coordinator.async_undo_last()
    print(f"Undid last log ({deleted} entry deleted)")
    return 0


async def _run_client_command(config: Config, args: argparse.Namespace) -> int:
    coordinator = build_coordinator(config, args)
    try:
        if not await _login(coordinator, args):
            return 1
        return await args.handler(coordinator, args)
    finally:
        await coordinator.async_shutdown()


def _cmd_serve(args: argparse.Namespace) -> int:
    store = SheetLogStore(JsonFileStore(args.sheet_file) if args.sheet_file else MemoryStore())
    store.setup_sheets()
    if args.seed and not store.read_sheet(SHEET_BUILDINGS):
        store.import_buildings(BUNDLED_BUILDINGS)
    run_server(store, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="entrance_logger", description="Log visited building entrances.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--env-file", default=None, help="path to a .env file")
    parser.add_argument("--endpoint", default=None, help="remote store URL")
    parser.add_argument("--storage", default=None, help="local storage JSON file")
    parser.add_argument("--password", default=None, help="team password (prompted when omitted)")
    parser.add_argument("--name", default=None, help="display name for this session")

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="list buildings with their status")
    p_list.add_argument("--search", default="", help="filter by name or id")
    p_list.set_defaults(handler=_cmd_list)

    p_log = sub.add_parser("log", help="log a visited entrance")
    p_log.add_argument("building_id")
    p_log.add_argument("entrance", type=int)
    p_log.add_argument("--lat", type=float, default=None)
    p_log.add_argument("--lng", type=float, default=None)
    p_log.add_argument("--accuracy", type=float, default=0.0)
    p_log.add_argument("--under-construction", action="store_true")
    p_log.add_argument("--enhanced", action="store_true", help="retry to improve accuracy")
    p_log.set_defaults(handler=_cmd_log)

    p_sync = sub.add_parser("sync", help="replay submissions queued while offline")
    p_sync.add_argument(
        "--watch", action="store_true", help="keep probing the remote store until the queue is empty"
    )
    p_sync.set_defaults(handler=_cmd_sync)

    p_delete = sub.add_parser("delete", help="delete logs of a building")
    p_delete.add_argument("building_id")
    p_delete.add_argument("--entrance", type=int, default=None)
    p_delete.add_argument("--latest", action="store_true", help="only the most recent matching log")
    p_delete.set_defaults(handler=_cmd_delete)

    p_undo = sub.add_parser("undo", help="delete the most recent log")
    p_undo.set_defaults(handler=_cmd_undo)

    p_serve = sub.add_parser("serve", help="run a local remote store")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8765)
    p_serve.add_argument("--sheet-file", default=None, help="persist sheets to this JSON file")
    p_serve.add_argument("--seed", action="store_true", help="import the bundled buildings when empty")
    p_serve.set_defaults(handler=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _cmd_serve(args)

    try:
        config = load_config(args.env_file, endpoint=args.endpoint, storage_path=args.storage)
        return asyncio.run(_run_client_command(config, args))
    except EntranceLoggerError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
