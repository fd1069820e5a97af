"""Command line entry point: serve the API or query the network offline."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from route_optimizer.core.config import get_settings
from route_optimizer.core.errors import NoPathFound, RouteOptimizerError
from route_optimizer.core.logging import configure_logging
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.models.junction_directory import JunctionDirectory
from route_optimizer.models.network_loader import default_network, dump_network, load_network
from route_optimizer.services.route_planner import RoutePlanner
from route_optimizer.services.traffic import TrafficUpdateService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route-optimizer",
        description="Smart Traffic Route Optimizer - shortest routes under live traffic",
    )
    parser.add_argument("--junctions", help="Path to junctions.json (default: built-in demo network)")
    parser.add_argument("--roads", help="Path to roads.json (default: built-in demo network)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default from settings)")
    serve.add_argument("--port", type=int, default=None, help="Port (default from settings)")

    route = subparsers.add_parser("route", help="Print the fastest route between two junctions")
    route.add_argument("source", type=int)
    route.add_argument("destination", type=int)
    route.add_argument(
        "--traffic",
        nargs=3,
        action="append",
        default=[],
        metavar=("FROM", "TO", "MULTIPLIER"),
        help="Apply a traffic multiplier before routing (repeatable)",
    )

    search = subparsers.add_parser("search", help="Find junctions by name prefix")
    search.add_argument("name")
    search.add_argument("--exact", action="store_true", help="Match the whole name, ignoring case")

    subparsers.add_parser("show", help="Print every road with base and current time")

    export = subparsers.add_parser("export", help="Write the network as junctions.json and roads.json")
    export.add_argument("directory", help="Output directory")
    return parser


def _load_store(args: argparse.Namespace) -> GraphStore:
    settings = get_settings()
    junctions_path = args.junctions or settings.junctions_path
    roads_path = args.roads or settings.roads_path
    junctions, roads = load_network(junctions_path, roads_path)
    store = GraphStore(min_multiplier=settings.min_multiplier, max_multiplier=settings.max_multiplier)
    store.load(junctions, roads)
    return store


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    if args.junctions or args.roads:
        # Fail before binding if the files are unusable.
        load_network(args.junctions, args.roads)
        os.environ["ROUTE_OPTIMIZER_JUNCTIONS_PATH"] = str(Path(args.junctions).resolve())
        os.environ["ROUTE_OPTIMIZER_ROADS_PATH"] = str(Path(args.roads).resolve())
        # The app's startup hook reads the paths through get_settings().
        get_settings.cache_clear()

    settings = get_settings()
    uvicorn.run(
        "route_optimizer.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _cmd_route(args: argparse.Namespace) -> int:
    store = _load_store(args)
    service = TrafficUpdateService(store)
    for from_id, to_id, multiplier in args.traffic:
        result = service.apply(from_id, to_id, multiplier)
        if not result.success:
            print(f"[ERROR] {result.message}", file=sys.stderr)
            return 1

    outcome = RoutePlanner(store).plan(args.source, args.destination)
    try:
        result = outcome.unwrap()
    except NoPathFound as exc:
        print(f"[ERROR] {exc.message}", file=sys.stderr)
        return 1

    print("Path: " + " -> ".join(junction.name for junction in result.path))
    print(f"Total Time: {result.total_time:.1f} minutes")
    print(f"Distance: {result.total_distance:.1f} km")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    directory = JunctionDirectory(_load_store(args).snapshot().junctions())
    if args.exact:
        junction = directory.find_by_name(args.name)
        matches = [junction] if junction is not None else []
    else:
        matches = directory.search(args.name)
    if not matches:
        print(f"No junction matches '{args.name}'", file=sys.stderr)
        return 1
    for junction in matches:
        print(f"{junction.id:>6}  {junction.name}  ({junction.lat:.4f} N, {junction.lng:.4f} E)")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    summary = _load_store(args).describe()
    print(f"Junctions: {summary['junctions']}  Roads: {summary['roadCount']}  Components: {summary['components']}")
    for road in summary["roads"]:
        arrow = "->" if road["directed"] else "<->"
        print(
            f"  {road['from']} {arrow} {road['to']}: {road['distance']}km, "
            f"base {road['baseTime']}min, current {road['currentTime']:.1f}min"
        )
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    if args.junctions or args.roads:
        junctions, roads = load_network(args.junctions, args.roads)
    else:
        junctions, roads = default_network()
    junctions_doc, roads_doc = dump_network(junctions, roads)
    out_dir = Path(args.directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / "junctions.json").write_text(json.dumps(junctions_doc, indent=2), encoding="utf-8")
    (out_dir / "roads.json").write_text(json.dumps(roads_doc, indent=2), encoding="utf-8")
    print(f"Wrote {len(junctions)} junctions and {len(roads)} roads to {out_dir}")
    return 0


_COMMANDS = {
    "serve": _cmd_serve,
    "route": _cmd_route,
    "search": _cmd_search,
    "show": _cmd_show,
    "export": _cmd_export,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    try:
        return _COMMANDS[args.command](args)
    except RouteOptimizerError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        print(f"[ERROR] {exc.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
