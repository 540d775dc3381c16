"""Command-line interface for the storefront service."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from storefront.config import Settings, load_settings
from storefront.database import Database

logger = logging.getLogger("storefront.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Storefront service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (defaults to STOREFRONT_CONFIG or config/storefront.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the storefront database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db"}

    # Global options come first; everything after them belongs to a subcommand.
    index = 0
    while index < len(args_list) and args_list[index] == "--config":
        index += 2
    rest = args_list[index:]

    if not rest:
        args_list = [*args_list, "serve"]
    else:
        first = rest[0]
        if first not in ("-h", "--help") and first not in known_commands:
            if not any(flag in rest for flag in ("-h", "--help")):
                args_list = [*args_list[:index], "serve", *rest]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from storefront import create_app
    import uvicorn

    logger.info("Starting storefront API on http://%s:%s", host, port)

    app = create_app(database=database, settings=settings)
    uvicorn.run(app, host=host, port=port, log_level="info")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    database = _initialise_database(settings)

    if args.command == "init-db":
        return 0

    _serve(settings=settings, database=database, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
