from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from app import create_app
from persistence.disk_store import DiskJsonDatabase
from persistence.errors import LoadError
from persistence.repositories import AsyncDiskResourceRepository
from settings import VERSION, Settings, get_settings

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port number: {value}") from None
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"Invalid port number: {value}")
    return port


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="jserve",
        description="JServe - JSON REST server backed by a single JSON file",
    )
    ap.add_argument("-f", dest="file", metavar="FILE", required=True, help="JSON file to use as database (required)")
    ap.add_argument(
        "-p",
        dest="port",
        metavar="PORT",
        type=_port,
        # argparse runs string defaults through `type`, so JSERVE_PORT gets the same checks.
        default=settings.default_port,
        help="Port to listen on (default: %(default)s, or JSERVE_PORT)",
    )
    ap.add_argument("-v", "--version", action="version", version=f"jserve version {VERSION}")
    return ap


def print_endpoints(base_url: str, collections: list[str]) -> None:
    print("\nAvailable endpoints:")
    for name in collections:
        print(f"- {base_url}/{name}")
    print(f"\nServer running at {base_url}")


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    settings = get_settings()
    ap = build_parser(settings)
    args = ap.parse_args(argv)
    if settings.log_level not in LOG_LEVELS:
        ap.error(f"Invalid log level: {settings.log_level} (JSERVE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)})")

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    database = DiskJsonDatabase(Path(args.file), indent=settings.json_indent)
    try:
        repository = AsyncDiskResourceRepository.open(database)
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    collections = asyncio.run(repository.collection_names())
    logger.info("Loaded %d collection(s) from %s", len(collections), database.path)

    base_url = f"http://{settings.host}:{args.port}"
    print_endpoints(base_url, collections)

    app = create_app(repository, settings)
    uvicorn.run(app, host=settings.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
