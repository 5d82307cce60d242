"""
Command line entry point.

    todo-api migrate   apply pending schema migrations
    todo-api serve     migrate, then start the HTTP server
    todo-api openapi   write the OpenAPI document to disk
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from . import migrations
from .db import Database
from .errors import TodoApiError
from .generate_openapi import generate_openapi
from .logging_config import configure_logging
from .main import create_app
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _migrate(database: Database) -> None:
    database.connect()
    migrations.upgrade(database)


def cmd_migrate(settings: Settings, args: argparse.Namespace) -> int:
    database = Database(settings.database_url, echo=settings.db_echo)
    try:
        _migrate(database)
    finally:
        database.dispose()
    return 0


def cmd_serve(settings: Settings, args: argparse.Namespace) -> int:
    database = Database(settings.database_url, echo=settings.db_echo)
    try:
        if not args.no_migrate:
            _migrate(database)
        app = create_app(settings=settings, database=database)
        uvicorn.run(
            app,
            host=args.host or settings.host,
            port=args.port or settings.port,
            log_level=settings.log_level.lower(),
        )
    finally:
        database.dispose()
    return 0


def cmd_openapi(settings: Settings, args: argparse.Namespace) -> int:
    generate_openapi(args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="todo-api", description="Todo REST backend.")
    sub = ap.add_subparsers(dest="command", required=True)

    p_migrate = sub.add_parser("migrate", help="Apply pending schema migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    p_serve = sub.add_parser("serve", help="Migrate the database and start the HTTP server")
    p_serve.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: $PORT or 8080)")
    p_serve.add_argument(
        "--no-migrate",
        action="store_true",
        help="Skip migrations; startup fails if the schema is out of date",
    )
    p_serve.set_defaults(func=cmd_serve)

    p_openapi = sub.add_parser("openapi", help="Write the OpenAPI document")
    p_openapi.add_argument("--output", default=None, help="Output path (default: interfaces/openapi.json)")
    p_openapi.set_defaults(func=cmd_openapi)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        return args.func(settings, args)
    except TodoApiError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
