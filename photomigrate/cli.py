"""Command line for running the photo database migrations."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from urllib.parse import unquote, urlsplit

import pymysql

from photomigrate.migrator import MigrationError, Migrator

DEFAULT_PORT = 3306


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photomigrate", description="Manage the photo database schema."
    )
    parser.add_argument(
        "-u",
        "--database-url",
        default=None,
        help="database URL (defaults to the DATABASE_URL environment variable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log every statement")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("fresh", help="drop all tables, then apply all migrations")
    commands.add_parser("refresh", help="roll back all migrations, then apply them again")
    commands.add_parser("reset", help="roll back all applied migrations")
    commands.add_parser("status", help="show which migrations are applied")
    up = commands.add_parser("up", help="apply pending migrations")
    up.add_argument("-n", "--num", type=_non_negative, default=None)
    down = commands.add_parser("down", help="roll back applied migrations")
    down.add_argument("-n", "--num", type=_non_negative, default=1)
    return parser


def _connection_options(url: str) -> dict:
    parts = urlsplit(url)
    if parts.scheme != "mysql":
        raise ValueError(f"unsupported database scheme {parts.scheme!r}")
    database = parts.path.lstrip("/")
    if not database:
        raise ValueError("database URL names no database")
    options = {
        "host": parts.hostname or "localhost",
        "port": parts.port or DEFAULT_PORT,
        "database": unquote(database),
        "charset": "utf8mb4",
    }
    if parts.username is not None:
        options["user"] = unquote(parts.username)
    if parts.password is not None:
        options["password"] = unquote(parts.password)
    return options


def _run(migrator: Migrator, args: argparse.Namespace) -> None:
    command = args.command or "up"
    if command == "status":
        for name, applied in migrator.status():
            print(f"Migration '{name}'... {'Applied' if applied else 'Pending'}")
        return
    if command in ("reset", "down"):
        steps = None if command == "reset" else args.num
        names = migrator.down(steps)
        for name in names:
            print(f"Rolled back migration '{name}'")
        if not names:
            print("No applied migrations")
        return
    if command == "fresh":
        names = migrator.fresh()
    elif command == "refresh":
        names = migrator.refresh()
    else:
        names = migrator.up(getattr(args, "num", None))
    for name in names:
        print(f"Applied migration '{name}'")
    if not names:
        print("No pending migrations")


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the command line, connect, and run the chosen command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    url = args.database_url or os.environ.get("DATABASE_URL")
    if not url:
        parser.error("DATABASE_URL is not set and no --database-url was given")
    try:
        options = _connection_options(url)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        connection = pymysql.connect(**options)
    except pymysql.MySQLError as exc:
        print(f"error: cannot connect: {exc}", file=sys.stderr)
        return 1
    try:
        _run(Migrator(connection), args)
    except MigrationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        connection.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())