"""Applies and rolls back migrations, recording which ones the database holds."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from contextlib import closing
from typing import Any

from photomigrate.migrations import Migration
from photomigrate.migrations import migrations as default_migrations
from photomigrate.schema import quote

TRACKING_TABLE = "seaql_migrations"

_T = quote(TRACKING_TABLE)
_CREATE_TRACKING = (
    f"CREATE TABLE IF NOT EXISTS {_T} ( "
    "`version` varchar(255) NOT NULL PRIMARY KEY, "
    "`applied_at` bigint NOT NULL )"
)
_SELECT_APPLIED = f"SELECT `version` FROM {_T} ORDER BY `version`"
_INSERT_APPLIED = f"INSERT INTO {_T} (`version`, `applied_at`) VALUES (%s, %s)"
_DELETE_APPLIED = f"DELETE FROM {_T} WHERE `version` = %s"

logger = logging.getLogger(__name__)


class MigrationError(Exception):
    """A migration could not be applied, rolled back or matched to its record."""


def _check_steps(steps: int | None) -> None:
    if steps is not None and steps < 0:
        raise ValueError(f"steps must not be negative, got {steps}")


class Migrator:
    """Runs migrations against a DB-API connection."""

    def __init__(self, connection: Any, migrations: Iterable[Migration] | None = None) -> None:
        self.connection = connection
        self.migrations = tuple(default_migrations() if migrations is None else migrations)
        seen: set[str] = set()
        for migration in self.migrations:
            if migration.name in seen:
                raise ValueError(f"migration {migration.name!r} is listed twice")
            seen.add(migration.name)
        self._by_name = {migration.name: migration for migration in self.migrations}

    def _execute(self, sql: str, params: tuple | None = None) -> tuple:
        logger.debug("%s", sql)
        with closing(self.connection.cursor()) as cursor:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, params)
            return tuple(cursor.fetchall() or ())

    def _ensure_tracking_table(self) -> None:
        self._execute(_CREATE_TRACKING)

    def applied(self) -> list[str]:
        """Names of the migrations recorded as applied, oldest first."""
        self._ensure_tracking_table()
        return [row[0] for row in self._execute(_SELECT_APPLIED)]

    def _applied_migrations(self) -> list[Migration]:
        result = []
        for name in self.applied():
            migration = self._by_name.get(name)
            if migration is None:
                raise MigrationError(
                    f"migration {name!r} has been applied but is not among the known migrations"
                )
            result.append(migration)
        return result

    def pending(self) -> list[Migration]:
        """Migrations not yet applied, in the order they apply."""
        done = {migration.name for migration in self._applied_migrations()}
        return [migration for migration in self.migrations if migration.name not in done]

    def status(self) -> list[tuple[str, bool]]:
        """Every known migration paired with whether it has been applied."""
        done = {migration.name for migration in self._applied_migrations()}
        return [(migration.name, migration.name in done) for migration in self.migrations]

    def up(self, steps: int | None = None) -> list[str]:
        """Apply pending migrations, all of them or the first ``steps``."""
        _check_steps(steps)
        todo = self.pending()
        if steps is not None:
            todo = todo[:steps]
        for migration in todo:
            try:
                migration.up(self._execute)
            except Exception as exc:
                raise MigrationError(f"applying {migration.name!r} failed: {exc}") from exc
            self._execute(_INSERT_APPLIED, (migration.name, int(time.time())))
            self.connection.commit()
            logger.info("applied %s", migration.name)
        return [migration.name for migration in todo]

    def down(self, steps: int | None = 1) -> list[str]:
        """Roll back the latest ``steps`` applied migrations, or all when None."""
        _check_steps(steps)
        todo = list(reversed(self._applied_migrations()))
        if steps is not None:
            todo = todo[:steps]
        for migration in todo:
            try:
                migration.down(self._execute)
            except Exception as exc:
                raise MigrationError(f"rolling back {migration.name!r} failed: {exc}") from exc
            self._execute(_DELETE_APPLIED, (migration.name,))
            self.connection.commit()
            logger.info("rolled back %s", migration.name)
        return [migration.name for migration in todo]

    def _drop_all_tables(self) -> None:
        tables = [row[0] for row in self._execute("SHOW TABLES")]
        self._execute("SET FOREIGN_KEY_CHECKS = 0")
        try:
            for table in tables:
                try:
                    self._execute(f"DROP TABLE {quote(table)}")
                except Exception as exc:
                    raise MigrationError(f"dropping table {table!r} failed: {exc}") from exc
        finally:
            self._execute("SET FOREIGN_KEY_CHECKS = 1")
        self.connection.commit()

    def fresh(self) -> list[str]:
        """Drop every table in the database, then apply all migrations."""
        self._drop_all_tables()
        return self.up()

    def refresh(self) -> list[str]:
        """Roll back all applied migrations, then apply them all again."""
        self.down(None)
        return self.up()

    def reset(self) -> list[str]:
        """Roll back all applied migrations."""
        return self.down(None)