"""Table definitions that render to MySQL DDL statements."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"
ON_UPDATE_CURRENT_TIMESTAMP = "on update CURRENT_TIMESTAMP"


class ForeignKeyAction(enum.Enum):
    """Referential action applied when a referenced row changes."""

    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    NO_ACTION = "NO ACTION"
    SET_DEFAULT = "SET DEFAULT"


def quote(identifier: str) -> str:
    """Quote an identifier with backticks, doubling any backtick inside it."""
    if not identifier:
        raise ValueError("identifier must not be empty")
    return "`" + identifier.replace("`", "``") + "`"


def _quote_literal(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"


@dataclass(frozen=True)
class Column:
    """A single column of a table."""

    name: str
    sql_type: str
    nullable: bool = False
    length: int | None = None
    unique: bool = False
    primary_key: bool = False
    auto_increment: bool = False
    default: str | None = None
    extra: str | None = None

    def to_sql(self) -> str:
        """Render the column definition."""
        parts = [quote(self.name), self.sql_type, "NULL" if self.nullable else "NOT NULL"]
        if self.auto_increment:
            parts.append("AUTO_INCREMENT")
        if self.primary_key:
            parts.append("PRIMARY KEY")
        if self.unique:
            parts.append("UNIQUE")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        if self.extra:
            parts.append(self.extra)
        return " ".join(parts)


@dataclass(frozen=True)
class ForeignKey:
    """A foreign key from one column to a column of another (or the same) table."""

    column: str
    ref_table: str
    ref_column: str
    on_delete: ForeignKeyAction = ForeignKeyAction.CASCADE
    on_update: ForeignKeyAction = ForeignKeyAction.CASCADE

    def to_sql(self) -> str:
        """Render the constraint clause."""
        return (
            f"FOREIGN KEY ({quote(self.column)}) "
            f"REFERENCES {quote(self.ref_table)} ({quote(self.ref_column)}) "
            f"ON DELETE {self.on_delete.value} ON UPDATE {self.on_update.value}"
        )


@dataclass(frozen=True)
class Table:
    """A table: its columns, optional composite primary key and foreign keys."""

    name: str
    columns: Sequence[Column]
    primary_key: Sequence[str] = field(default=())
    foreign_keys: Sequence[ForeignKey] = field(default=())
    if_not_exists: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "primary_key", tuple(self.primary_key))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))
        self._validate()

    def _validate(self) -> None:
        if not self.columns:
            raise ValueError(f"table {self.name!r} has no columns")
        names = [column.name for column in self.columns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"table {self.name!r} repeats columns: {', '.join(duplicates)}")
        known = set(names)
        missing = [name for name in self.primary_key if name not in known]
        if missing:
            raise ValueError(f"primary key of {self.name!r} names unknown columns: {missing}")
        if self.primary_key and any(column.primary_key for column in self.columns):
            raise ValueError(f"table {self.name!r} has more than one primary key")
        for fk in self.foreign_keys:
            if fk.column not in known:
                raise ValueError(f"foreign key of {self.name!r} names unknown column {fk.column!r}")
            if fk.ref_table == self.name and fk.ref_column not in known:
                raise ValueError(
                    f"foreign key of {self.name!r} references unknown column {fk.ref_column!r}"
                )

    def create_sql(self) -> str:
        """Render the CREATE TABLE statement."""
        items = [column.to_sql() for column in self.columns]
        if self.primary_key:
            items.append("PRIMARY KEY (" + ", ".join(quote(n) for n in self.primary_key) + ")")
        items.extend(fk.to_sql() for fk in self.foreign_keys)
        head = "CREATE TABLE IF NOT EXISTS" if self.if_not_exists else "CREATE TABLE"
        return f"{head} {quote(self.name)} ( " + ", ".join(items) + " )"

    def drop_sql(self) -> str:
        """Render the DROP TABLE statement."""
        return f"DROP TABLE {quote(self.name)}"


def pk_auto(name: str) -> Column:
    """An auto-incrementing unsigned big integer primary key."""
    return Column(
        name,
        "bigint UNSIGNED",
        primary_key=True,
        auto_increment=True,
    )


def string(
    name: str,
    length: int,
    *,
    fixed: bool = False,
    unique: bool = False,
    nullable: bool = False,
) -> Column:
    """A varchar column, or a char column when ``fixed`` is set."""
    if length <= 0:
        raise ValueError(f"length of {name!r} must be positive, got {length}")
    kind = "char" if fixed else "varchar"
    return Column(
        name,
        f"{kind}({length})",
        nullable=nullable,
        length=length,
        unique=unique,
    )


def big_unsigned(name: str, *, nullable: bool = False) -> Column:
    """An unsigned big integer column."""
    return Column(name, "bigint UNSIGNED", nullable=nullable)


def unsigned(name: str) -> Column:
    """An unsigned integer column."""
    return Column(name, "int UNSIGNED")


def boolean(name: str) -> Column:
    """A boolean column."""
    return Column(name, "bool")


def text(name: str, *, nullable: bool = False) -> Column:
    """A text column."""
    return Column(name, "text", nullable=nullable)


def date_time(name: str, *, on_update: bool = False) -> Column:
    """A datetime column defaulting to the current time, optionally refreshed on update."""
    return Column(
        name,
        "datetime",
        default=CURRENT_TIMESTAMP,
        extra=ON_UPDATE_CURRENT_TIMESTAMP if on_update else None,
    )


def enumeration(name: str, values: Iterable[str]) -> Column:
    """An ENUM column restricted to the given values, in order."""
    items = list(values)
    if not items:
        raise ValueError(f"enumeration {name!r} needs at least one value")
    if len(set(items)) != len(items):
        raise ValueError(f"enumeration {name!r} repeats values")
    return Column(name, "enum(" + ", ".join(_quote_literal(v) for v in items) + ")")