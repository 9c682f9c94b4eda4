"""The schema migrations of the photo database, in the order they apply."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from photomigrate.schema import (
    ForeignKey,
    Table,
    big_unsigned,
    boolean,
    date_time,
    enumeration,
    pk_auto,
    string,
    text,
    unsigned,
)

Execute = Callable[[str], object]


class TagType(enum.Enum):
    """Kinds of tag."""

    CATEGORY = "category"
    PHOTOGRAPHER = "photographer"


@dataclass(frozen=True)
class Migration:
    """A named migration that creates one table and drops it again."""

    name: str
    table: Table

    def up(self, execute: Execute) -> None:
        """Create the table by running its DDL through ``execute``."""
        execute(self.table.create_sql())

    def down(self, execute: Execute) -> None:
        """Drop the table by running its DDL through ``execute``."""
        execute(self.table.drop_sql())


def _timestamps():
    return [date_time("created_at"), date_time("updated_at", on_update=True)]


USER = Table(
    "user",
    [
        pk_auto("id"),
        string("email", 320, unique=True),
        string("keycloak_sub", 36, fixed=True, unique=True),
        date_time("created_at"),
    ],
)

PHOTO = Table("photo", [pk_auto("id"), *_timestamps()])

PHOTO_REACTION = Table(
    "photo_reaction",
    [
        big_unsigned("photo_id"),
        big_unsigned("user_id"),
        boolean("is_recommended"),
        text("comment", nullable=True),
        *_timestamps(),
    ],
    primary_key=("photo_id", "user_id"),
    foreign_keys=[
        ForeignKey("photo_id", PHOTO.name, "id"),
        ForeignKey("user_id", USER.name, "id"),
    ],
)

TAG = Table(
    "tag",
    [
        pk_auto("id"),
        string("name", 15, unique=True),
        string("description", 256),
        string("note", 256),
        enumeration("tag_type", (t.value for t in TagType)),
    ],
)

PHOTO_TAG = Table(
    "photo_tag",
    [big_unsigned("photo_id"), big_unsigned("tag_id")],
    primary_key=("photo_id", "tag_id"),
    foreign_keys=[
        ForeignKey("photo_id", PHOTO.name, "id"),
        ForeignKey("tag_id", TAG.name, "id"),
    ],
)

DIRECTORY = Table(
    "directory",
    [
        pk_auto("id"),
        big_unsigned("parent_id", nullable=True),
        string("name", 256),
        string("path", 4096),
        *_timestamps(),
    ],
    foreign_keys=[ForeignKey("parent_id", "directory", "id")],
)

FLICKR_PHOTO = Table(
    "flickr_photo",
    [
        big_unsigned("flickr_id"),
        big_unsigned("photo_id"),
        boolean("is_public"),
        *_timestamps(),
    ],
    primary_key=("flickr_id",),
    foreign_keys=[ForeignKey("photo_id", PHOTO.name, "id")],
)

FLICKR_PHOTO_SIZE = Table(
    "flickr_photo_size",
    [
        big_unsigned("flickr_photo_id"),
        string("server_id", 10, fixed=True),
        string("secret", 25, fixed=True),
        string("suffix", 10),
        unsigned("width"),
        unsigned("height"),
        *_timestamps(),
    ],
    primary_key=("flickr_photo_id", "suffix"),
    foreign_keys=[ForeignKey("flickr_photo_id", FLICKR_PHOTO.name, "flickr_id")],
)

FLICKR_PHOTOSET = Table(
    "flickr_photoset",
    [
        big_unsigned("flickr_id"),
        big_unsigned("user_id"),
        string("title", 256),
        string("description", 500),
        *_timestamps(),
    ],
    primary_key=("flickr_id",),
    foreign_keys=[ForeignKey("user_id", USER.name, "id")],
)

FLICKR_PHOTOSET_TAG = Table(
    "flickr_photoset_tag",
    [big_unsigned("flickr_id"), big_unsigned("tag_id")],
    primary_key=("flickr_id", "tag_id"),
    foreign_keys=[
        ForeignKey("flickr_id", FLICKR_PHOTOSET.name, "flickr_id"),
        ForeignKey("tag_id", TAG.name, "id"),
    ],
)

PHOTO_FILE = Table(
    "photo_file",
    [
        big_unsigned("photo_id"),
        big_unsigned("directory_id"),
        string("name", 256),
        string("integrity", 64, fixed=True),
        *_timestamps(),
    ],
    primary_key=("directory_id", "integrity"),
    foreign_keys=[
        ForeignKey("photo_id", PHOTO.name, "id"),
        ForeignKey("directory_id", DIRECTORY.name, "id"),
    ],
)

_MIGRATIONS = (
    Migration("m20250514_135430_create_users", USER),
    Migration("m20250515_160120_create_photos", PHOTO),
    Migration("m20250515_160714_create_photo_reactions", PHOTO_REACTION),
    Migration("m20250517_080512_create_tags", TAG),
    Migration("m20250517_080513_create_photo_tags", PHOTO_TAG),
    Migration("m20250525_190914_create_directories", DIRECTORY),
    Migration("m20250525_191252_create_flickr_photos", FLICKR_PHOTO),
    Migration("m20250525_195757_create_flickr_photo_sizes", FLICKR_PHOTO_SIZE),
    Migration("m20250525_205645_create_flickr_photosets", FLICKR_PHOTOSET),
    Migration("m20250525_210220_create_flickr_photoset_tags", FLICKR_PHOTOSET_TAG),
    Migration("m20250525_210752_create_photo_files", PHOTO_FILE),
)


def migrations() -> list[Migration]:
    """All migrations, oldest first."""
    return list(_MIGRATIONS)