from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from .errors import MigrationAbortError
from .language import PLAINTEXT, language_for_path
from .theme_contract import FALLBACK_COLOR, THEME_PROPERTY_KEYS, property_column

logger = logging.getLogger(__name__)

FILE_SCHEME_PREFIX = "file://"
CURSOR_FALLBACK_COLOR = "#BBBBBB"
LEGACY_FONT_UUID = "legacy"
LOCAL_FILESYSTEM_UUID = "local"

LanguageClassifier = Callable[[str], str]


@dataclass(frozen=True)
class Migration:
    from_version: int
    to_version: int
    name: str
    apply: Callable[[sqlite3.Connection], None]

    def __post_init__(self) -> None:
        if self.to_version != self.from_version + 1:
            raise ValueError(
                f"Migration '{self.name}' must advance exactly one version "
                f"({self.from_version} -> {self.to_version})."
            )


def read_schema_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("PRAGMA user_version").fetchone()
    return int(row[0]) if row is not None else 0


def table_columns(conn: sqlite3.Connection, table_name: str) -> set[str]:
    rows = conn.execute(f'PRAGMA table_info("{table_name}")').fetchall()
    return {str(row[1]) for row in rows}


def add_column(conn: sqlite3.Connection, table_name: str, column: str, definition: str) -> None:
    if column in table_columns(conn, table_name):
        return
    conn.execute(f'ALTER TABLE "{table_name}" ADD COLUMN "{column}" {definition}')


def iter_rows(conn: sqlite3.Connection, sql: str) -> Iterator[dict[str, Any]]:
    # fetchall first so updates issued while iterating never touch the cursor
    cursor = conn.execute(sql)
    names = [description[0] for description in cursor.description]
    for values in cursor.fetchall():
        yield dict(zip(names, values))


def _create_baseline_schema(conn: sqlite3.Connection) -> None:
    color_columns = ",\n".join(
        f"    {property_column(key)} TEXT NOT NULL DEFAULT '{FALLBACK_COLOR}'"
        for key in THEME_PROPERTY_KEYS
    )
    statements = (
        """
        CREATE TABLE IF NOT EXISTS documents (
            uuid TEXT NOT NULL PRIMARY KEY,
            name TEXT NOT NULL,
            path TEXT NOT NULL,
            modified INTEGER NOT NULL DEFAULT 0,
            position INTEGER NOT NULL DEFAULT 0,
            scroll_x INTEGER NOT NULL DEFAULT 0,
            scroll_y INTEGER NOT NULL DEFAULT 0,
            selection_start INTEGER NOT NULL DEFAULT 0,
            selection_end INTEGER NOT NULL DEFAULT 0
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS fonts (
            font_path TEXT NOT NULL PRIMARY KEY,
            font_name TEXT NOT NULL,
            support_ligatures INTEGER NOT NULL DEFAULT 0,
            is_external INTEGER NOT NULL DEFAULT 1
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS themes (
            uuid TEXT NOT NULL PRIMARY KEY,
            name TEXT NOT NULL,
            author TEXT NOT NULL,
            description TEXT NOT NULL,
        {color_columns}
        )
        """,
    )
    # executescript() would commit the step transaction, so run one by one
    for statement in statements:
        conn.execute(statement)


def _add_servers_and_filesystems(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS servers (
            uuid TEXT NOT NULL PRIMARY KEY,
            scheme TEXT NOT NULL,
            name TEXT NOT NULL,
            address TEXT NOT NULL,
            port INTEGER NOT NULL,
            auth_method INTEGER NOT NULL,
            username TEXT NOT NULL,
            password TEXT NOT NULL,
            private_key TEXT NOT NULL,
            passphrase TEXT NOT NULL
        )
        """
    )
    add_column(
        conn,
        "documents",
        "filesystem_uuid",
        f"TEXT NOT NULL DEFAULT '{LOCAL_FILESYSTEM_UUID}'",
    )
    for row in iter_rows(conn, "SELECT uuid, path FROM documents"):
        path = str(row["path"] or "")
        if path.startswith(FILE_SCHEME_PREFIX):
            continue
        conn.execute(
            "UPDATE documents SET path = ? WHERE uuid = ?",
            (f"{FILE_SCHEME_PREFIX}{path}", row["uuid"]),
        )


def _document_languages_step(classifier: LanguageClassifier) -> Callable[[sqlite3.Connection], None]:
    def apply(conn: sqlite3.Connection) -> None:
        add_column(conn, "documents", "language", f"TEXT NOT NULL DEFAULT '{PLAINTEXT}'")
        for row in iter_rows(conn, "SELECT uuid, path FROM documents"):
            language = classifier(str(row["path"] or "")) or ""
            conn.execute(
                "UPDATE documents SET language = ? WHERE uuid = ?",
                (language, row["uuid"]),
            )

    return apply


def _add_cursor_directories_and_font_ids(conn: sqlite3.Connection) -> None:
    add_column(conn, "themes", "cursor_color", f"TEXT NOT NULL DEFAULT '{CURSOR_FALLBACK_COLOR}'")
    add_column(conn, "servers", "initial_dir", "TEXT NOT NULL DEFAULT ''")
    add_column(conn, "fonts", "font_uuid", f"TEXT NOT NULL DEFAULT '{LEGACY_FONT_UUID}'")


def build_migrations(classifier: LanguageClassifier = language_for_path) -> list[Migration]:
    return [
        Migration(0, 1, "create_baseline_schema", _create_baseline_schema),
        Migration(1, 2, "add_servers_and_filesystems", _add_servers_and_filesystems),
        Migration(2, 3, "add_document_languages", _document_languages_step(classifier)),
        Migration(3, 4, "add_cursor_directories_and_font_ids", _add_cursor_directories_and_font_ids),
    ]


MIGRATIONS = build_migrations()
LATEST_SCHEMA_VERSION = MIGRATIONS[-1].to_version


class MigrationRunner:
    """Apply pending migrations to a SQLite database in ascending order.

    The current version lives in ``PRAGMA user_version``. Each step runs in
    its own write transaction together with its version bump, so a failing
    step leaves the database at the last completed version.
    """

    def __init__(self, migrations: Sequence[Migration] | None = None) -> None:
        steps = list(MIGRATIONS if migrations is None else migrations)
        for previous, current in zip(steps, steps[1:]):
            if current.from_version != previous.to_version:
                raise ValueError(
                    f"Migration '{current.name}' starts at version {current.from_version}, "
                    f"expected {previous.to_version}."
                )
        self._migrations = steps

    @property
    def latest_version(self) -> int:
        return self._migrations[-1].to_version if self._migrations else 0

    def pending(self, current_version: int, target_version: int | None = None) -> list[Migration]:
        target = self.latest_version if target_version is None else target_version
        return [
            migration
            for migration in self._migrations
            if migration.from_version >= current_version and migration.to_version <= target
        ]

    def migrate(self, conn: sqlite3.Connection, *, target_version: int | None = None) -> int:
        current = read_schema_version(conn)
        if current > self.latest_version:
            raise MigrationAbortError(
                f"Database schema version {current} is newer than supported version {self.latest_version}.",
                from_version=current,
                to_version=self.latest_version,
            )

        for migration in self.pending(current, target_version):
            self._apply(conn, migration)
            current = migration.to_version
        return current

    @staticmethod
    def _apply(conn: sqlite3.Connection, migration: Migration) -> None:
        if conn.in_transaction:
            conn.commit()
        conn.execute("BEGIN IMMEDIATE")
        try:
            migration.apply(conn)
            conn.execute(f"PRAGMA user_version = {int(migration.to_version)}")
        except Exception as exc:
            conn.rollback()
            logger.error(
                "Schema migration %s (%d -> %d) failed: %s",
                migration.name,
                migration.from_version,
                migration.to_version,
                exc,
            )
            raise MigrationAbortError(
                f"Schema migration '{migration.name}' failed: {exc}",
                from_version=migration.from_version,
                to_version=migration.to_version,
            ) from exc
        conn.commit()
        logger.info(
            "Applied schema migration %s (%d -> %d)",
            migration.name,
            migration.from_version,
            migration.to_version,
        )
