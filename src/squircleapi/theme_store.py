from __future__ import annotations

import logging
import sqlite3
from functools import partial
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Iterable, TypeVar

import anyio
from pydantic import ValidationError

from .errors import (
    ConflictError,
    DeserializationError,
    InvalidColorError,
    NotFoundError,
    StoreError,
)
from .export_sink import ExportSink
from .migrations import MigrationRunner, table_columns
from .settings_store import KEY_COLOR_SCHEME, SettingsStore, default_runtime_db_path
from .theme_contract import (
    MIME_TYPE_JSON,
    THEME_PROPERTY_KEYS,
    PropertyItemV1,
    ThemeExportLocationV1,
    ThemeExportV1,
    ThemeListResponseV1,
    ThemeMetaV1,
    ThemeModelV1,
    ThemeRefV1,
    deserialize_external_theme,
    property_column,
    resolve_colors,
    serialize_external_theme,
    theme_from_external,
)
from .theme_defaults import DEFAULT_THEME_ID, built_in_themes, find_built_in_theme

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_META_COLUMNS = ("uuid", "name", "author", "description")
_THEME_COLUMNS = _META_COLUMNS + tuple(property_column(key) for key in THEME_PROPERTY_KEYS)


class ThemeStore:
    def __init__(
        self,
        storage_path: Path,
        settings_store: SettingsStore,
        *,
        migration_runner: MigrationRunner | None = None,
    ) -> None:
        self._storage_path = storage_path
        self._settings_store = settings_store
        self._migration_runner = migration_runner or MigrationRunner()
        self._lock = RLock()
        self._schema_ready = False

    @classmethod
    def from_env(cls, settings_store: SettingsStore | None = None) -> "ThemeStore":
        storage_path = default_runtime_db_path()
        return cls(storage_path, settings_store or SettingsStore(storage_path))

    @property
    def settings_store(self) -> SettingsStore:
        return self._settings_store

    def ensure_schema(self) -> None:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)

    def list_themes(self, query: str = "") -> ThemeListResponseV1:
        needle = str(query or "").casefold()
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                rows = conn.execute(
                    f"SELECT {', '.join(_THEME_COLUMNS)} FROM themes ORDER BY rowid ASC"
                ).fetchall()
                user_themes = [self._theme_from_row(row) for row in rows]

        # sqlite lower() only folds ASCII, so both groups are filtered here.
        themes = [theme for theme in user_themes + built_in_themes() if needle in theme.name.casefold()]
        return ThemeListResponseV1(themes=themes)

    def get_theme(self, uuid: str) -> ThemeModelV1:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                row = conn.execute(
                    f"SELECT {', '.join(_THEME_COLUMNS)} FROM themes WHERE uuid = ?",
                    (uuid,),
                ).fetchone()
                if row is None:
                    raise NotFoundError(f"Theme '{uuid}' was not found.")
                return self._theme_from_row(row)

    def resolve_theme(self, uuid: str) -> ThemeModelV1:
        built_in = find_built_in_theme(uuid)
        if built_in is not None:
            return built_in
        return self.get_theme(uuid)

    def import_theme(self, raw: bytes | str) -> ThemeModelV1:
        try:
            return theme_from_external(deserialize_external_theme(raw))
        except ValidationError as exc:
            raise DeserializationError(
                "Theme file is missing required fields or contains invalid values.",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc
        except ValueError as exc:
            raise DeserializationError(f"Theme file could not be parsed: {exc}") from exc

    def export_theme(self, model: ThemeModelV1) -> ThemeExportV1:
        return ThemeExportV1(
            fileName=f"{model.name}.json",
            mimeType=MIME_TYPE_JSON,
            content=serialize_external_theme(model),
        )

    def save_export(self, model: ThemeModelV1, sink: ExportSink) -> ThemeExportLocationV1:
        exported = self.export_theme(model)
        location = sink.write(exported.fileName, exported.mimeType, exported.content)
        return ThemeExportLocationV1(fileName=exported.fileName, location=location)

    def create_theme(self, meta: ThemeMetaV1, properties: Iterable[PropertyItemV1]) -> None:
        if find_built_in_theme(meta.uuid) is not None:
            raise ConflictError(f"Theme '{meta.uuid}' is reserved by a built-in theme.")
        try:
            colors = resolve_colors((item.propertyKey, item.propertyValue) for item in properties)
        except ValueError as exc:
            raise InvalidColorError(str(exc)) from exc
        values = (
            meta.uuid,
            meta.name,
            meta.author,
            meta.description,
            *(colors[key] for key in THEME_PROPERTY_KEYS),
        )
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                exists = conn.execute(
                    "SELECT 1 FROM themes WHERE uuid = ?",
                    (meta.uuid,),
                ).fetchone()
                if exists is not None:
                    raise ConflictError(f"Theme '{meta.uuid}' already exists.")
                try:
                    conn.execute(
                        f"""
                        INSERT INTO themes ({', '.join(_THEME_COLUMNS)})
                        VALUES ({', '.join('?' for _ in _THEME_COLUMNS)})
                        """,
                        values,
                    )
                except sqlite3.IntegrityError as exc:
                    raise ConflictError(f"Theme '{meta.uuid}' already exists.") from exc
        logger.info("Created theme %s (%s)", meta.uuid, meta.name)

    def remove_theme(self, model: ThemeRefV1 | ThemeMetaV1) -> None:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                conn.execute("DELETE FROM themes WHERE uuid = ?", (model.uuid,))
            if self._settings_store.color_scheme == model.uuid:
                self._settings_store.remove(KEY_COLOR_SCHEME)
                logger.info("Cleared active theme %s", model.uuid)
        logger.info("Removed theme %s", model.uuid)

    def select_theme(self, model: ThemeRefV1 | ThemeMetaV1) -> None:
        self._settings_store.color_scheme = model.uuid
        logger.info("Selected theme %s", model.uuid)

    def get_selected_theme_id(self) -> str | None:
        return self._settings_store.color_scheme

    def get_active_theme(self) -> ThemeModelV1:
        return self.resolve_theme(self.get_selected_theme_id() or DEFAULT_THEME_ID)

    def _connect(self) -> sqlite3.Connection:
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._storage_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._schema_ready:
            return
        self._migration_runner.migrate(conn)
        self._assert_schema_compatible(conn)
        self._schema_ready = True

    @staticmethod
    def _assert_schema_compatible(conn: sqlite3.Connection) -> None:
        existing_columns = table_columns(conn, "themes")
        missing = set(_THEME_COLUMNS) - existing_columns
        if missing:
            raise StoreError(
                f"Theme storage schema is incompatible. Missing columns: {sorted(missing)}",
                code="THEME_STORAGE_CORRUPTED",
            )

    @staticmethod
    def _theme_from_row(row: sqlite3.Row) -> ThemeModelV1:
        return ThemeModelV1(
            uuid=str(row["uuid"]),
            name=str(row["name"]),
            author=str(row["author"]),
            description=str(row["description"]),
            isExternal=True,
            colors={key: str(row[property_column(key)]) for key in THEME_PROPERTY_KEYS},
        )


class AsyncThemeStore:
    """Runs each ThemeStore operation on an anyio worker thread."""

    def __init__(self, store: ThemeStore) -> None:
        self._store = store

    @property
    def store(self) -> ThemeStore:
        return self._store

    async def _run(self, func: Callable[..., _T], *args: Any) -> _T:
        return await anyio.to_thread.run_sync(partial(func, *args))

    async def list_themes(self, query: str = "") -> ThemeListResponseV1:
        return await self._run(self._store.list_themes, query)

    async def get_theme(self, uuid: str) -> ThemeModelV1:
        return await self._run(self._store.get_theme, uuid)

    async def resolve_theme(self, uuid: str) -> ThemeModelV1:
        return await self._run(self._store.resolve_theme, uuid)

    async def import_theme(self, raw: bytes | str) -> ThemeModelV1:
        return await self._run(self._store.import_theme, raw)

    async def export_theme(self, model: ThemeModelV1) -> ThemeExportV1:
        return await self._run(self._store.export_theme, model)

    async def save_export(self, model: ThemeModelV1, sink: ExportSink) -> ThemeExportLocationV1:
        return await self._run(self._store.save_export, model, sink)

    async def create_theme(self, meta: ThemeMetaV1, properties: Iterable[PropertyItemV1]) -> None:
        await self._run(self._store.create_theme, meta, list(properties))

    async def remove_theme(self, model: ThemeRefV1 | ThemeMetaV1) -> None:
        await self._run(self._store.remove_theme, model)

    async def select_theme(self, model: ThemeRefV1 | ThemeMetaV1) -> None:
        await self._run(self._store.select_theme, model)

    async def get_selected_theme_id(self) -> str | None:
        return await self._run(self._store.get_selected_theme_id)

    async def get_active_theme(self) -> ThemeModelV1:
        return await self._run(self._store.get_active_theme)
