from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from threading import RLock

logger = logging.getLogger(__name__)

KEY_COLOR_SCHEME = "color_scheme"


def default_runtime_db_path() -> Path:
    raw = os.getenv("SQUIRCLE_RUNTIME_DB_PATH", "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".cache" / "squircleapi" / "runtime.v1.sqlite3"


class SettingsStore:
    """String key/value settings persisted next to the runtime tables."""

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path
        self._lock = RLock()
        self._schema_ready = False

    @classmethod
    def from_env(cls) -> "SettingsStore":
        return cls(default_runtime_db_path())

    def get(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                row = conn.execute(
                    "SELECT value FROM settings WHERE key = ?",
                    (key,),
                ).fetchone()
                if row is None:
                    return default
                return str(row["value"])

    def set(self, key: str, value: str) -> None:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                conn.execute(
                    """
                    INSERT INTO settings (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        logger.debug("Setting %s updated", key)

    def remove(self, key: str) -> None:
        with self._lock:
            with self._connect() as conn:
                self._ensure_schema(conn)
                conn.execute("DELETE FROM settings WHERE key = ?", (key,))
        logger.debug("Setting %s removed", key)

    @property
    def color_scheme(self) -> str | None:
        return self.get(KEY_COLOR_SCHEME)

    @color_scheme.setter
    def color_scheme(self, value: str) -> None:
        self.set(KEY_COLOR_SCHEME, value)

    def _connect(self) -> sqlite3.Connection:
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._storage_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._schema_ready:
            return
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._schema_ready = True
