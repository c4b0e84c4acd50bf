from __future__ import annotations

import importlib
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

_SESSION_DIR = Path(tempfile.mkdtemp(prefix="squircleapi-tests-"))
os.environ.setdefault("SQUIRCLE_RUNTIME_DB_PATH", str(_SESSION_DIR / "runtime.v1.sqlite3"))
os.environ.setdefault("SQUIRCLE_EXPORT_DIR", str(_SESSION_DIR / "exports"))

from squircleapi.export_sink import DirectorySink  # noqa: E402
from squircleapi.settings_store import SettingsStore  # noqa: E402
from squircleapi.theme_store import ThemeStore  # noqa: E402

squircleapi_module = importlib.import_module("squircleapi.app")


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def store(tmp_path):
    runtime_db_path = tmp_path / "runtime.v1.sqlite3"
    return ThemeStore(runtime_db_path, SettingsStore(runtime_db_path))


@pytest.fixture()
def client(tmp_path, monkeypatch):
    runtime_db_path = tmp_path / "runtime.v1.sqlite3"
    theme_store = ThemeStore(runtime_db_path, SettingsStore(runtime_db_path))
    theme_store.ensure_schema()

    monkeypatch.setattr(squircleapi_module, "theme_store", theme_store)
    monkeypatch.setattr(squircleapi_module, "export_sink", DirectorySink(tmp_path / "exports"))

    return TestClient(squircleapi_module.app)
