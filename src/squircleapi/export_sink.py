from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from .errors import StorageIOError

logger = logging.getLogger(__name__)


class ExportSink(Protocol):
    def write(self, name: str, mime_type: str, data: bytes) -> str: ...


class DirectorySink:
    """Durable sink that stores exported files in a local directory."""

    def __init__(self, directory: Path | None) -> None:
        self._directory = directory

    @classmethod
    def from_env(cls) -> "DirectorySink":
        raw = os.getenv("SQUIRCLE_EXPORT_DIR", "").strip()
        if raw:
            return cls(Path(raw).expanduser())
        return cls(Path.home() / "Downloads")

    def write(self, name: str, mime_type: str, data: bytes) -> str:
        if self._directory is None:
            raise StorageIOError("No export location is available.")
        file_name = Path(name).name
        if not file_name or file_name != name or file_name in {".", ".."}:
            raise StorageIOError(
                f"Export file name '{name}' is not a plain file name.",
                details={"fileName": name},
            )

        target = self._directory / file_name
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageIOError(
                f"Could not write '{file_name}': {exc}",
                details={"fileName": file_name, "mimeType": mime_type},
            ) from exc

        logger.info("Exported %s (%s, %d bytes) to %s", file_name, mime_type, len(data), target)
        return target.resolve().as_uri()
