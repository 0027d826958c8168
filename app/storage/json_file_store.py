"""
Directory-backed store: one ``<key>.json`` file per key.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from app.storage.base import KeyValueStore, ManualInputStorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore(KeyValueStore):
    """
    Persist each key as a UTF-8 file under *directory*.

    Writes go to a temporary sibling first and are then renamed into place,
    so readers never observe a half-written document.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ManualInputStorageError(f"Invalid storage key {key!r}.")
        return self._directory / f"{key}.json"

    def load(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManualInputStorageError(f"Could not read {path}: {exc}") from exc

    def save(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise ManualInputStorageError(f"Could not write {path}: {exc}") from exc
        logger.debug("Saved %d byte(s) to %s", len(value), path)
