"""
app/services/manual_input_service.py

Load, save and export manual override values.

Load order: the durable document (shared file) first, then the local store
layered over it key by key. Saving writes the local store only, and only
when the document actually changed. The durable document is produced by
an explicit export; nothing writes it automatically.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from app.config import OverrideStoreSettings, get_override_store_settings
from app.storage import JsonFileStore, KeyValueStore, ManualInputStorageError
from reporting.overrides import (
    ManualOverrideSet,
    OverrideCounts,
    count_overrides,
    export_document,
    load_document,
    merge,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    document: dict[str, Any]
    counts: OverrideCounts

    @property
    def filename(self) -> str:
        return "manual_inputs.json"

    def to_json(self) -> str:
        return json.dumps(self.document, ensure_ascii=False, indent=2)


def _parse(text: str | None, source: str) -> ManualOverrideSet:
    if not text:
        return ManualOverrideSet()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring unreadable override document from %s: %s", source, exc)
        return ManualOverrideSet()
    if not isinstance(payload, dict):
        logger.warning("Ignoring override document from %s: expected an object", source)
        return ManualOverrideSet()
    return load_document(payload)


class ManualInputService:
    def __init__(
        self,
        *,
        store: KeyValueStore,
        durable_file: Path | None = None,
        store_key: str = "manual_inputs",
    ) -> None:
        self._store = store
        self._durable_file = durable_file
        self._store_key = store_key
        self._last_saved: dict[str, Any] | None = None

    def load_durable(self) -> ManualOverrideSet:
        if self._durable_file is None or not self._durable_file.exists():
            return ManualOverrideSet()
        try:
            text = self._durable_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManualInputStorageError(f"Could not read {self._durable_file}: {exc}") from exc
        return _parse(text, str(self._durable_file))

    def load_local(self) -> ManualOverrideSet:
        return _parse(self._store.load(self._store_key), "local store")

    def load(self) -> ManualOverrideSet:
        overrides = merge(self.load_durable(), self.load_local())
        self._last_saved = overrides.to_document()
        return overrides

    def save(self, overrides: ManualOverrideSet) -> bool:
        """
        Persist *overrides* to the local store. Returns False when unchanged.
        """
        document = overrides.to_document()
        if document == self._last_saved:
            return False
        self._store.save(self._store_key, json.dumps(document, ensure_ascii=False))
        self._last_saved = document
        counts = count_overrides(overrides)
        logger.info(
            "Saved manual inputs existing=%d new=%d renamed=%d",
            counts.existing,
            counts.new_entities,
            counts.renamed,
        )
        return True

    def export(self, overrides: ManualOverrideSet, now: datetime | None = None) -> ExportResult:
        return ExportResult(
            document=export_document(overrides, now),
            counts=count_overrides(overrides),
        )


def build_manual_input_service(settings: OverrideStoreSettings | None = None) -> ManualInputService:
    settings = settings or get_override_store_settings()
    return ManualInputService(
        store=JsonFileStore(settings.store_dir),
        durable_file=settings.durable_file,
        store_key=settings.store_key,
    )


_service: ManualInputService | None = None


def get_manual_input_service() -> ManualInputService:
    global _service
    if _service is None:
        _service = build_manual_input_service()
    return _service
