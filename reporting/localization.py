"""
reporting/localization.py

Static display-name tables for shops and sales regions.

Tables are plain configuration data injected into the pivot builder and
insight generator, so tests and other locales can swap them freely.
A missing entry is never an error: the source-provided value is used.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

UNKNOWN_REGION = "Other"


@dataclass(frozen=True)
class NameLocalization:
    """
    Shop-name and region-name lookup tables.

    ``shop_names`` keys are stored upper-cased and trimmed.
    """

    shop_names: Mapping[str, str] = field(default_factory=dict)
    region_names: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mappings(
        cls,
        shop_names: Mapping[str, str] | None = None,
        region_names: Mapping[str, str] | None = None,
    ) -> "NameLocalization":
        return cls(
            shop_names={str(k).strip().upper(): str(v) for k, v in (shop_names or {}).items()},
            region_names={str(k).strip(): str(v) for k, v in (region_names or {}).items()},
        )

    def display_name(self, entity_id: str, origin_id: str | None, fallback: str) -> str:
        """
        Resolve the display name for a shop.

        The origin id is tried first when non-empty, otherwise the entity id.
        Falls back to *fallback* (the source-provided name) when no entry
        matches.
        """
        lookup_id = origin_id if origin_id and origin_id.strip() else entity_id
        return self.shop_names.get(lookup_id.strip().upper(), fallback)

    def region(self, region_name: str | None) -> str:
        """
        Translate a sales region; composite ``A/B`` values translate per part.
        """
        if not region_name or not region_name.strip():
            return UNKNOWN_REGION
        if region_name in self.region_names:
            return self.region_names[region_name]
        if "/" in region_name:
            return "/".join(
                self.region_names.get(part.strip(), part.strip())
                for part in region_name.split("/")
            )
        return region_name


def load_localization(path: str | Path | None) -> NameLocalization:
    """
    Load a localization JSON document.

    Expected shape::

        {"shop_names": {"CN6385": "..."}, "region_names": {"华东": "..."}}

    A missing path or unreadable document yields empty tables.
    """
    if path is None:
        return NameLocalization()
    file_path = Path(path)
    if not file_path.exists():
        logger.info("Localization file %s not found; using source names", file_path)
        return NameLocalization()

    try:
        with file_path.open("r", encoding="utf-8") as fp:
            payload = json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read localization file %s: %s", file_path, exc)
        return NameLocalization()

    if not isinstance(payload, dict):
        return NameLocalization()
    return NameLocalization.from_mappings(
        shop_names=payload.get("shop_names") or {},
        region_names=payload.get("region_names") or {},
    )
