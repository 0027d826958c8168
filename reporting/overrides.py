"""
reporting/overrides.py

Operator-entered values for the one period not yet reflected in the
warehouse.

Two kinds of override exist:

* existing shops, keyed ``shop-<shop_id>`` in ``manualDecValues``;
* virtual "new shop" placeholders, keyed ``manual_fr_<n>`` in
  ``manualNewFrValues`` with optional display names in ``manualNewFrNames``.

Overrides are merged additively into summary rows for the target period
only; pivoted shop rows are never modified.

Persisted document
------------------
::

    {
      "lastUpdated": "2025-12-03T08:15:00+00:00",
      "manualDecValues": {"shop-CN6385": 512000},
      "manualNewFrValues": {"manual_fr_1": 180000},
      "manualNewFrNames": {"manual_fr_1": "Harbin Mall"}
    }
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reporting.types import CHANNEL_FRANCHISE, ManualInputRow

ENTITY_KEY_PREFIX = "shop-"
VIRTUAL_KEY_PREFIX = "manual_fr_"

_NUMBER_SEPARATORS = re.compile(r"[,\s]")


def entity_key(entity_id: str) -> str:
    return f"{ENTITY_KEY_PREFIX}{entity_id}"


def virtual_key(number: int) -> str:
    return f"{VIRTUAL_KEY_PREFIX}{number}"


def virtual_keys(count: int) -> list[str]:
    return [virtual_key(number) for number in range(1, count + 1)]


def parse_override_input(text: str | None) -> float | None:
    """
    Parse operator input such as ``"1,234,500"``.

    Blank or non-numeric input yields ``None`` (no override); never raises.
    """
    if text is None:
        return None
    cleaned = _NUMBER_SEPARATORS.sub("", str(text))
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def _positive(value: float | None) -> bool:
    return value is not None and value > 0


class ManualOverrideSet(BaseModel):
    """
    All override values for one reporting session.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    manual_dec_values: dict[str, float | None] = Field(
        default_factory=dict, alias="manualDecValues"
    )
    manual_new_fr_values: dict[str, float | None] = Field(
        default_factory=dict, alias="manualNewFrValues"
    )
    manual_new_fr_names: dict[str, str] = Field(
        default_factory=dict, alias="manualNewFrNames"
    )

    def existing_value(self, entity_id: str) -> float | None:
        return self.manual_dec_values.get(entity_key(entity_id))

    def new_entity_values(self, count: int) -> list[float | None]:
        return [self.manual_new_fr_values.get(key) for key in virtual_keys(count)]

    def new_entity_name(self, number: int) -> str | None:
        name = self.manual_new_fr_names.get(virtual_key(number))
        if name is None or not name.strip():
            return None
        return name

    def with_existing_value(self, entity_id: str, value: float | None) -> "ManualOverrideSet":
        values = {**self.manual_dec_values, entity_key(entity_id): value}
        return self.model_copy(update={"manual_dec_values": values})

    def with_new_entity(
        self,
        number: int,
        *,
        value: float | None = None,
        name: str | None = None,
    ) -> "ManualOverrideSet":
        key = virtual_key(number)
        update: dict[str, Any] = {
            "manual_new_fr_values": {**self.manual_new_fr_values, key: value},
        }
        if name is not None:
            update["manual_new_fr_names"] = {**self.manual_new_fr_names, key: name}
        return self.model_copy(update=update)

    def with_new_entity_name(self, number: int, name: str) -> "ManualOverrideSet":
        names = {**self.manual_new_fr_names, virtual_key(number): name}
        return self.model_copy(update={"manual_new_fr_names": names})

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class OverrideCounts:
    existing: int
    new_entities: int
    renamed: int


def count_overrides(overrides: ManualOverrideSet) -> OverrideCounts:
    return OverrideCounts(
        existing=sum(1 for v in overrides.manual_dec_values.values() if _positive(v)),
        new_entities=sum(1 for v in overrides.manual_new_fr_values.values() if _positive(v)),
        renamed=sum(1 for v in overrides.manual_new_fr_names.values() if v and v.strip()),
    )


def merge(base: ManualOverrideSet, newer: ManualOverrideSet) -> ManualOverrideSet:
    """
    Layer *newer* on top of *base* key by key; *newer* wins.
    """
    return ManualOverrideSet(
        manual_dec_values={**base.manual_dec_values, **newer.manual_dec_values},
        manual_new_fr_values={**base.manual_new_fr_values, **newer.manual_new_fr_values},
        manual_new_fr_names={**base.manual_new_fr_names, **newer.manual_new_fr_names},
    )


# ---------------------------------------------------------------------------
# Operator edits
# ---------------------------------------------------------------------------


def format_override_value(value: float | None) -> str:
    """Editor text for *value* that parses back to the same number."""
    if value is None:
        return ""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,}"


def apply_entity_input(overrides: ManualOverrideSet, entity_id: str, text: str | None) -> ManualOverrideSet:
    """
    Record operator input for an existing shop.

    Only a change to the stored value creates a key; a blank cell for a shop
    that never had a value leaves the document untouched.
    """
    value = parse_override_input(text)
    if value == overrides.existing_value(entity_id):
        return overrides
    return overrides.with_existing_value(entity_id, value)


def apply_new_entity_input(
    overrides: ManualOverrideSet,
    number: int,
    text: str | None,
    name: str | None,
    target_label: str,
) -> ManualOverrideSet:
    """
    Record operator input for virtual row *number*.

    A name equal to the generated default is not stored as a custom name.
    """
    value = parse_override_input(text)
    if value != overrides.manual_new_fr_values.get(virtual_key(number)):
        overrides = overrides.with_new_entity(number, value=value)

    cleaned = (name or "").strip()
    if cleaned == default_new_entity_name(target_label, number):
        cleaned = ""
    if cleaned != (overrides.new_entity_name(number) or ""):
        overrides = overrides.with_new_entity_name(number, cleaned)
    return overrides


# ---------------------------------------------------------------------------
# Persisted document
# ---------------------------------------------------------------------------


def export_document(overrides: ManualOverrideSet, now: datetime | None = None) -> dict[str, Any]:
    stamp = (now or datetime.now(tz=timezone.utc)).isoformat()
    return {"lastUpdated": stamp, **overrides.to_document()}


def _clean_section(section: Any, numeric: bool) -> dict[str, Any]:
    if not isinstance(section, Mapping):
        return {}
    cleaned: dict[str, Any] = {}
    for key, value in section.items():
        if numeric:
            if value is None or (isinstance(value, (int, float)) and not isinstance(value, bool)):
                cleaned[str(key)] = value
            else:
                cleaned[str(key)] = parse_override_input(str(value))
        elif value is not None:
            cleaned[str(key)] = str(value)
    return cleaned


def load_document(payload: Mapping[str, Any] | None) -> ManualOverrideSet:
    """
    Read a persisted override document, tolerating missing or null sections.
    """
    if not payload:
        return ManualOverrideSet()
    try:
        return ManualOverrideSet(
            manual_dec_values=_clean_section(payload.get("manualDecValues"), numeric=True),
            manual_new_fr_values=_clean_section(payload.get("manualNewFrValues"), numeric=True),
            manual_new_fr_names=_clean_section(payload.get("manualNewFrNames"), numeric=False),
        )
    except ValidationError:
        return ManualOverrideSet()


# ---------------------------------------------------------------------------
# Virtual rows
# ---------------------------------------------------------------------------


def default_new_entity_name(target_label: str, number: int) -> str:
    return f"New FR shop ({target_label}) {number}"


def virtual_rows(
    overrides: ManualOverrideSet,
    *,
    count: int,
    target_label: str,
    channel: str = CHANNEL_FRANCHISE,
) -> list[ManualInputRow]:
    rows: list[ManualInputRow] = []
    for number in range(1, count + 1):
        key = virtual_key(number)
        rows.append(
            ManualInputRow(
                key=key,
                display_name=overrides.new_entity_name(number)
                or default_new_entity_name(target_label, number),
                channel=channel,
                target_label=target_label,
                value=overrides.manual_new_fr_values.get(key),
            )
        )
    return rows
