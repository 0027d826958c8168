"""
reporting/normalizer.py

Canonicalize loosely-typed warehouse rows.

Warehouse drivers are inconsistent about column-name casing (Snowflake
returns upper case unless the column was quoted), and numbers may arrive as
``Decimal``, ``int``, ``float`` or numeric strings. Every feed goes through
the helpers here before any aggregation happens.

Rules
-----
* Field lookup tries the canonical lower-case name, then the upper-case
  variant, then a case-insensitive scan.
* Empty strings are treated as missing.
* Rows without an entity identifier are dropped and counted; a single bad
  row never fails a batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from reporting.types import FlatSaleRecord

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def pick(raw: RawRow, name: str) -> Any:
    """
    Return the value stored under *name* regardless of key casing.

    Empty strings and ``None`` both come back as ``None``.
    """
    for candidate in (name, name.upper()):
        if candidate in raw:
            value = raw[candidate]
            return None if value == "" else value
    lowered = name.lower()
    for key, value in raw.items():
        if isinstance(key, str) and key.lower() == lowered:
            return None if value == "" else value
    return None


def pick_str(raw: RawRow, name: str) -> str | None:
    value = pick(raw, name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_optional_number(value: Any) -> float | None:
    """
    Coerce *value* to ``float``; ``None`` when missing or unparseable.

    Accepts ``Decimal``, ints, floats and strings with thousands separators.
    ``bool`` is rejected because it is never a sales amount.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, Decimal):
        try:
            number = float(value)
        except (InvalidOperation, ValueError):
            return None
    else:
        cleaned = str(value).replace(",", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if number != number:  # NaN
        return None
    return number


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce *value* to ``float``, substituting *default* when unusable."""
    number = to_optional_number(value)
    return default if number is None else number


def to_iso_date(value: Any) -> str | None:
    """
    Render an open date as ``YYYY-MM-DD``.

    Strings are trimmed to their date part; unparseable strings are kept
    verbatim so they still sort deterministically.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    head = text[:10]
    try:
        return date.fromisoformat(head).isoformat()
    except ValueError:
        return text


def to_period(value: Any) -> str | None:
    """Render a sale month as ``YYYY-MM``."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    text = str(value).strip()
    if len(text) >= 7 and text[4] in "-/.":
        return f"{text[:4]}-{text[5:7]}"
    return text or None


# ---------------------------------------------------------------------------
# Sales feed
# ---------------------------------------------------------------------------


class RecordNormalizer:
    """
    Convert raw sales-report rows into :class:`FlatSaleRecord` instances.

    Stateless apart from the counter of rows dropped by the last call, which
    callers may surface in logs.
    """

    def __init__(self) -> None:
        self.dropped = 0

    def normalize(self, rows: Iterable[RawRow]) -> list[FlatSaleRecord]:
        records: list[FlatSaleRecord] = []
        dropped = 0
        for raw in rows:
            record = self.normalize_row(raw)
            if record is None:
                dropped += 1
                continue
            records.append(record)

        self.dropped = dropped
        if dropped:
            logger.warning("Dropped %d sales row(s) without a shop_id", dropped)
        logger.debug("Normalized %d sales row(s)", len(records))
        return records

    def normalize_row(self, raw: RawRow) -> FlatSaleRecord | None:
        entity_id = pick_str(raw, "shop_id")
        if entity_id is None:
            return None
        return FlatSaleRecord(
            period=to_period(pick(raw, "sale_ym")) or "",
            entity_id=entity_id,
            entity_name=pick_str(raw, "shop_nm_en") or "",
            channel=pick_str(raw, "fr_or_cls") or "",
            amount=to_optional_number(pick(raw, "sale_amt")),
            origin_id=pick_str(raw, "oa_shop_id"),
            open_date=to_iso_date(pick(raw, "open_dt")),
            city=pick_str(raw, "city_nm"),
            city_tier=pick_str(raw, "city_tier_nm"),
            store_type=pick_str(raw, "shop_level_nm"),
            sales_region=pick_str(raw, "sale_region_nm"),
        )


def normalize_sales_rows(rows: Iterable[RawRow]) -> list[FlatSaleRecord]:
    return RecordNormalizer().normalize(rows)


# ---------------------------------------------------------------------------
# Supplemental feeds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DealerAmountRecord:
    period: str
    account_id: str
    account_name: str | None
    hq_sap_id: str | None
    amount: float


@dataclass(frozen=True)
class DiscountRateRecord:
    period: str
    channel: str
    discount_rate: float


@dataclass(frozen=True)
class CityShopRecord:
    shop_id: str
    shop_name: str
    city: str | None
    city_tier: str | None
    amount: float


@dataclass(frozen=True)
class ProductSaleRecord:
    product_code: str
    product_name: str
    sale_amount: float
    tag_amount: float


def normalize_dealer_rows(rows: Iterable[RawRow], amount_field: str) -> list[DealerAmountRecord]:
    """
    Normalize dealer rows whose amount lives in *amount_field*.

    Rows without ``account_id`` or ``sale_ym`` are dropped.
    """
    records: list[DealerAmountRecord] = []
    dropped = 0
    for raw in rows:
        account_id = pick_str(raw, "account_id")
        period = to_period(pick(raw, "sale_ym"))
        if account_id is None or period is None:
            dropped += 1
            continue
        records.append(
            DealerAmountRecord(
                period=period,
                account_id=account_id,
                account_name=pick_str(raw, "account_nm_en"),
                hq_sap_id=pick_str(raw, "hq_sap_id"),
                amount=to_number(pick(raw, amount_field)),
            )
        )
    if dropped:
        logger.warning("Dropped %d dealer row(s) without account_id/sale_ym", dropped)
    return records


def normalize_discount_rows(rows: Iterable[RawRow]) -> list[DiscountRateRecord]:
    return [
        DiscountRateRecord(
            period=to_period(pick(raw, "sale_ym")) or "",
            channel=pick_str(raw, "channel") or "",
            discount_rate=to_number(pick(raw, "discount_rate")),
        )
        for raw in rows
    ]


def normalize_city_rows(rows: Iterable[RawRow]) -> list[CityShopRecord]:
    return [
        CityShopRecord(
            shop_id=pick_str(raw, "shop_id") or "",
            shop_name=pick_str(raw, "shop_nm_en") or "",
            city=pick_str(raw, "city_nm"),
            city_tier=pick_str(raw, "city_tier_nm"),
            amount=to_number(pick(raw, "sale_amt")),
        )
        for raw in rows
    ]


def normalize_product_rows(rows: Iterable[RawRow]) -> list[ProductSaleRecord]:
    records: list[ProductSaleRecord] = []
    for raw in rows:
        code = pick_str(raw, "prdt_cd") or ""
        records.append(
            ProductSaleRecord(
                product_code=code,
                product_name=pick_str(raw, "prdt_nm_kr") or code,
                sale_amount=to_number(pick(raw, "sale_amt")),
                tag_amount=to_number(pick(raw, "tag_amt")),
            )
        )
    return records
