"""
reporting/dealers.py

Dealer shipment vs. sell-through report.

Two independent feeds (shipments invoiced to each dealer account, and the
dealer's own shop sales) are merged per ``account_id``. Month slots are
keyed by two-digit month (``"01"`` … ``"12"``). Duplicate
(account, month) amounts are summed.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import pandas as pd

from reporting.normalizer import DealerAmountRecord

SHIPMENT_LABEL = "Shipment"
SALES_LABEL = "Sales"


@dataclass
class DealerRow:
    account_id: str
    account_name: str
    hq_sap_id: str
    shipment_months: dict[str, float] = field(default_factory=dict)
    sales_months: dict[str, float] = field(default_factory=dict)

    @property
    def code_display(self) -> str:
        if self.hq_sap_id:
            return f"({self.account_id}, {self.hq_sap_id.strip()})"
        return f"({self.account_id})"

    def has_activity(self, month_keys: Sequence[str]) -> bool:
        return any(
            (months.get(key) or 0) > 0
            for months in (self.shipment_months, self.sales_months)
            for key in month_keys
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "account_name": self.account_name,
            "hq_sap_id": self.hq_sap_id,
            "shipment_months": dict(self.shipment_months),
            "sales_months": dict(self.sales_months),
        }


def _month_key(period: str) -> str | None:
    parts = period.split("-")
    if len(parts) < 2 or not parts[1][:2].isdigit():
        return None
    return parts[1][:2].zfill(2)


def build_dealer_rows(
    shipment_records: Iterable[DealerAmountRecord],
    sales_records: Iterable[DealerAmountRecord],
) -> list[DealerRow]:
    """
    Merge both feeds per account, sorted by ``account_id``.

    The first record seen for an account fixes its name and SAP id; a missing
    name falls back to the account id.
    """
    dealers: dict[str, DealerRow] = {}

    def _accumulate(records: Iterable[DealerAmountRecord], attribute: str) -> None:
        for record in records:
            dealer = dealers.get(record.account_id)
            if dealer is None:
                dealer = DealerRow(
                    account_id=record.account_id,
                    account_name=record.account_name or record.account_id,
                    hq_sap_id=record.hq_sap_id or "",
                )
                dealers[record.account_id] = dealer
            month = _month_key(record.period)
            if month is None:
                continue
            months: dict[str, float] = getattr(dealer, attribute)
            months[month] = months.get(month, 0.0) + record.amount

    _accumulate(shipment_records, "shipment_months")
    _accumulate(sales_records, "sales_months")
    return sorted(dealers.values(), key=lambda dealer: dealer.account_id)


def filter_active_dealers(rows: Iterable[DealerRow], month_keys: Sequence[str]) -> list[DealerRow]:
    """Keep dealers with any positive shipment or sales amount in the window."""
    return [row for row in rows if row.has_activity(month_keys)]


def _csv_amount(value: float | None) -> str:
    if value is None:
        return ""
    return f"{value:.2f}"


def dealer_frame(rows: Sequence[DealerRow], month_keys: Sequence[str]) -> pd.DataFrame:
    """
    Two lines per dealer (shipment, then sales); number and name only on
    the first line.
    """
    month_columns = [f"M{int(key)}" for key in month_keys]
    records: list[dict[str, str]] = []
    for index, dealer in enumerate(rows, start=1):
        shipment = {
            "No.": str(index),
            "Dealer": f"{dealer.account_name} {dealer.code_display}",
            "Type": SHIPMENT_LABEL,
        }
        sales = {"No.": "", "Dealer": "", "Type": SALES_LABEL}
        for key, column in zip(month_keys, month_columns):
            shipment[column] = _csv_amount(dealer.shipment_months.get(key))
            sales[column] = _csv_amount(dealer.sales_months.get(key))
        records.append(shipment)
        records.append(sales)
    return pd.DataFrame(records, columns=["No.", "Dealer", "Type", *month_columns])


def dealer_csv(rows: Sequence[DealerRow], month_keys: Sequence[str]) -> bytes:
    """CSV bytes with a UTF-8 BOM so spreadsheet tools pick the encoding."""
    buffer = io.StringIO()
    dealer_frame(rows, month_keys).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8-sig")


def dealer_csv_filename(brand_name: str, year: int) -> str:
    return f"dealer_shipment_sales_{brand_name}_{year}.csv"
