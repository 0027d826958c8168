"""
reporting/pivot.py

Pivot flat (period, shop, amount) records into one row per shop.

Algorithm
---------
1. The window decides the ordered month labels.
2. Records are visited in input order; the first record seen for a shop
   creates its row (display name, channel and descriptive attributes come
   from that record) with every window label set to ``None``.
3. Each record's amount is added to its label. Duplicate (shop, period)
   records are summed, never overwritten. Records outside the window and
   records without an amount leave the row untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from reporting.localization import NameLocalization
from reporting.types import FlatSaleRecord, MonthValues, PivotedEntityRow
from reporting.window import ReportWindow, date_to_label

logger = logging.getLogger(__name__)


@dataclass
class _RowDraft:
    first: FlatSaleRecord
    display_name: str
    months: MonthValues = field(default_factory=dict)

    def freeze(self) -> PivotedEntityRow:
        record = self.first
        return PivotedEntityRow(
            entity_id=record.entity_id,
            entity_name=self.display_name,
            source_name=record.entity_name,
            channel=record.channel,
            months=self.months,
            open_date=record.open_date,
            open_month=date_to_label(record.open_date),
            city=record.city,
            city_tier=record.city_tier,
            store_type=record.store_type,
            sales_region=record.sales_region,
        )


class PivotBuilder:
    """
    Build :class:`PivotedEntityRow` objects for one report request.

    Parameters
    ----------
    localization:
        Display-name table; defaults to an empty table (source names).
    """

    def __init__(self, localization: NameLocalization | None = None) -> None:
        self._localization = localization or NameLocalization()

    def build(
        self,
        records: Iterable[FlatSaleRecord],
        window: ReportWindow,
    ) -> list[PivotedEntityRow]:
        labels = window.labels
        drafts: dict[str, _RowDraft] = {}
        ignored = 0

        for record in records:
            draft = drafts.get(record.entity_id)
            if draft is None:
                draft = _RowDraft(
                    first=record,
                    display_name=self._localization.display_name(
                        record.entity_id,
                        record.origin_id,
                        record.entity_name,
                    ),
                    months={label: None for label in labels},
                )
                drafts[record.entity_id] = draft

            label = window.label_for(record.period)
            if label is None:
                ignored += 1
                continue
            if record.amount is None:
                continue
            draft.months[label] = (draft.months[label] or 0.0) + record.amount

        if ignored:
            logger.debug("Ignored %d record(s) outside window %s", ignored, labels)
        return [draft.freeze() for draft in drafts.values()]
