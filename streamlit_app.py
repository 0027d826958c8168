"""Streamlit dashboard for the monthly sales report."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import pandas as pd
import streamlit as st

from app.services.request_tracker import RequestTracker
from app.storage import ManualInputStorageError
from reporting.dealers import dealer_frame
from reporting.overrides import (
    ManualOverrideSet,
    apply_entity_input,
    apply_new_entity_input,
    format_override_value,
)
from reporting.types import (
    CHANNEL_DIRECT,
    CHANNEL_FRANCHISE,
    CHANNEL_LABELS,
    METRIC_COUNT,
    FlatSaleRecord,
    ManualInputRow,
    PivotedEntityRow,
    SummaryRow,
)
from reporting.view import VisibilityState
from warehouse.client import WarehouseQueryError

st.set_page_config(page_title="Sales Report", page_icon="SR", layout="wide")

logger = logging.getLogger(__name__)

MISSING_CELL = "-"
HIGHLIGHT_MARK = "★ "
REPORT_CACHE_TTL_SECONDS = int(os.getenv("REPORT_CACHE_TTL_SECONDS", "600"))


@st.cache_resource(show_spinner=False)
def _load_backend_handles():
    """
    Stateless services shared by every session. Per-session state (request
    ids, override documents) lives in ``st.session_state``.
    """
    from app.config import get_report_settings  # noqa: PLC0415
    from app.services import DealerSalesService, SalesReportService  # noqa: PLC0415

    return {
        "settings": get_report_settings(),
        "report_service": SalesReportService(),
        "dealer_service": DealerSalesService(),
    }


@st.cache_data(show_spinner=False, ttl=REPORT_CACHE_TTL_SECONDS)
def _fetch_sales_records(brand: str, year: int) -> tuple[list[FlatSaleRecord], int]:
    """Warehouse rows for one (brand, year); reruns for toggles and edits reuse them."""
    service = _load_backend_handles()["report_service"]
    return service.fetch_records(service.window_for(brand, year))


@st.cache_data(show_spinner=False, ttl=REPORT_CACHE_TTL_SECONDS)
def _fetch_dealer_report(brand: str, year: int):
    return _load_backend_handles()["dealer_service"].build_report(brand, year)


def _format_amount(value: Optional[float]) -> str:
    if value is None:
        return MISSING_CELL
    return f"{value:,.0f}"


def _format_count(value: Optional[float]) -> str:
    if value is None:
        return MISSING_CELL
    return f"{int(value):,d}"


def _table_frame(rows: list[Any], labels: list[str], highlighted: set[str]) -> pd.DataFrame:
    """One display line per row; empty cells render as ``-``."""
    records: list[dict[str, str]] = []
    for row in rows:
        if isinstance(row, SummaryRow):
            formatter = _format_count if row.metric == METRIC_COUNT else _format_amount
            record = {"Row": f"▸ {row.label}", "Opened": ""}
            record.update({label: formatter(row.months.get(label)) for label in labels})
        elif isinstance(row, PivotedEntityRow):
            mark = HIGHLIGHT_MARK if row.entity_id in highlighted else ""
            record = {"Row": f"{mark}{row.entity_name}", "Opened": row.open_date or MISSING_CELL}
            record.update({label: _format_amount(row.months.get(label)) for label in labels})
        elif isinstance(row, ManualInputRow):
            record = {"Row": row.display_name, "Opened": "new"}
            record.update(
                {
                    label: _format_amount(row.value) if label == row.target_label else MISSING_CELL
                    for label in labels
                }
            )
        else:
            continue
        records.append(record)
    return pd.DataFrame(records, columns=["Row", "Opened", *labels])


def _override_editor_frame(report: Any, overrides: ManualOverrideSet) -> pd.DataFrame:
    records: list[dict[str, Any]] = []
    for row in report.entity_rows:
        records.append(
            {
                "key": row.entity_id,
                "kind": "shop",
                "channel": row.channel,
                "name": row.entity_name,
                "value": format_override_value(overrides.existing_value(row.entity_id)),
            }
        )
    for row in report.display_rows:
        if isinstance(row, ManualInputRow):
            records.append(
                {
                    "key": row.key,
                    "kind": "new",
                    "channel": row.channel,
                    "name": row.display_name,
                    "value": format_override_value(row.value),
                }
            )
    return pd.DataFrame(records, columns=["key", "kind", "channel", "name", "value"])


def _overrides_from_editor(
    frame: pd.DataFrame, base: ManualOverrideSet, target_label: str
) -> ManualOverrideSet:
    """Apply only the cells the operator changed."""
    overrides = base
    for record in frame.to_dict(orient="records"):
        text = str(record.get("value") or "")
        if record.get("kind") == "new":
            number = int(str(record["key"]).rsplit("_", 1)[-1])
            overrides = apply_new_entity_input(
                overrides, number, text, str(record.get("name") or ""), target_label
            )
        else:
            overrides = apply_entity_input(overrides, str(record["key"]), text)
    return overrides


handles = _load_backend_handles()
settings = handles["settings"]
report_service = handles["report_service"]

if "tracker" not in st.session_state:
    st.session_state.tracker = RequestTracker()
if "manual_inputs" not in st.session_state:
    from app.services import build_manual_input_service  # noqa: PLC0415

    st.session_state.manual_inputs = build_manual_input_service()
if "overrides" not in st.session_state:
    st.session_state.overrides = None
if "expanded" not in st.session_state:
    st.session_state.expanded = {CHANNEL_FRANCHISE: False, CHANNEL_DIRECT: False}
if "records" not in st.session_state:
    st.session_state.records = None
if "records_signature" not in st.session_state:
    st.session_state.records_signature = None
if "request_id" not in st.session_state:
    st.session_state.request_id = 0
if "report_error" not in st.session_state:
    st.session_state.report_error = None
if "save_message" not in st.session_state:
    st.session_state.save_message = None

tracker: RequestTracker = st.session_state.tracker
manual_inputs = st.session_state.manual_inputs

if st.session_state.overrides is None:
    try:
        st.session_state.overrides = manual_inputs.load()
    except ManualInputStorageError as exc:
        logger.error("Loading manual inputs failed: %s", exc)
        st.session_state.overrides = ManualOverrideSet()
        st.session_state.save_message = f"Manual inputs could not be loaded: {exc}"

with st.sidebar:
    st.header("Filters")
    brand_codes = list(settings.brands)
    brand = st.radio(
        "Brand",
        options=brand_codes,
        index=brand_codes.index(settings.default_brand),
        format_func=settings.brand_name,
        horizontal=True,
    )
    years = list(settings.supported_years)
    year = st.selectbox("Year", options=years, index=years.index(settings.default_year))
    st.session_state.expanded[CHANNEL_FRANCHISE] = st.toggle(
        f"Show {CHANNEL_LABELS[CHANNEL_FRANCHISE]} shops",
        value=st.session_state.expanded[CHANNEL_FRANCHISE],
    )
    st.session_state.expanded[CHANNEL_DIRECT] = st.toggle(
        f"Show {CHANNEL_LABELS[CHANNEL_DIRECT]} shops",
        value=st.session_state.expanded[CHANNEL_DIRECT],
    )

st.title(f"{settings.brand_name(brand)} sales report {year}")

# Fetch only when brand or year changes; toggles and edits reassemble.
signature = (brand, year)
if st.session_state.records is None or st.session_state.records_signature != signature:
    request_id = tracker.begin()
    with st.spinner("Loading sales data..."):
        try:
            fetched = _fetch_sales_records(brand, year)
        except WarehouseQueryError as exc:
            st.session_state.report_error = f"Could not load sales data: {exc}"
        else:
            # A response for a superseded request must not replace newer state.
            if tracker.is_current(request_id):
                st.session_state.records = fetched
                st.session_state.records_signature = signature
                st.session_state.request_id = request_id
                st.session_state.report_error = None

if st.session_state.report_error or st.session_state.records is None:
    st.error(st.session_state.report_error or "Sales data is not available yet.")
    if st.button("Retry", type="primary"):
        _fetch_sales_records.clear()
        st.session_state.report_error = None
        st.rerun()
    st.stop()

records, dropped = st.session_state.records
report = report_service.assemble(
    report_service.window_for(brand, year),
    records,
    visibility=VisibilityState(expanded=dict(st.session_state.expanded)),
    overrides=st.session_state.overrides,
    request_id=st.session_state.request_id,
    dropped_records=dropped,
)

st.subheader("Highlights")
card_columns = st.columns(len(report.insights) or 1)
for column, card in zip(card_columns, report.insights):
    with column:
        st.markdown(f"**{card.label}**")
        st.caption(card.description)

st.subheader("Monthly sales by shop")
st.dataframe(
    _table_frame(report.display_rows, report.labels, set(report.highlighted_ids)),
    use_container_width=True,
    hide_index=True,
)
if report.highlighted_ids:
    st.caption(f"{HIGHLIGHT_MARK}top {CHANNEL_LABELS[CHANNEL_FRANCHISE]} shops in {report.highlight_label}")
if report.dropped_records:
    st.caption(f"{report.dropped_records} row(s) without a shop id were skipped.")

st.subheader("Manual inputs")
if report.override_label is None:
    st.info(f"Manual inputs apply to {settings.override_label}, which is outside this report window.")
else:
    st.caption(
        f"Values entered here count toward the {report.override_label} summary rows and are saved "
        "as you edit. Blank or non-numeric entries are ignored."
    )
    edited = st.data_editor(
        _override_editor_frame(report, st.session_state.overrides),
        disabled=["key", "kind", "channel"],
        hide_index=True,
        use_container_width=True,
        key=f"override_editor_{brand}_{year}",
    )
    updated = _overrides_from_editor(edited, st.session_state.overrides, report.override_label)
    if updated != st.session_state.overrides:
        st.session_state.overrides = updated
        try:
            manual_inputs.save(updated)
        except ManualInputStorageError as exc:
            logger.error("Saving manual inputs failed: %s", exc)
            st.session_state.save_message = f"Save failed: {exc}"
        else:
            st.session_state.save_message = "Saved."
        st.rerun()

    if st.session_state.save_message:
        st.caption(st.session_state.save_message)
    export = manual_inputs.export(st.session_state.overrides)
    st.download_button(
        "Download JSON",
        data=export.to_json().encode("utf-8"),
        file_name=export.filename,
        mime="application/json",
    )
    st.caption(
        f"{export.counts.existing} shop value(s), {export.counts.new_entities} new shop value(s), "
        f"{export.counts.renamed} name(s)"
    )

with st.expander("Dealer shipment vs. sales"):
    try:
        dealer_report = _fetch_dealer_report(brand, year)
    except WarehouseQueryError as exc:
        st.error(f"Could not load dealer data: {exc}")
    else:
        if not dealer_report.dealers:
            st.info("No dealer activity in this window.")
        else:
            st.dataframe(
                dealer_frame(dealer_report.dealers, dealer_report.window.month_keys),
                use_container_width=True,
                hide_index=True,
            )
            st.download_button(
                "Download CSV",
                data=dealer_report.to_csv(),
                file_name=dealer_report.csv_filename,
                mime="text/csv",
            )
