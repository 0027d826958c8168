"""
Render a sales report from CLI as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging

from app.services.manual_input_service import build_manual_input_service
from app.services.sales_report_service import SalesReportService
from reporting.types import CHANNEL_ORDER
from reporting.view import VisibilityState
from warehouse.client import WarehouseQueryError


def main() -> int:
    parser = argparse.ArgumentParser(description="Build the monthly sales report.")
    parser.add_argument("--brand", default=None, help="Brand code: X, M or I.")
    parser.add_argument("--year", default=None, help="Report year, e.g. 2025.")
    parser.add_argument(
        "--expand",
        action="store_true",
        help="Include shop rows for every channel.",
    )
    parser.add_argument(
        "--no-overrides",
        dest="use_overrides",
        action="store_false",
        help="Ignore stored manual inputs.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    visibility = VisibilityState.all_expanded(CHANNEL_ORDER) if args.expand else VisibilityState()
    overrides = build_manual_input_service().load() if args.use_overrides else None

    try:
        report = SalesReportService().build_report(args.brand, args.year, visibility, overrides)
    except WarehouseQueryError as exc:
        print(json.dumps({"error": str(exc)}))
        return 1

    print(json.dumps(report.to_payload(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
