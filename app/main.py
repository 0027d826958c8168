from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.schemas.health import HealthResponse


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A warehouse must be configured: WAREHOUSE_URL, or the SNOWFLAKE_*
      account/user/password triple.
    - REPORT_TRUNCATED_WINDOWS, when set, must parse to at least one rule.
    - MANUAL_OVERRIDE_PERIOD, when set, must be a YYYY-MM period.
    """

    from app.config import parse_truncated_windows
    from reporting.window import period_to_label
    from warehouse.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Warehouse ------------------------------------------------------
    warehouse_url = os.getenv("WAREHOUSE_URL", "").strip()
    snowflake_parts = [
        os.getenv(name, "").strip()
        for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD")
    ]
    if not warehouse_url and not all(snowflake_parts):
        errors.append(
            "No warehouse configured. Set WAREHOUSE_URL, or SNOWFLAKE_ACCOUNT, "
            "SNOWFLAKE_USER and SNOWFLAKE_PASSWORD."
        )

    # --- Report rules ---------------------------------------------------
    raw_rules = os.getenv("REPORT_TRUNCATED_WINDOWS")
    if raw_rules is not None and raw_rules.strip() and not parse_truncated_windows(raw_rules):
        errors.append(
            f"REPORT_TRUNCATED_WINDOWS={raw_rules!r} has no valid BRAND:YEAR:MONTHS entry."
        )

    override_period = os.getenv("MANUAL_OVERRIDE_PERIOD", "").strip()
    if override_period and period_to_label(override_period) is None:
        errors.append(f"MANUAL_OVERRIDE_PERIOD={override_period!r} is not a YYYY-MM period.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Probe the warehouse on boot; an unreachable warehouse is logged, not fatal."""
    from warehouse.client import check_connection

    log = logging.getLogger(__name__)
    if check_connection():
        log.info("Warehouse connectivity confirmed")
    else:
        log.warning("Warehouse unreachable at startup; report requests will return 502")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Sales Report API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        dealer_sales_router,
        discount_rate_router,
        manual_inputs_router,
        map_data_router,
        sales_report_router,
    )

    application.include_router(sales_report_router)
    application.include_router(dealer_sales_router)
    application.include_router(discount_rate_router)
    application.include_router(map_data_router)
    application.include_router(manual_inputs_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        from warehouse.client import check_connection

        return HealthResponse(
            status="ok",
            warehouse="reachable" if check_connection() else "unreachable",
        )

    return application


app = create_app()
