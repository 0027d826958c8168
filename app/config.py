"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from reporting.insights import InsightSettings
from reporting.window import DEFAULT_TRUNCATED_WINDOWS, period_to_label
from warehouse.config import load_env_files

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]

BRAND_NAMES: dict[str, str] = {
    "X": "Discovery",
    "M": "MLB",
    "I": "MLB KIDS",
}
SUPPORTED_YEARS: tuple[int, ...] = (2023, 2024, 2025)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def parse_truncated_windows(raw: str | None) -> dict[tuple[str, int], int]:
    """
    Parse ``BRAND:YEAR:MONTHS`` entries separated by commas.

    ``"M:2025:11,I:2025:11"`` → ``{("M", 2025): 11, ("I", 2025): 11}``.
    Malformed entries are skipped with a warning; ``None`` yields the
    built-in rules.
    """

    if raw is None:
        return dict(DEFAULT_TRUNCATED_WINDOWS)

    rules: dict[tuple[str, int], int] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split(":")]
        try:
            brand, year, months = parts[0].upper(), int(parts[1]), int(parts[2])
        except (IndexError, ValueError):
            logger.warning("Ignoring malformed truncation rule %r", entry)
            continue
        if not 1 <= months <= 12:
            logger.warning("Ignoring truncation rule %r: months must be 1..12", entry)
            continue
        rules[(brand, year)] = months
    return rules


@dataclass(frozen=True)
class ReportSettings:
    """
    Sales report defaults and business rules.
    """

    default_brand: str = "X"
    default_year: int = 2025
    brands: dict[str, str] = field(default_factory=lambda: dict(BRAND_NAMES))
    supported_years: tuple[int, ...] = SUPPORTED_YEARS
    truncated_windows: dict[tuple[str, int], int] = field(
        default_factory=lambda: dict(DEFAULT_TRUNCATED_WINDOWS)
    )
    override_period: str = "2025-12"
    new_entity_rows: int = 4
    localization_path: Path | None = PROJECT_ROOT / "config" / "localization" / "ko.json"

    @property
    def override_label(self) -> str:
        return period_to_label(self.override_period) or self.override_period

    def resolve_brand(self, brand: str | None) -> str:
        candidate = (brand or "").strip().upper()
        return candidate if candidate in self.brands else self.default_brand

    def resolve_year(self, year: int | str | None) -> int:
        try:
            candidate = int(year) if year is not None else self.default_year
        except (TypeError, ValueError):
            return self.default_year
        return candidate if candidate in self.supported_years else self.default_year

    def brand_name(self, brand: str) -> str:
        return self.brands.get(brand, brand)


@dataclass(frozen=True)
class OverrideStoreSettings:
    """
    Where manual override values are persisted.

    ``store_dir`` holds the local (per-deployment) store; ``durable_file`` is
    the shared document loaded first and exported on demand.
    """

    store_dir: Path = PROJECT_ROOT / ".manual_inputs"
    durable_file: Path | None = PROJECT_ROOT / "config" / "manual_inputs.json"
    store_key: str = "manual_inputs"


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report settings from environment variables.
    """

    _load_env_once()
    localization = _get_optional_str_env("LOCALIZATION_PATH")
    defaults = ReportSettings()
    return ReportSettings(
        default_brand=_get_str_env("REPORT_DEFAULT_BRAND", defaults.default_brand).upper(),
        default_year=_get_int_env("REPORT_DEFAULT_YEAR", defaults.default_year),
        truncated_windows=parse_truncated_windows(os.getenv("REPORT_TRUNCATED_WINDOWS")),
        override_period=_get_str_env("MANUAL_OVERRIDE_PERIOD", defaults.override_period),
        new_entity_rows=max(0, _get_int_env("MANUAL_NEW_ENTITY_ROWS", defaults.new_entity_rows)),
        localization_path=Path(localization) if localization else defaults.localization_path,
    )


@lru_cache(maxsize=1)
def get_override_store_settings() -> OverrideStoreSettings:
    """
    Return override storage settings from environment variables.
    """

    defaults = OverrideStoreSettings()
    store_dir = _get_optional_str_env("MANUAL_INPUT_STORE_DIR")
    durable_file = _get_optional_str_env("MANUAL_INPUT_FILE")
    return OverrideStoreSettings(
        store_dir=Path(store_dir) if store_dir else defaults.store_dir,
        durable_file=Path(durable_file) if durable_file else defaults.durable_file,
        store_key=_get_str_env("MANUAL_INPUT_STORE_KEY", defaults.store_key),
    )


@lru_cache(maxsize=1)
def get_insight_settings() -> InsightSettings:
    """
    Return insight thresholds from environment variables.
    """

    defaults = InsightSettings()
    return InsightSettings(
        stable_band_pct=max(0.0, _get_float_env("INSIGHT_STABLE_BAND_PCT", defaults.stable_band_pct)),
        new_shop_lookback_months=max(
            1, _get_int_env("INSIGHT_NEW_SHOP_LOOKBACK_MONTHS", defaults.new_shop_lookback_months)
        ),
        strong_new_threshold=_get_float_env("INSIGHT_STRONG_NEW_THRESHOLD", defaults.strong_new_threshold),
        weak_new_threshold=_get_float_env("INSIGHT_WEAK_NEW_THRESHOLD", defaults.weak_new_threshold),
        top_n=max(1, _get_int_env("INSIGHT_TOP_N", defaults.top_n)),
    )
