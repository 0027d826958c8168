"""
tests/test_localization.py

Shop and region name lookup tables.
"""

from __future__ import annotations

import json
from pathlib import Path

from reporting.localization import UNKNOWN_REGION, NameLocalization, load_localization

PACKAGED_TABLE = Path(__file__).resolve().parents[1] / "config" / "localization" / "ko.json"


class TestNameLocalization:
    def test_display_name_lookup_order(self) -> None:
        table = NameLocalization.from_mappings(shop_names={"OA1": "By origin", "CN1": "By id"})
        assert table.display_name("CN1", "oa1", "Source") == "By origin"
        assert table.display_name("cn1", None, "Source") == "By id"
        assert table.display_name("CN1", "  ", "Source") == "By id"
        assert table.display_name("CN2", None, "Source") == "Source"

    def test_region_translation(self) -> None:
        table = NameLocalization.from_mappings(region_names={"华东": "East", "华北": "North"})
        assert table.region("华东") == "East"
        assert table.region("华东/华北") == "East/North"
        assert table.region("西南") == "西南"
        assert table.region(None) == UNKNOWN_REGION
        assert table.region(" ") == UNKNOWN_REGION


class TestLoadLocalization:
    def test_missing_file_gives_empty_tables(self, tmp_path: Path) -> None:
        table = load_localization(tmp_path / "absent.json")
        assert table.display_name("CN1", None, "fallback") == "fallback"

    def test_unreadable_file_gives_empty_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_localization(path) == NameLocalization()

    def test_reads_document(self, tmp_path: Path) -> None:
        path = tmp_path / "names.json"
        path.write_text(json.dumps({"shop_names": {"cn9": "Nine"}, "region_names": {"华南": "South"}}), encoding="utf-8")
        table = load_localization(path)
        assert table.display_name("CN9", None, "x") == "Nine"
        assert table.region("华南") == "South"

    def test_packaged_table_loads(self) -> None:
        table = load_localization(PACKAGED_TABLE)
        assert table.shop_names
        assert table.region_names
