"""Tests for the country/sector ClassificationTable."""

import json

import pytest

from xray_src.core.errors import TableFormatError, UnknownCountry, UnknownSector
from xray_src.data.classification import ClassificationTable, load_classification_table


class TestLookups:
    def test_region_and_market(self, classification):
        assert classification.region_of("Germany") == "Europe"
        assert classification.market_of("China") == "Emerging"

    def test_case_insensitive_and_aliases(self, classification):
        assert classification.region_of("germany") == "Europe"
        assert classification.region_of("USA") == "North America"
        assert classification.market_of("us") == "Developed"

    def test_unknown_country(self, classification):
        with pytest.raises(UnknownCountry) as exc:
            classification.market_of("Atlantis", "XX0000000001")

        assert exc.value.lookup == "market"
        assert exc.value.isin == "XX0000000001"

    def test_sector_synonyms(self, classification):
        assert classification.canonical_sector("Technology") == "Technology"
        assert classification.canonical_sector("health care") == "Health Care"
        assert classification.canonical_sector("Information Technology") == "Technology"

    def test_unknown_sector(self, classification):
        with pytest.raises(UnknownSector):
            classification.canonical_sector("Crypto", "A", 3)


class TestFiles:
    def test_bundled_table_loads(self):
        table = load_classification_table()

        assert table.region_of("Estonia") == "Europe"
        assert table.region_of("USA") == "North America"
        assert table.has_sector_vocabulary
        assert table.canonical_sector("Information Technology") == "Technology"

    def test_user_file_extends_bundled_table(self, tmp_path):
        override = tmp_path / "extra.json"
        override.write_text(
            json.dumps(
                {
                    "countries": {
                        "Atlantis": {"region": "Oceania", "market": "Frontier"},
                        "Germany": {"market": "Core"},
                    },
                    "sector_synonyms": {"IT": "Technology"},
                }
            ),
            encoding="utf-8",
        )

        table = load_classification_table(override)

        assert table.region_of("Atlantis") == "Oceania"
        assert table.market_of("Germany") == "Core"
        assert table.region_of("Germany") == "Europe"
        assert table.canonical_sector("IT") == "Technology"

    def test_round_trip_through_file_model(self, classification):
        rebuilt = ClassificationTable.from_file_model(classification.to_file_model())

        assert rebuilt.region_of("Japan") == "Asia Pacific"
        assert rebuilt.sectors == classification.sectors

    @pytest.mark.parametrize(
        "content", ["{not json", json.dumps({"countries": {"X": "Europe"}})]
    )
    def test_bad_file_is_a_format_error(self, tmp_path, content):
        path = tmp_path / "bad.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(TableFormatError):
            ClassificationTable.from_json(path)

    def test_missing_file_is_a_format_error(self, tmp_path):
        with pytest.raises(TableFormatError):
            ClassificationTable.from_json(tmp_path / "missing.json")
