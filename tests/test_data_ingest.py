"""
Test column mapping detection and DataFrame ingestion.
"""

import numpy as np
import pandas as pd
import pytest

from core.data_ingest import (
    LOCATION_SHEET,
    PICK_SHEET,
    LocationRow,
    PickRow,
    coerce_types,
    column_similarity,
    detect_column_mapping,
    detect_location_mapping,
    detect_pick_mapping,
    detect_sheet_mapping,
    frame_to_location_rows,
    frame_to_pick_rows,
    get_column_status,
    harmonize_columns,
    normalize_column_name,
)
from core.validation import validate_referential_integrity


class TestNormalizeColumnName:
    """Test column name normalization."""

    @pytest.mark.parametrize(
        "raw", ["Pick Frequency", "pick_frequency", "pickFrequency", " PICK-FREQUENCY ", "Pick.Frequency"]
    )
    def test_variants_compare_equal(self, raw):
        assert normalize_column_name(raw) == "pickfrequency"

    def test_similarity_bounds(self):
        assert column_similarity("location", "location") == 1.0
        assert column_similarity("", "") == 1.0
        assert 0.0 <= column_similarity("abc", "xyz") < 0.7


class TestDetectMapping:
    """Test synonym and fuzzy column mapping."""

    def test_dutch_pick_headers(self):
        result = detect_pick_mapping(["Artikelnummer", "Locatie", "Aantal_Picks"])
        rename = result.to_rename_map()

        assert rename["Artikelnummer"] == "article"
        assert rename["Locatie"] == "location"
        assert rename["Aantal_Picks"] == "pick_frequency"
        assert all(m.confidence == 1.0 for m in result.mappings)

    def test_template_headers_map_completely(self):
        result = detect_location_mapping([
            "Location", "Storage Type", "Location Length", "Location Width",
            "Location Height", "Capacity Layout", "Location Category", "Bay",
        ])

        assert result.missing_columns == ()
        assert result.unmapped_columns == ()
        assert result.confidence == pytest.approx(1.0)

    def test_fuzzy_match_reports_similarity(self):
        result = detect_pick_mapping(["Article", "Locaton", "Pick Frequency"])
        fuzzy = [m for m in result.mappings if m.client_column == "Locaton"]

        assert fuzzy[0].template_column == "location"
        assert fuzzy[0].confidence < 1.0
        assert fuzzy[0].reason.startswith("Fuzzy match")

    def test_each_client_column_maps_once(self):
        result = detect_pick_mapping(["Location"])

        assert len(result.mappings) == 1
        assert "article" in result.missing_columns

    def test_unrelated_columns_stay_unmapped(self):
        result = detect_pick_mapping(["Article", "Weather"])

        assert "Weather" in result.unmapped_columns

    def test_confidence_blends_match_quality_and_completeness(self):
        result = detect_pick_mapping(["Article"])

        assert result.confidence == pytest.approx((1.0 + 1 / 7) / 2)

    def test_sheet_type_detection(self):
        location_columns = ["Location", "Storage Type", "Length", "Width", "Height", "Capacity Layout", "Bay"]
        pick_columns = ["Article", "Description", "Family", "Pick Frequency", "Location", "Quantity"]

        assert detect_column_mapping(location_columns).sheet_type == LOCATION_SHEET
        assert detect_column_mapping(pick_columns).sheet_type == PICK_SHEET

    def test_unknown_sheet_type(self):
        with pytest.raises(ValueError):
            detect_sheet_mapping(["a"], "ARTICLE")


class TestFrameIngestion:
    """Test DataFrame -> record conversion."""

    def test_pick_rows_from_client_frame(self):
        df = pd.DataFrame({
            "Artikelnummer": ["A1", "A2"],
            "Omschrijving": ["Towel", np.nan],
            "Locatie": ["D11-021-11-01", "D11-021-11-02"],
            "Aantal_Picks": ["12", "bad"],
        })
        rows = frame_to_pick_rows(df)

        assert rows[0] == PickRow(
            article="A1",
            article_description="Towel",
            family="",
            pick_frequency=12,
            location="D11-021-11-01",
            quantity=0,
            unique_articles=0,
        )
        assert rows[1].article_description == ""
        assert rows[1].pick_frequency == 0

    def test_numeric_codes_with_blanks_stay_whole(self):
        picks = frame_to_pick_rows(pd.DataFrame({
            "article": ["A1", "A2"],
            "location": [101, None],
            "pick_frequency": [5, 3],
        }))
        locations = frame_to_location_rows(pd.DataFrame({"location": [101, 102]}))

        assert [p.location for p in picks] == ["101", ""]
        assert locations[0].location == "101"
        assert validate_referential_integrity(picks[:1], locations) == []

    def test_location_rows_from_client_frame(self):
        df = pd.DataFrame({
            "Locatie": [" L-1 "],
            "Lengte": ["1.2"],
            "Breedte": [0.8],
            "Hoogte": [None],
            "Capaciteit": ["0.5-0.5"],
        })
        rows = frame_to_location_rows(df)

        assert rows == [LocationRow(
            location="L-1",
            location_length=1.2,
            location_width=0.8,
            location_height=0.0,
            capacity_layout="0.5-0.5",
        )]

    def test_negative_counts_survive_for_validation(self):
        df = pd.DataFrame({"article": ["A"], "location": ["L"], "pick_frequency": [-4]})

        assert frame_to_pick_rows(df)[0].pick_frequency == -4

    def test_missing_required_columns(self):
        df = pd.DataFrame({"Article": ["A"], "Quantity": [1]})

        with pytest.raises(ValueError, match="Missing required columns"):
            frame_to_pick_rows(df)

    def test_empty_frame(self):
        with pytest.raises(ValueError, match="empty"):
            frame_to_location_rows(pd.DataFrame())

    def test_harmonize_keeps_unmapped_columns(self):
        df = pd.DataFrame({"Article": ["A"], "Weather": ["sunny"]})
        harmonized = harmonize_columns(df, PICK_SHEET)

        assert "article" in harmonized.columns
        assert "Weather" in harmonized.columns

    def test_coerce_types(self):
        df = pd.DataFrame({"location": [101], "location_length": ["2,5"]})
        coerced = coerce_types(df, LOCATION_SHEET)

        assert coerced.loc[0, "location"] == "101"
        assert coerced.loc[0, "location_length"] == 0.0

    def test_column_status(self):
        df = pd.DataFrame({"Article": ["A"], "Location": ["L"], "Quantity": [1]})
        status = get_column_status(df, PICK_SHEET)

        assert status["required_missing"] == ["pick_frequency"]
        assert status["optional_present"] == ["quantity"]
