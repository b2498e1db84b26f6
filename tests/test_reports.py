"""
Test report tables built from analysis results.
"""

from core.bay_grouping import BayMetrics, BayTransformStrategy, transform_locations_to_bays
from core.pareto import calculate_pareto, generate_comprehensive_insights, generate_comprehensive_pareto
from core.reports import (
    BAY_METRICS_COLUMNS,
    ISSUE_COLUMNS,
    bay_metrics_frame,
    grouping_frame,
    insights_frame,
    issues_frame,
    pareto_frame,
    pareto_summary_frame,
)
from core.validation import validate_upload


class TestIssuesFrame:
    """Test the validation issue table."""

    def test_errors_first(self, sample_locations, make_pick):
        picks = [make_pick("ART-1", "ZZZ-999", 0)]
        df = issues_frame(validate_upload(picks, sample_locations))

        assert list(df.columns) == ISSUE_COLUMNS
        assert list(df["Severity"]) == ["ERROR", "WARNING"]
        assert df.loc[0, "Error Code"] == "ORPHAN_PICK"
        assert df.loc[0, "Row"] == 2

    def test_clean_upload_has_header_only(self, sample_picks, sample_locations):
        df = issues_frame(validate_upload(sample_picks, sample_locations))

        assert df.empty
        assert list(df.columns) == ISSUE_COLUMNS


class TestBayTables:
    """Test bay metrics and grouping tables."""

    def test_constraint_flag(self):
        df = bay_metrics_frame([BayMetrics("B1", 2, 3, 10), BayMetrics("B2", 2, 2, 5)])

        assert list(df.columns) == BAY_METRICS_COLUMNS
        assert list(df["Constraint OK"]) == [False, True]

    def test_grouping_table(self, sample_locations):
        results = transform_locations_to_bays(sample_locations, BayTransformStrategy.NAMING_CONVENTION)
        df = grouping_frame(results)

        assert len(df) == 4
        assert set(df["Strategy"]) == {"NAMING_CONVENTION"}
        assert df.loc[0, "Bay"] == "D11-021-11"


class TestParetoTables:
    """Test Pareto, insight and summary tables."""

    def test_top_80_flag(self):
        df = pareto_frame(calculate_pareto([("a", 10), ("b", 60), ("c", 30)], "picks"))

        assert list(df["Label"]) == ["b", "c", "a"]
        assert list(df["Top 80%"]) == [True, True, False]
        assert df.loc[2, "Cumulative %"] == 100.0

    def test_summary_and_insights(self, concentrated_picks, make_location):
        report = generate_comprehensive_pareto(concentrated_picks, [make_location("LOC-000", "B1")])
        summary = pareto_summary_frame(report)
        insights = insights_frame(generate_comprehensive_insights(report))

        assert len(summary) == 7
        first = summary.iloc[0]
        assert first["Analysis"] == "pick_frequency_by_article"
        assert first["Items to 80%"] == 1
        assert first["Items to 80% (%)"] == 10.0
        assert "Strong Pareto effect" in " ".join(insights["Message"])
