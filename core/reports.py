"""
Report tables for slotting analysis outputs.

Turns validation findings, bay grouping, bay metrics and Pareto results into
DataFrames with human-readable headers, ready for an export or UI layer.
"""
from typing import Dict, List, Sequence

import pandas as pd

from core.bay_grouping import BayGroupingResult, BayMetrics
from core.pareto import ComprehensivePareto, ParetoInsight, ParetoResult
from core.validation import ValidationResult

ISSUE_COLUMNS = [
    "Severity",
    "Error Code",
    "Message",
    "Row",
    "Column",
    "Value",
    "Suggested Fix",
]

BAY_METRICS_COLUMNS = [
    "Bay",
    "Locations",
    "Unique Articles",
    "Total Pick Frequency",
    "Constraint OK",
]

GROUPING_COLUMNS = ["Location", "Bay", "Strategy", "Confidence"]

PARETO_COLUMNS = ["Rank", "Label", "Value", "Percent", "Cumulative %", "Top 80%"]

INSIGHT_COLUMNS = ["Analysis", "Type", "Message", "Recommendation"]

PARETO_SUMMARY_COLUMNS = [
    "Analysis",
    "Dimension",
    "Group By",
    "Items",
    "Total Value",
    "Items to 80%",
    "Items to 80% (%)",
]


def issues_frame(result: ValidationResult) -> pd.DataFrame:
    """
    Create validation issue report, errors first.

    Columns:
    - Severity
    - Error Code
    - Message
    - Row (spreadsheet row, blank for bay-level findings)
    - Column
    - Value
    - Suggested Fix
    """
    records = [
        {
            "Severity": issue.severity.value,
            "Error Code": issue.error_code,
            "Message": issue.error_message,
            "Row": issue.row_number,
            "Column": issue.column_name or "",
            "Value": issue.affected_value or "",
            "Suggested Fix": issue.suggested_fix or "",
        }
        for issue in result.issues
    ]
    return pd.DataFrame(records, columns=ISSUE_COLUMNS)


def bay_metrics_frame(bay_metrics: Sequence[BayMetrics]) -> pd.DataFrame:
    """Bay overview; Constraint OK is False where unique articles exceed locations."""
    records = [
        {
            "Bay": bay.bay_code,
            "Locations": bay.location_count,
            "Unique Articles": bay.unique_articles,
            "Total Pick Frequency": bay.total_pick_frequency,
            "Constraint OK": bay.unique_articles <= bay.location_count,
        }
        for bay in bay_metrics
    ]
    return pd.DataFrame(records, columns=BAY_METRICS_COLUMNS)


def grouping_frame(results: Sequence[BayGroupingResult]) -> pd.DataFrame:
    records = [
        {
            "Location": r.location_code,
            "Bay": r.bay_code,
            "Strategy": r.strategy.value,
            "Confidence": r.confidence,
        }
        for r in results
    ]
    return pd.DataFrame(records, columns=GROUPING_COLUMNS)


def pareto_frame(result: ParetoResult) -> pd.DataFrame:
    """
    Ranked Pareto table for one dimension.

    "Top 80%" marks the items up to and including the 80% cutoff.
    """
    records = [
        {
            "Rank": p.rank,
            "Label": p.label,
            "Value": p.value,
            "Percent": round(p.percent, 2),
            "Cumulative %": round(p.cumulative, 2),
            "Top 80%": p.rank <= result.pareto80_count,
        }
        for p in result.data
    ]
    return pd.DataFrame(records, columns=PARETO_COLUMNS)


def insights_frame(insights: Dict[str, List[ParetoInsight]]) -> pd.DataFrame:
    """Flatten per-analysis insights into one table."""
    records = []
    for analysis, items in insights.items():
        for insight in items:
            records.append({
                "Analysis": analysis,
                "Type": insight.type.value,
                "Message": insight.message,
                "Recommendation": insight.recommendation or "",
            })
    return pd.DataFrame(records, columns=INSIGHT_COLUMNS)


def pareto_summary_frame(report: ComprehensivePareto) -> pd.DataFrame:
    """One row per analysis of a comprehensive report."""
    records = []
    for name, result in report.results().items():
        records.append({
            "Analysis": name,
            "Dimension": result.dimension,
            "Group By": result.group_by or "",
            "Items": len(result.data),
            "Total Value": result.total_value,
            "Items to 80%": result.pareto80_count,
            "Items to 80% (%)": round(result.pareto80_percent, 1),
        })
    return pd.DataFrame(records, columns=PARETO_SUMMARY_COLUMNS)
