"""
Pareto (80/20) analysis for warehouse slotting.

Ranks items of one dimension by value and measures how few of them carry
80% of the total:
- Pick frequency by article / location / family
- Unique articles by location / family
- Quantity by article / location / family
- Location utilization (picks per cubic meter)
- Bay productivity (picks per bay)

Plus a comprehensive multi-dimension report and qualitative insights.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from config import slotting as config
from core.data_ingest import LocationRow, PickRow

logger = logging.getLogger(__name__)

PICK_GROUPINGS = ("article", "location", "family")
UNIQUE_ARTICLE_GROUPINGS = ("location", "family")


@dataclass(frozen=True)
class ParetoDataPoint:
    label: str
    value: float
    percent: float      # Share of total value (0-100)
    cumulative: float   # Running share (0-100)
    rank: int           # 1-indexed, descending value


@dataclass(frozen=True)
class ParetoResult:
    dimension: str
    group_by: Optional[str]
    data: Tuple[ParetoDataPoint, ...]
    total_value: float
    pareto80_value: float    # Value of the item where cumulative reaches 80%
    pareto80_count: int      # Items needed to reach 80% of value
    pareto80_percent: float  # Those items as a share of all items (0-100)


class InsightType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ParetoInsight:
    type: InsightType
    message: str
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class ComprehensivePareto:
    pick_frequency_by_article: ParetoResult
    pick_frequency_by_location: ParetoResult
    pick_frequency_by_family: ParetoResult
    unique_articles_by_location: ParetoResult
    unique_articles_by_family: ParetoResult
    quantity_by_article: ParetoResult
    location_utilization: ParetoResult
    bay_productivity: Optional[ParetoResult] = None

    def results(self) -> Dict[str, ParetoResult]:
        """Named results in report order (bay productivity only when present)."""
        named = {
            "pick_frequency_by_article": self.pick_frequency_by_article,
            "pick_frequency_by_location": self.pick_frequency_by_location,
            "pick_frequency_by_family": self.pick_frequency_by_family,
            "unique_articles_by_location": self.unique_articles_by_location,
            "unique_articles_by_family": self.unique_articles_by_family,
            "quantity_by_article": self.quantity_by_article,
            "location_utilization": self.location_utilization,
        }
        if self.bay_productivity is not None:
            named["bay_productivity"] = self.bay_productivity
        return named


# ===========================
# CORE PARETO CALCULATION
# ===========================

def calculate_pareto(
    data: Iterable[Tuple[str, float]],
    dimension: str,
    group_by: Optional[str] = None,
) -> ParetoResult:
    """
    Calculate Pareto analysis from (label, value) pairs.

    Items are ranked by descending value with a stable sort, so equal values
    keep their input order and repeated calls give identical output.

    A zero (or non-finite) total returns an empty result with every numeric
    field set to 0.

    Args:
        data: (label, value) pairs
        dimension: Measured dimension, e.g. "pick_frequency"
        group_by: Grouping the labels come from, e.g. "article"

    Returns:
        ParetoResult with ranked data points and the 80% cutoff
    """
    ranked = sorted(data, key=lambda item: item[1], reverse=True)
    total_value = sum(value for _, value in ranked)

    if total_value == 0 or not math.isfinite(total_value):
        return ParetoResult(
            dimension=dimension,
            group_by=group_by,
            data=(),
            total_value=0,
            pareto80_value=0,
            pareto80_count=0,
            pareto80_percent=0,
        )

    points = []
    cumulative = 0.0
    for i, (label, value) in enumerate(ranked):
        percent = value / total_value * 100
        cumulative += percent
        points.append(ParetoDataPoint(label, value, percent, cumulative, i + 1))

    cutoff = next((p for p in points if p.cumulative >= config.PARETO_CUTOFF_PCT), None)
    pareto80_count = cutoff.rank if cutoff else len(points)

    return ParetoResult(
        dimension=dimension,
        group_by=group_by,
        data=tuple(points),
        total_value=total_value,
        pareto80_value=cutoff.value if cutoff else 0,
        pareto80_count=pareto80_count,
        pareto80_percent=pareto80_count / len(points) * 100,
    )


# ===========================
# DIMENSION WRAPPERS
# ===========================

def _picks_frame(picks: Sequence[PickRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [(p.article, p.location, p.family, p.pick_frequency, p.quantity) for p in picks],
        columns=["article", "location", "family", "pick_frequency", "quantity"],
    )


def _check_grouping(group_by: str, allowed: Tuple[str, ...]) -> None:
    if group_by not in allowed:
        raise ValueError(f"group_by must be one of {allowed}, got '{group_by}'")


def _aggregate(picks: Sequence[PickRow], group_by: str, column: str, how: str) -> List[Tuple[str, float]]:
    """Aggregate pick rows per key, keys in order of first appearance."""
    df = _picks_frame(picks)
    if df.empty:
        return []
    grouped = df.groupby(group_by, sort=False, dropna=False)[column].agg(how)
    return list(zip(grouped.index.tolist(), grouped.tolist()))


def calculate_pick_frequency_pareto(picks: Sequence[PickRow], group_by: str = "article") -> ParetoResult:
    """Sum of pick frequency per article, location or family."""
    _check_grouping(group_by, PICK_GROUPINGS)
    return calculate_pareto(_aggregate(picks, group_by, "pick_frequency", "sum"), "pick_frequency", group_by)


def calculate_unique_articles_pareto(picks: Sequence[PickRow], group_by: str = "location") -> ParetoResult:
    """Distinct article count per location or family."""
    _check_grouping(group_by, UNIQUE_ARTICLE_GROUPINGS)
    return calculate_pareto(_aggregate(picks, group_by, "article", "nunique"), "unique_articles", group_by)


def calculate_quantity_pareto(picks: Sequence[PickRow], group_by: str = "article") -> ParetoResult:
    """Sum of quantity per article, location or family."""
    _check_grouping(group_by, PICK_GROUPINGS)
    return calculate_pareto(_aggregate(picks, group_by, "quantity", "sum"), "quantity", group_by)


def calculate_location_utilization_pareto(
    locations: Sequence[LocationRow],
    picks: Sequence[PickRow],
) -> ParetoResult:
    """
    Picks per unit of location volume, one point per location row.

    utilization = summed pick frequency / (length x width x height),
    0 when the volume is not positive.
    """
    picks_by_location = dict(_aggregate(picks, "location", "pick_frequency", "sum"))

    data = []
    for loc in locations:
        volume = loc.location_length * loc.location_width * loc.location_height
        pick_freq = picks_by_location.get(loc.location, 0)
        data.append((loc.location, pick_freq / volume if volume > 0 else 0))

    return calculate_pareto(data, "location_utilization", "location")


def calculate_bay_productivity_pareto(bay_data: Iterable) -> ParetoResult:
    """
    Total pick frequency per bay.

    Args:
        bay_data: Objects with bay_code and total_pick_frequency (BayMetrics)
    """
    data = [(bay.bay_code, bay.total_pick_frequency) for bay in bay_data]
    return calculate_pareto(data, "bay_productivity", "bay")


def generate_comprehensive_pareto(
    picks: Sequence[PickRow],
    locations: Sequence[LocationRow],
    bay_data: Optional[Iterable] = None,
) -> ComprehensivePareto:
    """
    Run every standard Pareto dimension over one upload.

    Bay productivity is included only when bay data is supplied.
    """
    report = ComprehensivePareto(
        pick_frequency_by_article=calculate_pick_frequency_pareto(picks, "article"),
        pick_frequency_by_location=calculate_pick_frequency_pareto(picks, "location"),
        pick_frequency_by_family=calculate_pick_frequency_pareto(picks, "family"),
        unique_articles_by_location=calculate_unique_articles_pareto(picks, "location"),
        unique_articles_by_family=calculate_unique_articles_pareto(picks, "family"),
        quantity_by_article=calculate_quantity_pareto(picks, "article"),
        location_utilization=calculate_location_utilization_pareto(locations, picks),
        bay_productivity=calculate_bay_productivity_pareto(bay_data) if bay_data is not None else None,
    )
    logger.info(
        "Pareto report: %d articles, %.1f%% of them drive 80%% of picks",
        len(report.pick_frequency_by_article.data),
        report.pick_frequency_by_article.pareto80_percent,
    )
    return report


# ===========================
# PARETO INSIGHTS
# ===========================

def generate_pareto_insights(result: ParetoResult) -> List[ParetoInsight]:
    """
    Derive qualitative flags from one Pareto result.

    Checks (independent, several may fire):
    - Strong effect: fewer than 20% of items reach 80% of value
    - Weak effect: more than 50% of items needed
    - Concentration risk: top 10% of items (rounded up) hold over 50%
    - Long tail: bottom 50% of items (rounded down) hold under 5%;
      when that rounds to zero every item is counted
    """
    insights = []
    pct = result.pareto80_percent

    if pct < config.STRONG_PARETO_MAX_PCT:
        insights.append(ParetoInsight(
            type=InsightType.INFO,
            message=f"Strong Pareto effect: {pct:.1f}% of items contribute to 80% of value",
            recommendation="Focus optimization efforts on these top performers",
        ))
    elif pct > config.WEAK_PARETO_MIN_PCT:
        insights.append(ParetoInsight(
            type=InsightType.WARNING,
            message=f"Weak Pareto effect: {pct:.1f}% of items needed for 80% of value",
            recommendation="Consider broader optimization strategy as value is more distributed",
        ))

    n = len(result.data)

    top_count = math.ceil(n * config.TOP_SHARE)
    top_value = sum(p.percent for p in result.data[:top_count])
    if top_value > config.TOP_SHARE_CRITICAL_PCT:
        insights.append(ParetoInsight(
            type=InsightType.CRITICAL,
            message=f"Top 10% of items contribute {top_value:.1f}% of total value",
            recommendation="High concentration risk - consider redundancy for top performers",
        ))

    bottom_count = math.floor(n * config.BOTTOM_SHARE)
    bottom = result.data[-bottom_count:] if bottom_count else result.data
    bottom_value = sum(p.percent for p in bottom)
    if bottom_value < config.BOTTOM_SHARE_MAX_PCT:
        insights.append(ParetoInsight(
            type=InsightType.INFO,
            message=f"Bottom 50% of items contribute only {bottom_value:.1f}% of value",
            recommendation="Consider consolidating or eliminating low-performers to reduce complexity",
        ))

    return insights


def generate_comprehensive_insights(report: ComprehensivePareto) -> Dict[str, List[ParetoInsight]]:
    """Insights for every result of a comprehensive report, keyed like ``report.results()``."""
    return {name: generate_pareto_insights(result) for name, result in report.results().items()}
