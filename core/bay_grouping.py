"""
Bay grouping for slotting analysis.

Assigns every location to a bay code using one of three strategies:
1. Naming convention: bay = leading segments of the location code
   ("D11-021-11-05" -> "D11-021-11")
2. Physical proximity: greedy clustering on coordinates embedded in the code
3. Manual mapping: user supplied location -> bay table

Every assignment carries a confidence score; degraded inference lowers the
score instead of failing.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from config import slotting as config
from core.data_ingest import LocationRow, PickRow

logger = logging.getLogger(__name__)


class BayTransformStrategy(str, Enum):
    NAMING_CONVENTION = "NAMING_CONVENTION"
    PHYSICAL_PROXIMITY = "PHYSICAL_PROXIMITY"
    MANUAL_MAPPING = "MANUAL_MAPPING"


class BayConfigurationError(ValueError):
    """Raised when a grouping strategy is invoked with unusable configuration."""


@dataclass(frozen=True)
class NamingConventionConfig:
    """
    Naming convention parameters.

    Examples (bay_segments):
    - "D11-021-11-05" -> "D11-021-11" (3, "-")
    - "A.01.05.03" -> "A.01.05" (3, ".")
    - "BAY-A-LOC-123" -> "BAY-A" (2, "-")

    ``pattern`` (regex string or compiled) takes priority; its first match is
    used verbatim as the bay code.
    """
    delimiter: str = config.DEFAULT_BAY_DELIMITER
    bay_segments: int = config.DEFAULT_BAY_SEGMENTS
    pattern: Optional[Union[str, re.Pattern]] = None


@dataclass(frozen=True)
class PhysicalProximityConfig:
    max_distance: float = config.DEFAULT_MAX_DISTANCE


@dataclass(frozen=True)
class ManualMappingConfig:
    mappings: Dict[str, str] = field(default_factory=dict)  # location -> bay


BayTransformConfig = Union[NamingConventionConfig, PhysicalProximityConfig, ManualMappingConfig]


@dataclass(frozen=True)
class BayGroupingResult:
    location_code: str
    bay_code: str
    strategy: BayTransformStrategy
    confidence: float  # 0.0 - 1.0


@dataclass(frozen=True)
class BayTally:
    """Location count and member codes of one bay."""
    bay_code: str
    location_count: int
    locations: Tuple[str, ...]


@dataclass(frozen=True)
class BayMetrics:
    """
    Bay-level aggregate used by bay constraint validation and the
    bay productivity Pareto.
    """
    bay_code: str
    location_count: int
    unique_articles: int
    total_pick_frequency: int


# ===========================
# STRATEGY 1: NAMING CONVENTION
# ===========================

def extract_bay_from_naming_convention(
    location_code: str,
    naming: NamingConventionConfig = None,
) -> BayGroupingResult:
    """
    Extract bay code from a location code using naming patterns.

    Never raises. Confidence:
    - 1.0: pattern matched, or at least ``bay_segments`` segments present
    - 0.5: fewer segments than requested (whole code becomes the bay)
    - 0.3: the code could not be parsed at all (whole code becomes the bay)

    Args:
        location_code: Raw location code
        naming: Delimiter / segment count / optional regex

    Returns:
        BayGroupingResult for this location
    """
    naming = naming or NamingConventionConfig()
    strategy = BayTransformStrategy.NAMING_CONVENTION

    try:
        if naming.pattern is not None:
            match = re.search(naming.pattern, location_code)
            if match and match.group(0):
                return BayGroupingResult(location_code, match.group(0), strategy, config.CONFIDENCE_EXACT)

        parts = location_code.split(naming.delimiter)

        if len(parts) < naming.bay_segments:
            return BayGroupingResult(
                location_code, location_code, strategy, config.CONFIDENCE_TOO_FEW_SEGMENTS
            )

        bay_code = naming.delimiter.join(parts[:naming.bay_segments])
        return BayGroupingResult(location_code, bay_code, strategy, config.CONFIDENCE_EXACT)

    except (AttributeError, TypeError, ValueError, re.error) as exc:
        logger.debug("Could not parse location code %r: %s", location_code, exc)
        return BayGroupingResult(
            location_code, location_code, strategy, config.CONFIDENCE_PARSE_FAILURE
        )


# ===========================
# STRATEGY 2: PHYSICAL PROXIMITY
# ===========================

def extract_coordinates(location_code: str) -> Optional[Tuple[int, int, int]]:
    """
    Pseudo-coordinates from the digit runs of a location code.

    "D11-021-11" -> (11, 21, 11); "A1-B2" -> (1, 2, 0); "DOCK" -> None.
    """
    numbers = re.findall(r"[0-9]+", str(location_code))
    if len(numbers) < 2:
        return None

    z = int(numbers[2]) if len(numbers) > 2 else 0
    return int(numbers[0]), int(numbers[1]), z


def group_by_physical_proximity(
    locations: Sequence[LocationRow],
    proximity: PhysicalProximityConfig = None,
) -> List[BayGroupingResult]:
    """
    Group locations by distance between their embedded coordinates.

    Greedy single pass in input order. Each location is compared with the
    first member of every existing cluster (clusters are never re-centered)
    and joins the nearest one strictly closer than ``max_distance``; the
    earliest cluster wins ties. Otherwise it opens a new cluster named
    BAY-000, BAY-001, ...

    Locations without coordinates get a naming convention result. When no
    location has coordinates the whole set falls back to naming convention.

    Returns:
        One result per location, in input order
    """
    proximity = proximity or PhysicalProximityConfig()
    coords = [extract_coordinates(loc.location) for loc in locations]

    if not any(c is not None for c in coords):
        logger.warning("No coordinates found in %d location codes; using naming convention", len(locations))
        return [extract_bay_from_naming_convention(loc.location) for loc in locations]

    if len(locations) > config.PROXIMITY_SCALE_WARNING:
        logger.warning(
            "Proximity clustering %d locations is O(locations x clusters) and may be slow",
            len(locations),
        )

    anchors = np.empty((0, 3), dtype=float)  # first member of each cluster
    cluster_ids: List[str] = []
    results = []

    for loc, point in zip(locations, coords):
        if point is None:
            results.append(extract_bay_from_naming_convention(loc.location))
            continue

        point = np.asarray(point, dtype=float)
        assigned = None

        if cluster_ids:
            distances = np.sqrt(((anchors - point) ** 2).sum(axis=1))
            candidates = np.flatnonzero(distances < proximity.max_distance)
            if candidates.size:
                assigned = cluster_ids[candidates[np.argmin(distances[candidates])]]

        if assigned is None:
            assigned = f"{config.PROXIMITY_BAY_PREFIX}{len(cluster_ids):0{config.PROXIMITY_BAY_PAD}d}"
            cluster_ids.append(assigned)
            anchors = np.vstack([anchors, point])

        results.append(BayGroupingResult(
            loc.location, assigned, BayTransformStrategy.PHYSICAL_PROXIMITY, config.CONFIDENCE_PROXIMITY
        ))

    logger.debug("Proximity clustering produced %d bays", len(cluster_ids))
    return results


# ===========================
# STRATEGY 3: MANUAL MAPPING
# ===========================

def apply_manual_mapping(
    locations: Sequence[LocationRow],
    manual: ManualMappingConfig,
) -> List[BayGroupingResult]:
    """
    Apply a user supplied location -> bay table.

    Locations missing from the table (or mapped to a blank bay) fall back
    to the naming convention.
    """
    results = []
    for loc in locations:
        bay_code = manual.mappings.get(loc.location)
        if bay_code:
            results.append(BayGroupingResult(
                loc.location, bay_code, BayTransformStrategy.MANUAL_MAPPING, config.CONFIDENCE_EXACT
            ))
        else:
            results.append(extract_bay_from_naming_convention(loc.location))
    return results


# ===========================
# DISPATCH
# ===========================

def _expect_config(strategy_config, expected_type, strategy):
    if strategy_config is not None and not isinstance(strategy_config, expected_type):
        raise BayConfigurationError(
            f"{strategy.value} expects {expected_type.__name__}, got {type(strategy_config).__name__}"
        )
    return strategy_config


def transform_locations_to_bays(
    locations: Sequence[LocationRow],
    strategy: Union[BayTransformStrategy, str],
    strategy_config: Optional[BayTransformConfig] = None,
) -> List[BayGroupingResult]:
    """
    Transform locations to bays using the given strategy.

    Args:
        locations: Location rows (only the location code is used)
        strategy: Strategy enum member or its name
        strategy_config: Config dataclass matching the strategy; optional
            except for MANUAL_MAPPING

    Returns:
        One BayGroupingResult per location, in input order

    Raises:
        BayConfigurationError: Unknown strategy, wrong config type, or
            MANUAL_MAPPING without a mapping table
    """
    try:
        strategy = BayTransformStrategy(strategy)
    except ValueError:
        raise BayConfigurationError(f"Unknown strategy: {strategy}") from None

    if strategy == BayTransformStrategy.NAMING_CONVENTION:
        naming = _expect_config(strategy_config, NamingConventionConfig, strategy)
        results = [extract_bay_from_naming_convention(loc.location, naming) for loc in locations]

    elif strategy == BayTransformStrategy.PHYSICAL_PROXIMITY:
        proximity = _expect_config(strategy_config, PhysicalProximityConfig, strategy)
        results = group_by_physical_proximity(locations, proximity)

    else:
        if strategy_config is None:
            raise BayConfigurationError("Manual mapping requires config with mappings")
        manual = _expect_config(strategy_config, ManualMappingConfig, strategy)
        results = apply_manual_mapping(locations, manual)

    low = low_confidence_assignments(results)
    logger.info(
        "Grouped %d locations into %d bays with %s (%d low-confidence)",
        len(results), len({r.bay_code for r in results}), strategy.value, len(low),
    )
    return results


def detect_best_strategy(locations: Sequence[LocationRow]) -> BayTransformStrategy:
    """
    Pick a strategy from a sample of the first location codes.

    - All sampled codes contain a naming delimiter -> NAMING_CONVENTION
    - Any sampled code yields coordinates -> PHYSICAL_PROXIMITY
    - Otherwise (and for empty input) -> NAMING_CONVENTION
    """
    if not locations:
        return BayTransformStrategy.NAMING_CONVENTION

    sample = [loc.location for loc in locations[:config.STRATEGY_DETECTION_SAMPLE_SIZE]]

    if all(any(d in code for d in config.NAMING_DELIMITERS) for code in sample):
        return BayTransformStrategy.NAMING_CONVENTION

    if any(extract_coordinates(code) is not None for code in sample):
        return BayTransformStrategy.PHYSICAL_PROXIMITY

    return BayTransformStrategy.NAMING_CONVENTION


# ===========================
# BAY METRICS
# ===========================

def calculate_bay_metrics(results: Sequence[BayGroupingResult]) -> Dict[str, BayTally]:
    """
    Tally locations per bay in a single pass.

    Returns:
        Dict of bay code -> BayTally, in order of first occurrence
    """
    members: Dict[str, List[str]] = {}
    for result in results:
        members.setdefault(result.bay_code, []).append(result.location_code)

    return {
        bay_code: BayTally(bay_code, len(codes), tuple(codes))
        for bay_code, codes in members.items()
    }


def summarize_bays(tallies: Dict[str, BayTally], picks: Sequence[PickRow]) -> List[BayMetrics]:
    """
    Enrich bay tallies with pick activity.

    unique_articles counts distinct articles picked at the bay's locations;
    total_pick_frequency sums their pick frequency.

    Returns:
        BayMetrics per bay, in tally order
    """
    bay_of = {code: tally.bay_code for tally in tallies.values() for code in tally.locations}

    pick_df = pd.DataFrame(
        [(p.location, p.article, p.pick_frequency) for p in picks],
        columns=["location", "article", "pick_frequency"],
    )
    pick_df["bay_code"] = pick_df["location"].map(bay_of)
    pick_df = pick_df.dropna(subset=["bay_code"])

    per_bay = pick_df.groupby("bay_code").agg(
        unique_articles=("article", "nunique"),
        total_pick_frequency=("pick_frequency", "sum"),
    )

    metrics = []
    for bay_code, tally in tallies.items():
        if bay_code in per_bay.index:
            unique_articles = int(per_bay.at[bay_code, "unique_articles"])
            total_picks = int(per_bay.at[bay_code, "total_pick_frequency"])
        else:
            unique_articles, total_picks = 0, 0
        metrics.append(BayMetrics(bay_code, tally.location_count, unique_articles, total_picks))

    return metrics


def assign_bays(
    locations: Sequence[LocationRow],
    results: Sequence[BayGroupingResult],
) -> List[LocationRow]:
    """New location rows with ``bay`` set from the grouping (others unchanged)."""
    bay_of = {r.location_code: r.bay_code for r in results}
    return [
        replace(loc, bay=bay_of[loc.location]) if loc.location in bay_of else loc
        for loc in locations
    ]


def low_confidence_assignments(
    results: Sequence[BayGroupingResult],
    threshold: float = None,
) -> List[BayGroupingResult]:
    """Assignments below ``threshold`` that deserve manual review."""
    threshold = threshold if threshold is not None else config.LOW_CONFIDENCE_THRESHOLD
    return [r for r in results if r.confidence < threshold]
