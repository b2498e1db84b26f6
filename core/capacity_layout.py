"""
Capacity layout parsing and slot-type capacity calculations.

A capacity layout splits a location's volume across its sub-slots as a
dash-delimited list of fractions, e.g. "0.25-0.25-0.25-0.25". The fractions
must sum to 1.0.
"""

from dataclasses import dataclass
import math
from typing import Dict, List, Optional, Sequence, Tuple

from config import slotting as config


@dataclass(frozen=True)
class ParsedCapacityLayout:
    raw: str
    values: Tuple[float, ...]
    sum: float
    is_valid: bool
    error: Optional[str] = None


def _parse_share(token: str) -> float:
    """Parse one layout token, accepting a decimal comma ("0,25")."""
    if "_" in token:
        raise ValueError(f"'{token}' is not a number")
    value = float(token.replace(",", "."))
    if math.isnan(value):
        raise ValueError(f"'{token}' is not a number")
    return value


def parse_capacity_layout(layout: str) -> ParsedCapacityLayout:
    """
    Parse and validate a capacity layout string.

    Never raises: malformed layouts come back with ``is_valid=False`` and an
    ``error`` describing the problem.

    Args:
        layout: Layout string such as "0.5-0.25-0.25"

    Returns:
        ParsedCapacityLayout with the parsed shares and their sum
    """
    try:
        tokens = [t.strip() for t in layout.split(config.CAPACITY_LAYOUT_DELIMITER)]

        values = []
        for token in tokens:
            try:
                values.append(_parse_share(token))
            except ValueError:
                return ParsedCapacityLayout(
                    raw=layout,
                    values=(),
                    sum=0.0,
                    is_valid=False,
                    error="Contains non-numeric values",
                )

        total = sum(values)
        is_valid = abs(total - 1.0) < config.CAPACITY_SUM_TOLERANCE

        return ParsedCapacityLayout(
            raw=layout,
            values=tuple(values),
            sum=total,
            is_valid=is_valid,
            error=None if is_valid else f"Sum is {total:.4f}, must be 1.0",
        )
    except (AttributeError, TypeError) as exc:
        return ParsedCapacityLayout(
            raw=layout,
            values=(),
            sum=0.0,
            is_valid=False,
            error=str(exc) or "Parse error",
        )


# ===========================
# SLOT TYPE DIMENSIONS
# ===========================

def get_slot_dimensions(slot_type: str) -> Optional[dict]:
    """Dimensions (cm), volume (cm³) and size class for a slot type, or None."""
    return config.SLOT_DIMENSIONS.get(slot_type)


def get_location_size(slot_type: str) -> float:
    """
    Template size class (0.25 / 0.5 / 1.0) for a slot type.

    Unknown and reserve locations count as full size.
    """
    dims = get_slot_dimensions(slot_type)
    return dims["location_size"] if dims else config.DEFAULT_LOCATION_SIZE


def get_slot_volume(slot_type: str) -> int:
    dims = get_slot_dimensions(slot_type)
    return dims["volume"] if dims else 0


def calculate_capacity_layout(locations: Sequence[Tuple[str, Optional[str]]]) -> Dict[str, float]:
    """
    Split a bay's capacity across its locations by slot volume.

    Reserve locations (no slot type) weigh as one unit of volume. When the
    bay has no measurable volume at all, every location gets an equal share.

    Args:
        locations: (location_code, slot_type or None) pairs of one bay

    Returns:
        Dict of location code -> share of bay capacity (0-1)
    """
    if not locations:
        return {}

    def volume_of(slot_type: Optional[str]) -> float:
        if not slot_type:
            return config.RESERVE_SLOT_WEIGHT
        return get_slot_volume(slot_type)

    total_volume = sum(volume_of(slot_type) for _, slot_type in locations)

    if total_volume == 0:
        equal_share = 1 / len(locations)
        return {code: equal_share for code, _ in locations}

    return {code: volume_of(slot_type) / total_volume for code, slot_type in locations}


def format_capacity_layout(capacities: List[float]) -> str:
    """
    Format shares as a European-decimal layout string.

    Example: [0.5, 0.5] -> "0,5000000000000000-0,5000000000000000"
    """
    decimals = config.CAPACITY_LAYOUT_DECIMALS
    return config.CAPACITY_LAYOUT_DELIMITER.join(
        f"{c:.{decimals}f}".replace(".", ",") for c in capacities
    )


def validate_capacity_layout(capacities: List[float], tolerance: float = None) -> bool:
    """True when the shares sum to 1.0 within ``tolerance`` (inclusive)."""
    tolerance = tolerance if tolerance is not None else config.CAPACITY_SUM_TOLERANCE
    return abs(sum(capacities) - 1.0) <= tolerance
