"""
Data ingestion and harmonization for slotting analysis.

Handles:
- PICK / LOCATION record types consumed by validation, grouping and Pareto
- Column mapping detection (synonyms + fuzzy matching with confidence)
- Column name harmonization to the template schema
- Type coercion and optional column defaults
- DataFrame -> record conversion
"""

import logging
from dataclasses import dataclass
from difflib import SequenceMatcher
import re
from typing import Dict, List, Optional, Tuple

import pandas as pd

from config import slotting as config

logger = logging.getLogger(__name__)

PICK_SHEET = "PICK"
LOCATION_SHEET = "LOCATION"


@dataclass(frozen=True)
class PickRow:
    """
    One article-location pick activity record (PICK sheet).
    """
    article: str
    article_description: str = ""
    family: str = ""
    pick_frequency: int = 0
    location: str = ""
    quantity: int = 0
    unique_articles: int = 0


@dataclass(frozen=True)
class LocationRow:
    """
    One physical storage slot (LOCATION sheet).

    Dimensions are in meters. ``bay`` may be blank until bay grouping fills it.
    """
    location: str
    storage_type: str = ""
    location_length: float = 0.0
    location_width: float = 0.0
    location_height: float = 0.0
    capacity_layout: str = ""
    location_category: str = ""
    bay: str = ""


@dataclass(frozen=True)
class DetectedMapping:
    client_column: str
    template_column: str
    confidence: float
    reason: str


@dataclass(frozen=True)
class ColumnMappingResult:
    """Outcome of auto-detecting how a client sheet maps onto a template."""
    sheet_type: str
    mappings: Tuple[DetectedMapping, ...]
    unmapped_columns: Tuple[str, ...]
    missing_columns: Tuple[str, ...]
    confidence: float

    def to_rename_map(self) -> Dict[str, str]:
        """Client column -> template column, ready for ``DataFrame.rename``."""
        return {m.client_column: m.template_column for m in self.mappings}


def _sheet_schema(sheet_type: str) -> Tuple[List[str], Dict[str, List[str]]]:
    if sheet_type == PICK_SHEET:
        return config.PICK_TEMPLATE_COLUMNS, config.PICK_COLUMN_ALIASES
    if sheet_type == LOCATION_SHEET:
        return config.LOCATION_TEMPLATE_COLUMNS, config.LOCATION_COLUMN_ALIASES
    raise ValueError(f"Unknown sheet type '{sheet_type}' (expected {PICK_SHEET} or {LOCATION_SHEET})")


def normalize_column_name(col: str) -> str:
    """
    Normalize column name for comparison.

    Lowercase, with separators and punctuation dropped, so that
    "Pick Frequency", "pick_frequency" and "pickFrequency" compare equal.
    """
    collapsed = re.sub(r"[_\s-]+", "", str(col).strip().lower())
    return re.sub(r"[^a-z0-9]", "", collapsed)


def column_similarity(a: str, b: str) -> float:
    """Similarity ratio (0.0 - 1.0) between two normalized column names."""
    if not a and not b:
        return 1.0
    return SequenceMatcher(None, a, b).ratio()


def _find_best_match(
    template_col: str,
    client_columns: List[str],
    synonyms: List[str],
    threshold: float,
) -> Optional[DetectedMapping]:
    """
    Find the client column that best matches one template column.

    An exact synonym hit wins immediately; otherwise the highest fuzzy score
    at or above ``threshold`` is kept (first column wins ties).
    """
    normalized_synonyms = [normalize_column_name(s) for s in synonyms]
    best: Optional[DetectedMapping] = None
    best_score = 0.0

    for client_col in client_columns:
        norm_client = normalize_column_name(client_col)

        if norm_client in normalized_synonyms:
            return DetectedMapping(client_col, template_col, 1.0, "Exact match")

        for synonym in normalized_synonyms:
            score = column_similarity(norm_client, synonym)
            if score > best_score and score >= threshold:
                best_score = score
                best = DetectedMapping(
                    client_col,
                    template_col,
                    score,
                    f"Fuzzy match ({score * 100:.0f}% similarity)",
                )

    return best


def detect_sheet_mapping(
    client_columns: List[str],
    sheet_type: str,
    threshold: float = None,
) -> ColumnMappingResult:
    """
    Auto-detect the column mapping of a client sheet against one template.

    Each client column is mapped at most once, template columns are visited
    in template order.

    Overall confidence = (average match confidence + completeness) / 2, where
    completeness is the share of template columns that found a match.
    """
    threshold = threshold if threshold is not None else config.COLUMN_MATCH_THRESHOLD
    template_columns, aliases = _sheet_schema(sheet_type)
    client_columns = [str(c) for c in client_columns]

    mappings: List[DetectedMapping] = []
    missing: List[str] = []
    used = set()

    for template_col in template_columns:
        synonyms = [template_col] + aliases.get(template_col, [])
        candidates = [c for c in client_columns if c not in used]
        match = _find_best_match(template_col, candidates, synonyms, threshold)
        if match:
            mappings.append(match)
            used.add(match.client_column)
        else:
            missing.append(template_col)

    unmapped = [c for c in client_columns if c not in used]

    avg_confidence = sum(m.confidence for m in mappings) / len(mappings) if mappings else 0.0
    completeness = (len(template_columns) - len(missing)) / len(template_columns)

    return ColumnMappingResult(
        sheet_type=sheet_type,
        mappings=tuple(mappings),
        unmapped_columns=tuple(unmapped),
        missing_columns=tuple(missing),
        confidence=(avg_confidence + completeness) / 2,
    )


def detect_pick_mapping(client_columns: List[str], threshold: float = None) -> ColumnMappingResult:
    return detect_sheet_mapping(client_columns, PICK_SHEET, threshold)


def detect_location_mapping(client_columns: List[str], threshold: float = None) -> ColumnMappingResult:
    return detect_sheet_mapping(client_columns, LOCATION_SHEET, threshold)


def detect_column_mapping(client_columns: List[str], threshold: float = None) -> ColumnMappingResult:
    """
    Detect sheet type and mapping at once.

    Scores the columns against both templates and keeps the more confident
    one. PICK wins ties.
    """
    pick_result = detect_pick_mapping(client_columns, threshold)
    location_result = detect_location_mapping(client_columns, threshold)
    if pick_result.confidence >= location_result.confidence:
        return pick_result
    return location_result


def harmonize_columns(df: pd.DataFrame, sheet_type: str = None) -> pd.DataFrame:
    """
    Rename client columns to template column names.

    Args:
        df: Input DataFrame with client column names
        sheet_type: PICK or LOCATION; auto-detected when omitted

    Returns:
        DataFrame with standardized column names (unmapped columns kept as-is)
    """
    df = df.copy()
    if sheet_type is None:
        result = detect_column_mapping(list(df.columns))
    else:
        result = detect_sheet_mapping(list(df.columns), sheet_type)

    for m in result.mappings:
        if m.confidence < 1.0:
            logger.info("Mapped column '%s' -> '%s' (%s)", m.client_column, m.template_column, m.reason)
    if result.missing_columns:
        logger.warning(
            "%s sheet: no client column found for %s", result.sheet_type, list(result.missing_columns)
        )

    return df.rename(columns=result.to_rename_map())


def add_optional_columns(df: pd.DataFrame, sheet_type: str) -> pd.DataFrame:
    """
    Add optional template columns with default values if missing.
    """
    df = df.copy()
    defaults = config.PICK_OPTIONAL_DEFAULTS if sheet_type == PICK_SHEET else config.LOCATION_OPTIONAL_DEFAULTS

    for col, default_value in defaults.items():
        if col not in df.columns:
            df[col] = default_value

    return df


def validate_required_columns(df: pd.DataFrame, sheet_type: str) -> Tuple[bool, List[str]]:
    """
    Check if all required columns are present.

    Returns:
        Tuple of (is_valid, list_of_missing_columns)
    """
    required = config.PICK_REQUIRED_COLUMNS if sheet_type == PICK_SHEET else config.LOCATION_REQUIRED_COLUMNS
    missing = [col for col in required if col not in df.columns]
    return len(missing) == 0, missing


def _cell_text(value) -> str:
    # Numeric code columns with blanks are read as float: 101.0 -> "101"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_types(df: pd.DataFrame, sheet_type: str) -> pd.DataFrame:
    """
    Coerce template columns to expected data types.

    - Text columns: string, stripped, missing -> ""
    - PICK counts: int, unparseable -> 0 (negatives are kept for validation)
    - LOCATION dimensions: float, unparseable -> 0.0
    """
    df = df.copy()
    template_columns, _ = _sheet_schema(sheet_type)

    if sheet_type == PICK_SHEET:
        numeric_cols = config.PICK_INTEGER_COLUMNS
    else:
        numeric_cols = config.LOCATION_FLOAT_COLUMNS

    for col in template_columns:
        if col not in df.columns:
            continue
        if col in numeric_cols:
            values = pd.to_numeric(df[col], errors="coerce").fillna(0)
            df[col] = values.astype(int) if sheet_type == PICK_SHEET else values.astype(float)
        else:
            df[col] = df[col].fillna("").map(_cell_text).astype(str).str.strip()

    return df


def prepare_sheet(df: pd.DataFrame, sheet_type: str) -> pd.DataFrame:
    """
    Full ingestion pipeline for one sheet.

    1. Harmonize column names
    2. Add optional columns with defaults
    3. Coerce types
    4. Validate required columns

    Raises:
        ValueError: If the sheet is empty or misses required columns
    """
    if df is None or df.empty:
        raise ValueError(f"{sheet_type} sheet is empty")

    df = harmonize_columns(df, sheet_type)
    df = add_optional_columns(df, sheet_type)
    df = coerce_types(df, sheet_type)

    is_valid, missing = validate_required_columns(df, sheet_type)
    if not is_valid:
        raise ValueError(f"Missing required columns: {missing}")

    template_columns, _ = _sheet_schema(sheet_type)
    return df[template_columns]


def frame_to_pick_rows(df: pd.DataFrame) -> List[PickRow]:
    """Convert a client PICK sheet into PickRow records (row order kept)."""
    prepared = prepare_sheet(df, PICK_SHEET)
    rows = [PickRow(**rec) for rec in prepared.to_dict(orient="records")]
    logger.debug("Ingested %d pick rows", len(rows))
    return rows


def frame_to_location_rows(df: pd.DataFrame) -> List[LocationRow]:
    """Convert a client LOCATION sheet into LocationRow records (row order kept)."""
    prepared = prepare_sheet(df, LOCATION_SHEET)
    rows = [LocationRow(**rec) for rec in prepared.to_dict(orient="records")]
    logger.debug("Ingested %d location rows", len(rows))
    return rows


def get_column_status(df: pd.DataFrame, sheet_type: str) -> dict:
    """
    Get status of required and optional template columns.

    Useful for UI feedback showing which columns are present/missing.

    Returns:
        {
            "required_present": [...],
            "required_missing": [...],
            "optional_present": [...],
            "optional_missing": [...],
        }
    """
    present_cols = set(harmonize_columns(df, sheet_type).columns)
    if sheet_type == PICK_SHEET:
        required_set = set(config.PICK_REQUIRED_COLUMNS)
        optional_set = set(config.PICK_OPTIONAL_DEFAULTS)
    else:
        required_set = set(config.LOCATION_REQUIRED_COLUMNS)
        optional_set = set(config.LOCATION_OPTIONAL_DEFAULTS)

    return {
        "required_present": sorted(required_set & present_cols),
        "required_missing": sorted(required_set - present_cols),
        "optional_present": sorted(optional_set & present_cols),
        "optional_missing": sorted(optional_set - present_cols),
    }
