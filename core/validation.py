"""
Business rule validation for slotting uploads.

Checks:
- Required fields on PICK and LOCATION rows
- Non-negative pick frequency / quantity / unique article counts
- Positive location dimensions
- Capacity layouts summing to 1.0
- Referential integrity (picks reference known locations)
- Bay constraints (unique articles <= location count)

Bad data is reported, never raised: every rule runs on every row and the
findings are returned as ValidationIssue records grouped by severity.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from config import slotting as config
from core.capacity_layout import parse_capacity_layout
from core.data_ingest import LocationRow, PickRow

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation finding.

    row_number is the spreadsheet row (header = row 1), None for findings
    that are not tied to a row (e.g. bay constraints).
    """
    severity: Severity
    error_code: str
    error_message: str
    row_number: Optional[int] = None
    column_name: Optional[str] = None
    affected_value: Optional[str] = None
    suggested_fix: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[ValidationIssue, ...]
    warnings: Tuple[ValidationIssue, ...]
    info: Tuple[ValidationIssue, ...]
    total_issues: int

    @property
    def issues(self) -> Tuple[ValidationIssue, ...]:
        """All findings, errors first."""
        return self.errors + self.warnings + self.info


@dataclass(frozen=True)
class BayConstraintInput:
    """Minimal bay shape the bay constraint rule needs."""
    bay_code: str
    location_count: int
    unique_articles: int


# (field, severity, code, message, suggested fix)
PICK_REQUIRED_FIELD_RULES = [
    ("article", Severity.ERROR, "MISSING_ARTICLE",
     "Article number is required", "Provide a valid article number"),
    ("article_description", Severity.WARNING, "MISSING_ARTICLE_DESCRIPTION",
     "Article description is missing", "Add article description for better clarity"),
    ("family", Severity.WARNING, "MISSING_FAMILY",
     "Family/category is missing", "Assign article to a family/category"),
    ("location", Severity.ERROR, "MISSING_LOCATION",
     "Location code is required", "Provide a valid location code"),
]

# (field, code stem, label, zero message, zero fix)
PICK_COUNT_RULES = [
    ("pick_frequency", "PICK_FREQUENCY", "Pick frequency",
     "Pick frequency is zero (no activity)", "Verify if this article has any picks"),
    ("quantity", "QUANTITY", "Quantity",
     "Quantity is zero", "Verify if quantity should be greater than zero"),
    ("unique_articles", "UNIQUE_ARTICLES", "Unique articles",
     "Unique articles is zero", "Verify if this should be at least 1"),
]

LOCATION_HEADER_FIELD_RULES = [
    ("location", Severity.ERROR, "MISSING_LOCATION",
     "Location code is required", "Provide a valid location code"),
    ("storage_type", Severity.WARNING, "MISSING_STORAGE_TYPE",
     "Storage type is missing", "Specify storage type (e.g., Pallet, Shelf)"),
    ("bay", Severity.WARNING, "MISSING_BAY",
     "Bay identifier is missing", "Assign location to a bay"),
]

# (field, code, label)
LOCATION_DIMENSION_RULES = [
    ("location_length", "INVALID_LENGTH", "length"),
    ("location_width", "INVALID_WIDTH", "width"),
    ("location_height", "INVALID_HEIGHT", "height"),
]


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


def _as_text(value) -> Optional[str]:
    return None if value is None else str(value)


def _check_required(row, rules, row_number: int) -> List[ValidationIssue]:
    issues = []
    for field, severity, code, message, fix in rules:
        value = getattr(row, field)
        if _is_blank(value):
            issues.append(ValidationIssue(
                severity=severity,
                error_code=code,
                error_message=message,
                row_number=row_number,
                column_name=field,
                affected_value=_as_text(value),
                suggested_fix=fix,
            ))
    return issues


def validate_pick_row(row: PickRow, row_number: int) -> List[ValidationIssue]:
    """
    Validate one PICK row.

    Args:
        row: Pick record
        row_number: Spreadsheet row number reported in findings

    Returns:
        All findings for the row, in rule order
    """
    issues = _check_required(row, PICK_REQUIRED_FIELD_RULES, row_number)

    for field, stem, label, zero_message, zero_fix in PICK_COUNT_RULES:
        value = getattr(row, field)
        if value < 0:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                error_code=f"NEGATIVE_{stem}",
                error_message=f"{label} cannot be negative",
                row_number=row_number,
                column_name=field,
                affected_value=str(value),
                suggested_fix="Use a positive value",
            ))
        if value == 0:
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                error_code=f"ZERO_{stem}",
                error_message=zero_message,
                row_number=row_number,
                column_name=field,
                affected_value=str(value),
                suggested_fix=zero_fix,
            ))

    return issues


def validate_location_row(row: LocationRow, row_number: int) -> List[ValidationIssue]:
    """
    Validate one LOCATION row.

    The capacity layout is delegated to parse_capacity_layout; an invalid
    layout reports the parsed sum so the user can see how far off it is.
    """
    issues = _check_required(row, LOCATION_HEADER_FIELD_RULES, row_number)

    for field, code, label in LOCATION_DIMENSION_RULES:
        value = getattr(row, field)
        if value <= 0:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                error_code=code,
                error_message=f"Location {label} must be positive",
                row_number=row_number,
                column_name=field,
                affected_value=str(value),
                suggested_fix="Use a positive value in meters",
            ))

    # Capacity layout (critical for slotting)
    if _is_blank(row.capacity_layout):
        issues.append(ValidationIssue(
            severity=Severity.ERROR,
            error_code="MISSING_CAPACITY_LAYOUT",
            error_message="Capacity layout is required",
            row_number=row_number,
            column_name="capacity_layout",
            affected_value=_as_text(row.capacity_layout),
            suggested_fix='Use format "0.25-0.25-0.25-0.25" (must sum to 1.0)',
        ))
    else:
        parsed = parse_capacity_layout(row.capacity_layout)
        if not parsed.is_valid:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                error_code="INVALID_CAPACITY_LAYOUT",
                error_message=f"Capacity layout is invalid: {parsed.error}",
                row_number=row_number,
                column_name="capacity_layout",
                affected_value=row.capacity_layout,
                suggested_fix=f"Adjust values so they sum to 1.0 (currently {parsed.sum:.4f})",
            ))

    if _is_blank(row.location_category):
        issues.append(ValidationIssue(
            severity=Severity.WARNING,
            error_code="MISSING_LOCATION_CATEGORY",
            error_message="Location category is missing",
            row_number=row_number,
            column_name="location_category",
            affected_value=_as_text(row.location_category),
            suggested_fix="Assign category (e.g., A, B, C)",
        ))

    return issues


def validate_referential_integrity(
    picks: Sequence[PickRow],
    locations: Sequence[LocationRow],
) -> List[ValidationIssue]:
    """
    Every pick must reference a location present in the LOCATION sheet.

    Returns one ORPHAN_PICK error per offending pick row.
    """
    location_codes = {loc.location for loc in locations}
    issues = []

    for i, pick in enumerate(picks):
        if pick.location not in location_codes:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                error_code="ORPHAN_PICK",
                error_message=f"Pick references non-existent location: {pick.location}",
                row_number=i + config.FIRST_DATA_ROW_NUMBER,
                column_name="location",
                affected_value=pick.location,
                suggested_fix=f"Add location {pick.location} to LOCATION sheet or update pick location",
            ))

    return issues


def validate_bay_constraints(bay_metrics: Iterable) -> List[ValidationIssue]:
    """
    A bay cannot hold more distinct articles than it has locations.

    Args:
        bay_metrics: Objects with bay_code, location_count and unique_articles
            (BayMetrics from bay grouping, or BayConstraintInput)

    Returns:
        One BAY_CONSTRAINT_VIOLATION error per violating bay
    """
    issues = []
    for bay in bay_metrics:
        if bay.unique_articles > bay.location_count:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                error_code="BAY_CONSTRAINT_VIOLATION",
                error_message=(
                    f"Bay {bay.bay_code}: uniqueArticles ({bay.unique_articles}) "
                    f"> locationCount ({bay.location_count})"
                ),
                column_name="unique_articles",
                affected_value=str(bay.unique_articles),
                suggested_fix=(
                    "This violates the constraint that uniqueArticles <= locationCount. "
                    "Review bay grouping or article distribution."
                ),
            ))
    return issues


def _build_result(issues: Iterable[ValidationIssue]) -> ValidationResult:
    errors, warnings, info = [], [], []
    for issue in issues:
        if issue.severity == Severity.ERROR:
            errors.append(issue)
        elif issue.severity == Severity.WARNING:
            warnings.append(issue)
        else:
            info.append(issue)

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=tuple(errors),
        warnings=tuple(warnings),
        info=tuple(info),
        total_issues=len(errors) + len(warnings) + len(info),
    )


def validate_pick_sheet(picks: Sequence[PickRow]) -> ValidationResult:
    issues = []
    for i, row in enumerate(picks):
        issues.extend(validate_pick_row(row, i + config.FIRST_DATA_ROW_NUMBER))
    return _build_result(issues)


def validate_location_sheet(locations: Sequence[LocationRow]) -> ValidationResult:
    issues = []
    for i, row in enumerate(locations):
        issues.extend(validate_location_row(row, i + config.FIRST_DATA_ROW_NUMBER))
    return _build_result(issues)


def validate_upload(
    picks: Sequence[PickRow],
    locations: Sequence[LocationRow],
    bay_metrics: Optional[Iterable] = None,
) -> ValidationResult:
    """
    Run every rule over a complete upload.

    Order of findings: PICK rows, LOCATION rows, referential integrity, then
    bay constraints (only when bay_metrics is given).

    Only ERROR findings make the upload invalid.
    """
    pick_result = validate_pick_sheet(picks)
    location_result = validate_location_sheet(locations)

    issues: List[ValidationIssue] = []
    issues.extend(pick_result.issues)
    issues.extend(location_result.issues)
    issues.extend(validate_referential_integrity(picks, locations))
    if bay_metrics is not None:
        issues.extend(validate_bay_constraints(bay_metrics))

    result = _build_result(issues)
    logger.info(
        "Validated %d picks / %d locations: %d errors, %d warnings, %d info",
        len(picks), len(locations), len(result.errors), len(result.warnings), len(result.info),
    )
    return result


def summarize_issues(result: ValidationResult, top_n: int = None) -> dict:
    """
    Counts per severity plus the most frequent error codes.

    Returns:
        {
            "errors": int,
            "warnings": int,
            "info": int,
            "total": int,
            "is_valid": bool,
            "top_error_codes": [(code, count), ...],
        }
    """
    top_n = top_n or config.TOP_ERROR_CODES
    code_counts = Counter(issue.error_code for issue in result.issues)

    return {
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "info": len(result.info),
        "total": result.total_issues,
        "is_valid": result.is_valid,
        "top_error_codes": code_counts.most_common(top_n),
    }


def filter_issues(
    result: ValidationResult,
    severity: Optional[Severity] = None,
    limit: int = None,
    offset: int = 0,
) -> dict:
    """
    Page through findings, optionally restricted to one severity.

    Raises:
        ValueError: If limit is outside 1..MAX_ISSUE_PAGE_SIZE or offset < 0
    """
    limit = limit if limit is not None else config.DEFAULT_ISSUE_PAGE_SIZE
    if not 1 <= limit <= config.MAX_ISSUE_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {config.MAX_ISSUE_PAGE_SIZE}")
    if offset < 0:
        raise ValueError("offset must be >= 0")

    pool = result.issues
    if severity is not None:
        pool = tuple(i for i in pool if i.severity == Severity(severity))

    page = list(pool[offset:offset + limit])
    return {
        "issues": page,
        "total": len(pool),
        "has_more": offset + len(page) < len(pool),
    }


def get_issue_summary(result: ValidationResult) -> str:
    """
    Generate human-readable summary of validation findings.
    """
    if result.total_issues == 0:
        return "No issues found"

    status = "VALID" if result.is_valid else "INVALID"
    lines = [
        f"Validation {status}: {len(result.errors)} errors, "
        f"{len(result.warnings)} warnings, {len(result.info)} info",
    ]
    for code, count in summarize_issues(result)["top_error_codes"]:
        lines.append(f"  - {code.replace('_', ' ').title()}: {count}")

    return "\n".join(lines)
