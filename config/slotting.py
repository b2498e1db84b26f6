"""
Slotting analysis configuration.

Validation tolerances, bay grouping defaults, Pareto thresholds and the
column vocabulary used when ingesting client PICK / LOCATION sheets.
"""

# ===========================
# CAPACITY LAYOUT
# ===========================

# "0.25-0.25-0.25-0.25" style layouts, one share per sub-slot
CAPACITY_LAYOUT_DELIMITER = "-"
CAPACITY_SUM_TOLERANCE = 0.001  # Absolute, not relative

# Slot types from the client translation table (Vertaaltabel data Scex.xlsx)
# Dimensions in cm, volume in cm³, location_size is the template size class
SLOT_DIMENSIONS = {
    # Large pallet slots (1.0)
    "BLH": {"width": 120, "depth": 90, "height": 225, "volume": 2_430_000, "location_size": 1.0},
    "BLN": {"width": 240, "depth": 180, "height": 350, "volume": 15_120_000, "location_size": 1.0},  # Double location
    # Medium slots (0.5)
    "BLL": {"width": 120, "depth": 90, "height": 75, "volume": 810_000, "location_size": 0.5},
    "PP5": {"width": 52, "depth": 90, "height": 90, "volume": 421_200, "location_size": 0.5},
    # Small shelf slots (0.25)
    "PP3": {"width": 44, "depth": 90, "height": 80, "volume": 316_800, "location_size": 0.25},
    "PP7": {"width": 18, "depth": 90, "height": 90, "volume": 145_800, "location_size": 0.25},
    "PP9": {"width": 30, "depth": 90, "height": 20, "volume": 54_000, "location_size": 0.25},
    "PK": {"width": 52, "depth": 90, "height": 30, "volume": 140_400, "location_size": 0.25},
    "PLK": {"width": 52, "depth": 90, "height": 30, "volume": 140_400, "location_size": 0.25},
    "PLV": {"width": 52, "depth": 90, "height": 30, "volume": 140_400, "location_size": 0.25},
}

DEFAULT_LOCATION_SIZE = 1.0  # Unknown / reserve locations
RESERVE_SLOT_WEIGHT = 1      # Volume stand-in for locations without a slot type
CAPACITY_LAYOUT_DECIMALS = 16

# ===========================
# VALIDATION
# ===========================

# Row numbers reported to users: data starts below the header row
FIRST_DATA_ROW_NUMBER = 2

# Default page size when listing validation issues
DEFAULT_ISSUE_PAGE_SIZE = 100
MAX_ISSUE_PAGE_SIZE = 1000
TOP_ERROR_CODES = 10

# ===========================
# BAY GROUPING
# ===========================

DEFAULT_BAY_DELIMITER = "-"
DEFAULT_BAY_SEGMENTS = 3
DEFAULT_MAX_DISTANCE = 10.0

# Confidence scores per inference path
CONFIDENCE_EXACT = 1.0
CONFIDENCE_PROXIMITY = 0.8
CONFIDENCE_TOO_FEW_SEGMENTS = 0.5
CONFIDENCE_PARSE_FAILURE = 0.3

# Assignments below this are surfaced for manual review
LOW_CONFIDENCE_THRESHOLD = 0.8

# Strategy auto-detection looks at the first N location codes
STRATEGY_DETECTION_SAMPLE_SIZE = 10
NAMING_DELIMITERS = ["-", "."]

PROXIMITY_BAY_PREFIX = "BAY-"
PROXIMITY_BAY_PAD = 3
# Greedy clustering is O(locations x clusters); warn above this size
PROXIMITY_SCALE_WARNING = 50_000

# ===========================
# PARETO ANALYSIS
# ===========================

PARETO_CUTOFF_PCT = 80.0

STRONG_PARETO_MAX_PCT = 20.0   # pareto80 percent below this = strong effect
WEAK_PARETO_MIN_PCT = 50.0     # pareto80 percent above this = weak effect
TOP_SHARE = 0.1                # Top 10% of items...
TOP_SHARE_CRITICAL_PCT = 50.0  # ...holding more than 50% of value
BOTTOM_SHARE = 0.5             # Bottom 50% of items...
BOTTOM_SHARE_MAX_PCT = 5.0     # ...holding less than 5% of value

# ===========================
# DATA REQUIREMENTS
# ===========================

PICK_TEMPLATE_COLUMNS = [
    "article",
    "article_description",
    "family",
    "pick_frequency",
    "location",
    "quantity",
    "unique_articles",
]

LOCATION_TEMPLATE_COLUMNS = [
    "location",
    "storage_type",
    "location_length",
    "location_width",
    "location_height",
    "capacity_layout",
    "location_category",
    "bay",
]

PICK_INTEGER_COLUMNS = ["pick_frequency", "quantity", "unique_articles"]
LOCATION_FLOAT_COLUMNS = ["location_length", "location_width", "location_height"]

# Minimum similarity for a fuzzy column match
COLUMN_MATCH_THRESHOLD = 0.7

# Column aliases for flexible client sheets (English + Dutch exports)
PICK_COLUMN_ALIASES = {
    "article": [
        "article", "artikelnummer", "artikel", "item", "item_number", "sku",
        "product_code", "product_id", "artikelnr", "art_nr",
    ],
    "article_description": [
        "article description", "description", "artikeloms", "omschrijving",
        "item_description", "product_description", "desc", "artikel_omschrijving",
    ],
    "family": [
        "family", "productgroup", "product_group", "category", "productgroep",
        "oms_productgroep", "oms productgroep 1", "group",
    ],
    "pick_frequency": [
        "pick frequency", "frequency", "picks", "aantal_picks",
        "pickcount", "pick_count", "freq",
    ],
    "location": [
        "location", "locatie", "locatiecode", "picklocatie", "pick_location",
        "loc", "warehouse_location", "slot",
    ],
    "quantity": [
        "quantity", "qty", "aantal", "aantal basiseenheden", "hoeveelheid",
        "count", "amount", "volume",
    ],
    "unique_articles": [
        "unique articles", "aantal_artikelen", "article_count", "unique_items",
    ],
}

LOCATION_COLUMN_ALIASES = {
    "location": [
        "location", "locatie", "loc", "warehouse_location", "slot", "position", "positie",
    ],
    "storage_type": [
        "storage type", "type", "slottype", "slot_type",
        "slot type description", "locatietype",
    ],
    "location_length": [
        "location length", "length", "lengte", "l", "lengte st eenheid",
    ],
    "location_width": [
        "location width", "width", "breedte", "w", "breedte st eenheid",
    ],
    "location_height": [
        "location height", "height", "hoogte", "h", "hoogte st eenheid",
    ],
    "capacity_layout": [
        "capacity layout", "layout", "capacity", "capaciteit",
    ],
    "location_category": [
        "location category", "category", "categorie", "location class",
        "location class description", "cat",
    ],
    "bay": ["bay", "aisle", "gang", "area", "zone", "gebied"],
}

# Columns a sheet cannot be ingested without; the rest default below
PICK_REQUIRED_COLUMNS = ["article", "location", "pick_frequency"]
LOCATION_REQUIRED_COLUMNS = ["location"]

# Defaults for template columns the client file omits entirely.
# Blank text still surfaces as a validation warning downstream.
PICK_OPTIONAL_DEFAULTS = {
    "article_description": "",
    "family": "",
    "quantity": 0,
    "unique_articles": 0,
}

LOCATION_OPTIONAL_DEFAULTS = {
    "storage_type": "",
    "location_length": 0.0,
    "location_width": 0.0,
    "location_height": 0.0,
    "capacity_layout": "",
    "location_category": "",
    "bay": "",
}
