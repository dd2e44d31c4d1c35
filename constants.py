"""
Shared constants for the Pothole Mapping Platform.
"""

SEVERITIES = ["critical", "high", "medium", "low"]
STATUSES = ["pending", "inProgress", "repaired"]

SEVERITY_COLORS = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#f59e0b",
    "low": "#84cc16",
}

SEVERITY_LABELS = {
    "critical": "Critical (>30cm)",
    "high": "High (20 to 30cm)",
    "medium": "Medium (10 to 20cm)",
    "low": "Low (<10cm)",
}

STATUS_LABELS = {
    "pending": "Pending",
    "inProgress": "In Progress",
    "repaired": "Repaired",
}

DATE_RANGES = {
    "all": "All dates",
    "today": "Today",
    "last7": "Last 7 Days",
    "last30": "Last 30 Days",
    "thisYear": "This Year",
}

# Toronto city hall
CITY_CENTER = (43.6532, -79.3832)
DEFAULT_ZOOM = 12

# Synthetic data
DEFAULT_SEED = 12345
TARGET_COUNT = 80
MAX_ATTEMPTS_PER_RECORD = 50
MIN_SPACING_M = 10.0
LAT_JITTER = 0.15
LNG_JITTER = 0.2
SIZE_RANGE_CM = (10, 49)
DETECTION_WINDOW_DAYS = 7

EARTH_RADIUS_M = 6371008.8

# Property keys checked, in order, for a neighborhood display name
NAME_KEYS = [
    "name", "Name", "NAME", "AREA_NAME", "AREA",
    "NEIGHBORHOOD", "NEIGHBOURHOOD", "HOOD", "NBRHD",
    "ward", "WARD",
]

BOUNDARY_SOURCE = "data/toronto_crs84.geojson"
CONFIG_FILE = "data/config.json"

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
NOMINATIM_USER_AGENT = "pothole-mapping-platform/1.0"
COUNTRY_CODES = "ca"
GEOCODE_ZOOM = 13
FIT_PADDING = 0.1

DEFAULT_CONFIG = {
    "boundary_source": BOUNDARY_SOURCE,
    "seed": DEFAULT_SEED,
    "target_count": TARGET_COUNT,
    "min_spacing_m": MIN_SPACING_M,
    "clip_to_boundaries": True,
    "geocoder_url": NOMINATIM_URL,
    "geocoder_user_agent": NOMINATIM_USER_AGENT,
    "country_codes": COUNTRY_CODES,
    "geocode_zoom": GEOCODE_ZOOM,
    "map_style": "light",
}
