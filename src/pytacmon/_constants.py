"""Internal constants shared across the library."""

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 50.0
DEFAULT_POLL_INTERVAL_S = 5.0
DEFAULT_REQUEST_TIMEOUT_S = 10.0
DEFAULT_LOG_CAPACITY = 200
USER_AGENT = "pytacmon/1"

DEFAULT_CATEGORY = "unknown"

# Query parameter appended to snapshot URLs so intermediaries never serve a cached feed.
CACHE_BUST_PARAM = "t"
