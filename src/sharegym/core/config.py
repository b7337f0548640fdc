"""
Configuration constants for the workout analytics and sync core.

All adjustable parameters are centralized here for easy tuning.
Runtime settings (backend URL, data directory) live in settings.py.
"""

from typing import Final

# =============================================================================
# EXERCISE PATTERN SEED
# =============================================================================

DEFAULT_REST_SECONDS: Final[int] = 90  # Seed rest time for an unseen exercise
DEFAULT_SETS_COUNT: Final[float] = 3.0  # Seed average sets per session
HARDEST_SET_INDEX: Final[int] = 2  # 0-based; the 3rd set is usually the hardest

# =============================================================================
# PREDICTIONS
# =============================================================================

REST_INCREMENT_PER_SET: Final[int] = 10  # Extra rest seconds per completed set
MAX_PREDICTED_REST: Final[int] = 180  # Cap on predicted rest (3 minutes)
STRUGGLING_REST_FACTOR: Final[float] = 1.5  # Rest above avg * factor = struggling

# =============================================================================
# USER STATS
# =============================================================================

NO_WORKOUT_SENTINEL_DAYS: Final[int] = 999  # Days-since value when never trained
MORNING_END_HOUR: Final[int] = 12
AFTERNOON_END_HOUR: Final[int] = 18
DEFAULT_WORKOUT_TIME: Final[str] = "evening"

# =============================================================================
# SMART CHEERS
# =============================================================================

COMEBACK_THRESHOLD_DAYS: Final[int] = 7  # Strictly more days than this = comeback
CONSISTENCY_MIN_STREAK: Final[int] = 3

CHEER_PRIORITY: Final[dict[str, int]] = {
    "comeback": 10,
    "newPR": 9,
    "heavierWeight": 8,
    "lastSet": 7,
    "hardSet": 6,
    "firstSet": 5,
    "consistency": 4,
}

# =============================================================================
# EXERCISE ID MAPPING
# =============================================================================

# Numeric backend IDs are CATEGORY_BASE[category] + 1-based index in category.
CATEGORY_BASE: Final[dict[str, int]] = {
    "chest": 1000,
    "back": 2000,
    "shoulders": 3000,
    "legs": 4000,
    "arms": 5000,
    "abs": 6000,
    "cardio": 7000,
    "bodyweight": 8000,
    "sports": 9000,
    "outdoor": 9100,
    "yoga": 9200,
    "stretching": 9300,
}
DEFAULT_CATEGORY: Final[str] = "bodyweight"
DEFAULT_CATEGORY_BASE: Final[int] = 8000
UNKNOWN_BACKEND_ID: Final[int] = 0

# =============================================================================
# API RESPONSE CACHE (seconds)
# =============================================================================

DEFAULT_CACHE_TTL: Final[float] = 60.0

PATH_CACHE_TTL: Final[dict[str, float]] = {
    "/auth/me": 5 * 60.0,
    "/users/": 2 * 60.0,
    "/feed": 30.0,
    "/routines": 2 * 60.0,
}

# =============================================================================
# API CLIENT
# =============================================================================

DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0
REFRESH_PATH: Final[str] = "/auth/refresh"

# =============================================================================
# LOCAL STORAGE KEYS
# =============================================================================

AUTH_TOKEN_KEY: Final[str] = "sharegym_auth_token"
REFRESH_TOKEN_KEY: Final[str] = "sharegym_refresh_token"

AUTH_STORE_NAME: Final[str] = "auth-storage"
ANALYTICS_STORE_NAME: Final[str] = "workout-analytics-storage"
