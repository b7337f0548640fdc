"""Workout statistics endpoint."""

import logging

from ..core.analytics import WorkoutAnalyticsEngine
from ..io.serializers import ValidationError, dict_to_pattern, dict_to_user_stats
from .client import ApiClient
from .errors import ApiError
from .utils import unwrap_response

logger = logging.getLogger(__name__)


async def get_workout_analytics(api: ApiClient, user_id: str) -> WorkoutAnalyticsEngine | None:
    """
    Fetch server-side analytics as an engine.

    Returns None on any API or data error so callers keep using local
    analytics instead.
    """
    try:
        data = unwrap_response(await api.get(f"/users/{user_id}/workout-analytics"))
    except ApiError as e:
        logger.info("Server analytics unavailable, using local: %s", e)
        return None

    if not isinstance(data, dict):
        return None
    try:
        patterns = {
            key: dict_to_pattern(value)
            for key, value in (data.get("exercisePatterns") or {}).items()
        }
        stats = dict_to_user_stats(data["userStats"]) if data.get("userStats") else None
    except (ValidationError, AttributeError) as e:
        logger.warning("Ignoring malformed server analytics: %s", e)
        return None
    return WorkoutAnalyticsEngine(exercise_patterns=patterns, user_stats=stats)
