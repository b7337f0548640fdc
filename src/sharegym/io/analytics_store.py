"""
Persistence for the workout analytics engine.

Only the durable subset of engine state is written: the exercise
patterns and the user stats.  Dates are stored as ISO strings and
re-hydrated to datetimes on load.
"""

from pathlib import Path

from ..core.analytics import WorkoutAnalyticsEngine
from ..core.config import ANALYTICS_STORE_NAME
from ..core.models import ExercisePattern
from .serializers import (
    ValidationError,
    dict_to_pattern,
    dict_to_user_stats,
    pattern_to_dict,
    user_stats_to_dict,
)
from .storage import JsonKeyValueStore

PATTERNS_KEY = "exercisePatterns"
USER_STATS_KEY = "userStats"


class AnalyticsStore:
    """Loads and saves WorkoutAnalyticsEngine state as one JSON document."""

    def __init__(self, data_dir: str | Path):
        self.kv = JsonKeyValueStore.named(data_dir, ANALYTICS_STORE_NAME)

    @property
    def path(self) -> Path:
        return self.kv.path

    def load_engine(self, **engine_kwargs) -> WorkoutAnalyticsEngine:
        """
        Build an engine from stored state.

        Args:
            **engine_kwargs: Passed through to WorkoutAnalyticsEngine (clock, rng)

        Returns:
            Engine with stored patterns and stats, or a fresh engine

        Raises:
            ValidationError: If the stored state is malformed
        """
        data = self.kv.load()

        raw_patterns = data.get(PATTERNS_KEY) or {}
        if not isinstance(raw_patterns, dict):
            raise ValidationError(f"{self.path}: {PATTERNS_KEY} must be an object")
        patterns: dict[str, ExercisePattern] = {
            key: dict_to_pattern(value) for key, value in raw_patterns.items()
        }

        raw_stats = data.get(USER_STATS_KEY)
        stats = dict_to_user_stats(raw_stats) if raw_stats else None

        return WorkoutAnalyticsEngine(
            exercise_patterns=patterns,
            user_stats=stats,
            **engine_kwargs,
        )

    def save_engine(self, engine: WorkoutAnalyticsEngine) -> None:
        self.kv.save(
            {
                PATTERNS_KEY: {
                    key: pattern_to_dict(p) for key, p in engine.exercise_patterns.items()
                },
                USER_STATS_KEY: user_stats_to_dict(engine.user_stats),
            }
        )
