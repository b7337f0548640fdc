"""
Workout analytics engine.

Maintains a rolling statistical profile (ExercisePattern) per exercise
plus a singleton UserStats, both updated once per completed session.
From that profile it predicts rest and weight, detects struggling, and
picks the single most relevant cheer for the set in progress.

The engine owns its state; persistence is handled by
io.analytics_store.AnalyticsStore.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Callable

from .cheers import make_cheer, pick_highest_priority
from .config import (
    AFTERNOON_END_HOUR,
    COMEBACK_THRESHOLD_DAYS,
    CONSISTENCY_MIN_STREAK,
    DEFAULT_REST_SECONDS,
    DEFAULT_SETS_COUNT,
    HARDEST_SET_INDEX,
    MAX_PREDICTED_REST,
    MORNING_END_HOUR,
    NO_WORKOUT_SENTINEL_DAYS,
    REST_INCREMENT_PER_SET,
    STRUGGLING_REST_FACTOR,
)
from .exercises.registry import display_name
from .models import (
    ExerciseEntry,
    ExercisePattern,
    PersonalizedCheer,
    UserStats,
    WorkoutSession,
    WorkoutTime,
)

logger = logging.getLogger(__name__)


def new_pattern(exercise_id: str) -> ExercisePattern:
    """Seed pattern for an exercise seen for the first time."""
    return ExercisePattern(
        exercise_id=exercise_id,
        average_rest_time=float(DEFAULT_REST_SECONDS),
        average_sets_count=DEFAULT_SETS_COUNT,
        hardest_set_index=HARDEST_SET_INDEX,
    )


def incremental_mean(old_mean: float, count: int, value: float) -> float:
    """Mean of count values with old_mean, after adding one more value."""
    return (old_mean * count + value) / (count + 1)


def time_of_day(moment: datetime) -> WorkoutTime:
    """Bucket a timestamp: morning < 12h, afternoon < 18h, else evening."""
    if moment.hour < MORNING_END_HOUR:
        return "morning"
    if moment.hour < AFTERNOON_END_HOUR:
        return "afternoon"
    return "evening"


class WorkoutAnalyticsEngine:
    """
    Per-exercise patterns and user stats, with cheer selection on top.

    ``clock`` and ``rng`` are injectable so day arithmetic and template
    choice are deterministic under test.
    """

    def __init__(
        self,
        exercise_patterns: dict[str, ExercisePattern] | None = None,
        user_stats: UserStats | None = None,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self.exercise_patterns: dict[str, ExercisePattern] = dict(exercise_patterns or {})
        self.user_stats: UserStats = user_stats if user_stats is not None else UserStats()
        self._clock = clock
        self._rng = rng if rng is not None else random.Random()

    # ------------------------------------------------------------------
    # Session analysis
    # ------------------------------------------------------------------

    def analyze_session(self, session: WorkoutSession) -> None:
        """Fold a completed session into every exercise pattern, then user stats."""
        for exercise in session.exercises:
            self.update_exercise_pattern(exercise.exercise_type_id, exercise)
        self.update_user_stats(session)
        logger.debug(
            "Analyzed session %s: %d exercises, streak=%d",
            session.id or "<local>",
            len(session.exercises),
            self.user_stats.workout_streak,
        )

    def update_exercise_pattern(self, exercise_id: str, exercise: ExerciseEntry) -> None:
        """
        Update one exercise's pattern from this session's completed sets.

        Weight average ignores sets without weight (bodyweight work must not
        drag typical_weight toward zero, and the previous typical weight
        stands in when no set is weighted).  Reps average counts every
        completed set, including zero-rep ones.  average_rest_time is
        overwritten with the exercise's configured rest rather than averaged.
        """
        completed = exercise.completed_sets
        if not completed:
            return

        existing = self.exercise_patterns.get(exercise_id) or new_pattern(exercise_id)
        n = existing.workout_count

        weights = [s.weight for s in completed if s.weight]
        reps = [s.reps for s in completed]

        avg_weight = sum(weights) / len(weights) if weights else existing.typical_weight
        avg_reps = sum(reps) / len(reps)

        self.exercise_patterns[exercise_id] = replace(
            existing,
            average_sets_count=incremental_mean(existing.average_sets_count, n, len(completed)),
            typical_weight=incremental_mean(existing.typical_weight, n, avg_weight),
            typical_reps=incremental_mean(existing.typical_reps, n, avg_reps),
            last_workout_weight=avg_weight,
            personal_record=max([existing.personal_record, *weights]),
            total_volume=existing.total_volume + sum(s.volume for s in completed),
            workout_count=n + 1,
            average_rest_time=float(exercise.rest_time or existing.average_rest_time),
        )

    def update_user_stats(self, session: WorkoutSession) -> None:
        """
        Update streak, totals, mean duration and preferred time of day.

        Streak compares calendar days of the session and the previous
        workout: +1 for a one-day gap, reset to 1 for a longer gap,
        unchanged for the same day.
        """
        stats = self.user_stats
        last = stats.last_workout_date
        last_date = session.date
        preferred = time_of_day(session.start_time)

        if last is None:
            streak = 1
        else:
            gap = (session.date.date() - last.date()).days
            if gap == 1:
                streak = stats.workout_streak + 1
            elif gap > 1:
                streak = 1
            else:
                streak = stats.workout_streak
                if gap < 0:
                    # Back-filled older session: the most recent one still rules
                    last_date = last
                    preferred = stats.preferred_workout_time

        self.user_stats = replace(
            stats,
            last_workout_date=last_date,
            workout_streak=streak,
            total_workouts=stats.total_workouts + 1,
            average_workout_duration=incremental_mean(
                stats.average_workout_duration, stats.total_workouts, session.total_duration
            ),
            preferred_workout_time=preferred,
        )

    # ------------------------------------------------------------------
    # Smart cheers
    # ------------------------------------------------------------------

    def generate_cheer(
        self,
        exercise: ExerciseEntry | str,
        set_index: int,
        total_sets: int,
        current_weight: float | None = None,
        current_reps: int | None = None,
    ) -> PersonalizedCheer | None:
        """
        Pick the single most relevant cheer for the set about to start.

        Predicates are evaluated in a fixed order and every one that fires
        contributes a candidate; the highest priority wins, and equal
        priorities resolve to the earlier predicate.

        Args:
            exercise: ExerciseEntry or exercise id
            set_index: 0-based index of the current set
            total_sets: Number of sets planned for the exercise
            current_weight: Weight for the current set, if known
            current_reps: Reps for the current set, if known (unused by rules)

        Returns:
            PersonalizedCheer, or None if no predicate fires
        """
        exercise_id = exercise if isinstance(exercise, str) else exercise.exercise_type_id
        pattern = self.exercise_patterns.get(exercise_id)
        streak = self.user_stats.workout_streak
        rng = self._rng
        cheers: list[PersonalizedCheer] = []

        days_since = self.days_since_last_workout()
        if days_since > COMEBACK_THRESHOLD_DAYS and set_index == 0:
            cheers.append(make_cheer("comeback", rng, days=days_since))

        if current_weight and pattern is not None and current_weight > pattern.personal_record:
            cheers.append(
                make_cheer(
                    "newPR",
                    rng,
                    context={"weight": current_weight, "exercise": display_name(exercise_id)},
                    weight=f"{current_weight:g}",
                )
            )

        if current_weight and pattern is not None and current_weight > pattern.last_workout_weight:
            diff = current_weight - pattern.last_workout_weight
            cheers.append(
                make_cheer("heavierWeight", rng, context={"difference": diff}, diff=f"{diff:.1f}")
            )

        if set_index == 0:
            cheers.append(make_cheer("firstSet", rng))

        if set_index == total_sets - 1 and total_sets > 1:
            cheers.append(make_cheer("lastSet", rng))

        if pattern is not None and set_index == pattern.hardest_set_index:
            cheers.append(make_cheer("hardSet", rng))

        if streak >= CONSISTENCY_MIN_STREAK and set_index == 0:
            cheers.append(make_cheer("consistency", rng, streak=streak))

        return pick_highest_priority(cheers)

    # ------------------------------------------------------------------
    # Predictions and checks
    # ------------------------------------------------------------------

    def predict_rest_time(self, exercise_id: str, set_index: int) -> float:
        """Rest grows 10 s per set from the pattern's rest, capped at 180 s."""
        pattern = self.exercise_patterns.get(exercise_id)
        if pattern is None:
            return float(DEFAULT_REST_SECONDS)
        return min(pattern.average_rest_time + set_index * REST_INCREMENT_PER_SET, MAX_PREDICTED_REST)

    def predict_next_weight(self, exercise_id: str) -> float:
        pattern = self.exercise_patterns.get(exercise_id)
        return pattern.typical_weight if pattern is not None else 0.0

    def is_struggling(self, rest_time: float, exercise_id: str) -> bool:
        """True when observed rest exceeds the usual rest by more than 50%."""
        pattern = self.exercise_patterns.get(exercise_id)
        if pattern is None:
            return False
        return rest_time > pattern.average_rest_time * STRUGGLING_REST_FACTOR

    def days_since_last_workout(self) -> int:
        last = self.user_stats.last_workout_date
        if last is None:
            return NO_WORKOUT_SENTINEL_DAYS
        return abs(self._clock() - last).days

    def check_personal_record(self, exercise_id: str, weight: float) -> bool:
        """The first time an exercise is logged always counts as a record."""
        pattern = self.exercise_patterns.get(exercise_id)
        if pattern is None:
            return True
        return weight > pattern.personal_record

    def get_progress_message(self, exercise_id: str, weight: float) -> str:
        pattern = self.exercise_patterns.get(exercise_id)
        if pattern is None or pattern.workout_count < 2:
            return "Great start! 💪"

        diff = weight - pattern.last_workout_weight
        if diff > 0:
            return f"Up {diff:.1f}kg from last time. Real progress! 🚀"
        if diff < 0:
            return "Going lighter today. Focus on form 🎯"
        return "Steady as ever. Consistency wins 💯"
