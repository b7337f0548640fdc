"""
JSON serialization for workout and analytics models.

Handles conversion between dataclasses and the JSON-compatible dicts the
app persists and exchanges.  Dicts use the client's camelCase field names
and ISO-8601 date strings; datetimes are re-hydrated on load.
"""

import json
from datetime import datetime
from typing import Any

from ..core.config import DEFAULT_WORKOUT_TIME
from ..core.models import (
    ExerciseEntry,
    ExercisePattern,
    UserStats,
    WorkoutSession,
    WorkoutSet,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def parse_datetime(value: Any, name: str) -> datetime:
    """
    Parse an ISO-8601 string (or pass through a datetime).

    Aware timestamps (e.g. a trailing ``Z`` from the backend) are converted
    to local naive time so all datetimes in the app compare with each other.

    Raises:
        ValidationError: If value is not a valid ISO timestamp
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        raw = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid {name}: {value!r}. Expected ISO-8601") from e
    else:
        raise ValidationError(f"Missing or invalid {name}: {value!r}")

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _optional_datetime(value: Any, name: str) -> datetime | None:
    return None if value in (None, "") else parse_datetime(value, name)


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def workout_set_to_dict(s: WorkoutSet) -> dict[str, Any]:
    return {
        "id": s.id,
        "reps": s.reps,
        "weight": s.weight,
        "distance": s.distance,
        "duration": s.duration,
        "completed": s.completed,
        "orderIndex": s.order_index,
        "restTime": s.rest_time,
    }


def dict_to_workout_set(data: dict[str, Any]) -> WorkoutSet:
    """
    Convert dict to WorkoutSet.

    Accepts both the client ``completed`` flag and the backend
    ``isCompleted`` flag.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return WorkoutSet(
            id=str(data.get("id") or ""),
            reps=int(data.get("reps") or 0),
            weight=_optional_float(data.get("weight")),
            distance=_optional_float(data.get("distance")),
            duration=_optional_int(data.get("duration")),
            completed=bool(data.get("completed", data.get("isCompleted", False))),
            order_index=int(data.get("orderIndex") or 0),
            rest_time=_optional_int(data.get("restTime")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set: {e}") from e


def exercise_entry_to_dict(ex: ExerciseEntry) -> dict[str, Any]:
    return {
        "id": ex.id,
        "exerciseTypeId": ex.exercise_type_id,
        "sets": [workout_set_to_dict(s) for s in ex.sets],
        "restTime": ex.rest_time,
        "orderIndex": ex.order_index,
        "notes": ex.notes,
    }


def dict_to_exercise_entry(data: dict[str, Any]) -> ExerciseEntry:
    """
    Convert dict to ExerciseEntry.

    Raises:
        ValidationError: If exerciseTypeId is missing or data is invalid
    """
    exercise_type_id = data.get("exerciseTypeId")
    if not exercise_type_id:
        raise ValidationError("Exercise is missing exerciseTypeId")
    try:
        return ExerciseEntry(
            id=str(data.get("id") or ""),
            exercise_type_id=str(exercise_type_id),
            sets=[dict_to_workout_set(s) for s in data.get("sets") or []],
            rest_time=int(data.get("restTime") or 0),
            order_index=int(data.get("orderIndex") or 0),
            notes=data.get("notes"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise {exercise_type_id!r}: {e}") from e


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "userId": session.user_id,
        "title": session.title,
        "date": session.date.isoformat(),
        "startTime": session.start_time.isoformat(),
        "endTime": session.end_time.isoformat() if session.end_time else None,
        "exercises": [exercise_entry_to_dict(ex) for ex in session.exercises],
        "totalDuration": session.total_duration,
        "notes": session.notes,
        "isPublic": session.is_public,
    }


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert a client-shaped dict to WorkoutSession.

    ``date`` falls back to ``startTime`` and vice versa; ``totalDuration``
    falls back to the backend's ``duration``.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Session must be a JSON object")

    start_raw = data.get("startTime") or data.get("date")
    date_raw = data.get("date") or data.get("startTime")
    start_time = parse_datetime(start_raw, "startTime")
    date = parse_datetime(date_raw, "date")

    try:
        return WorkoutSession(
            id=str(data.get("id") or ""),
            user_id=str(data.get("userId") or ""),
            title=str(data.get("title") or data.get("name") or ""),
            date=date,
            start_time=start_time,
            end_time=_optional_datetime(data.get("endTime"), "endTime"),
            exercises=[dict_to_exercise_entry(ex) for ex in data.get("exercises") or []],
            total_duration=int(data.get("totalDuration") or data.get("duration") or 0),
            notes=data.get("notes") or data.get("note"),
            is_public=bool(data.get("isPublic", False)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid session: {e}") from e


def load_session_file(path) -> WorkoutSession:
    """
    Read one session from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not a valid session
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
    return dict_to_session(data)


# ---------------------------------------------------------------------------
# Analytics state
# ---------------------------------------------------------------------------


def pattern_to_dict(p: ExercisePattern) -> dict[str, Any]:
    return {
        "exerciseTypeId": p.exercise_id,
        "averageRestTime": p.average_rest_time,
        "averageSetsCount": p.average_sets_count,
        "typicalWeight": p.typical_weight,
        "typicalReps": p.typical_reps,
        "hardestSetIndex": p.hardest_set_index,
        "lastWorkoutWeight": p.last_workout_weight,
        "personalRecord": p.personal_record,
        "totalVolume": p.total_volume,
        "workoutCount": p.workout_count,
    }


def dict_to_pattern(data: dict[str, Any]) -> ExercisePattern:
    """
    Convert dict to ExercisePattern.

    Raises:
        ValidationError: If exerciseTypeId is missing or a field is invalid
    """
    exercise_id = data.get("exerciseTypeId")
    if not exercise_id:
        raise ValidationError("Pattern is missing exerciseTypeId")
    try:
        return ExercisePattern(
            exercise_id=str(exercise_id),
            average_rest_time=float(data.get("averageRestTime", 90)),
            average_sets_count=float(data.get("averageSetsCount", 3)),
            typical_weight=float(data.get("typicalWeight", 0)),
            typical_reps=float(data.get("typicalReps", 0)),
            hardest_set_index=int(data.get("hardestSetIndex", 2)),
            last_workout_weight=float(data.get("lastWorkoutWeight", 0)),
            personal_record=float(data.get("personalRecord", 0)),
            total_volume=float(data.get("totalVolume", 0)),
            workout_count=int(data.get("workoutCount", 0)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid pattern {exercise_id!r}: {e}") from e


def user_stats_to_dict(stats: UserStats) -> dict[str, Any]:
    return {
        "lastWorkoutDate": stats.last_workout_date.isoformat() if stats.last_workout_date else None,
        "workoutStreak": stats.workout_streak,
        "totalWorkouts": stats.total_workouts,
        "averageWorkoutDuration": stats.average_workout_duration,
        "preferredWorkoutTime": stats.preferred_workout_time,
        "strongestExercises": list(stats.strongest_exercises),
        "weakestExercises": list(stats.weakest_exercises),
    }


def dict_to_user_stats(data: dict[str, Any]) -> UserStats:
    """
    Convert dict to UserStats, re-hydrating lastWorkoutDate.

    Raises:
        ValidationError: If a field is invalid
    """
    try:
        return UserStats(
            last_workout_date=_optional_datetime(data.get("lastWorkoutDate"), "lastWorkoutDate"),
            workout_streak=int(data.get("workoutStreak", 0)),
            total_workouts=int(data.get("totalWorkouts", 0)),
            average_workout_duration=float(data.get("averageWorkoutDuration", 0)),
            preferred_workout_time=data.get("preferredWorkoutTime", DEFAULT_WORKOUT_TIME),
            strongest_exercises=list(data.get("strongestExercises") or []),
            weakest_exercises=list(data.get("weakestExercises") or []),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid user stats: {e}") from e
