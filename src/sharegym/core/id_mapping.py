"""
Exercise ID mapping: client string IDs ↔ backend numeric IDs.

The backend identifies exercises by number.  Numbers are partitioned by
category (chest 1000, back 2000, ..., stretching 9300) and assigned in
catalog order:

    numeric_id = CATEGORY_BASE[category] + index_within_category   (1-based)

Because assignment follows catalog order, reordering the catalog changes
every numeric ID.  The catalog is append-only.

Nothing in this module raises for unknown identifiers: an unknown string
maps to 0 and an unknown number maps back to its decimal string, so a
save/load never fails because the catalog drifted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from .config import (
    CATEGORY_BASE,
    DEFAULT_CATEGORY,
    DEFAULT_CATEGORY_BASE,
    UNKNOWN_BACKEND_ID,
)
from .exercises.base import ExerciseType
from .models import ExerciseEntry, WorkoutSession

DEFAULT_WORKOUT_TITLE = "Workout"

# A backend exercise reference is either a numeric backend ID or an
# already-resolved client string ID.
ExerciseRef = int | str


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class ExerciseIdMapper:
    """Immutable bidirectional table built once from the catalog."""

    forward: Mapping[str, int] = field(default_factory=dict)
    reverse: Mapping[int, str] = field(default_factory=dict)

    @classmethod
    def build(cls, catalog: Iterable[ExerciseType]) -> "ExerciseIdMapper":
        """
        Build the mapping tables in a single pass over the catalog.

        A duplicated id still advances its category counter, so later
        entries keep their numbers.  The forward table takes the last
        occurrence; every number reverses to its id.

        Args:
            catalog: Exercises in catalog order

        Returns:
            ExerciseIdMapper with forward and reverse tables
        """
        forward: dict[str, int] = {}
        reverse: dict[int, str] = {}
        category_index: dict[str, int] = {}

        for ex in catalog:
            category = ex.category or DEFAULT_CATEGORY
            base = CATEGORY_BASE.get(category, DEFAULT_CATEGORY_BASE)
            idx = category_index.get(category, 0) + 1
            category_index[category] = idx
            numeric_id = base + idx
            forward[ex.id] = numeric_id
            reverse[numeric_id] = ex.id

        return cls(forward=forward, reverse=reverse)

    def to_backend_id(self, client_id: str) -> int:
        """Client string ID → backend numeric ID (0 if unknown)."""
        return self.forward.get(client_id, UNKNOWN_BACKEND_ID)

    def to_client_id(self, backend_id: int) -> str:
        """Backend numeric ID → client string ID (str(backend_id) if unknown)."""
        return self.reverse.get(backend_id, str(backend_id))

    def resolve_exercise_ref(self, ref: ExerciseRef | None) -> str:
        """
        Resolve a backend exercise reference to a client string ID.

        Numbers are translated through the reverse table; strings are
        assumed to be client IDs already and pass through unchanged.
        """
        if ref is None:
            return ""
        if isinstance(ref, int) and not isinstance(ref, bool):
            return self.to_client_id(ref)
        return str(ref)

    # ------------------------------------------------------------------
    # Whole-session translation
    # ------------------------------------------------------------------

    def map_session_to_backend(
        self,
        session: WorkoutSession | Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Convert a session into the backend's CreateWorkoutRequest shape.

        Accepts a WorkoutSession or a client-shaped (camelCase) dict.
        Missing weight/reps default to 0 and missing completion flags to
        False.  ``now`` is used as endTime when the session has none.
        """
        if isinstance(session, WorkoutSession):
            return self._dataclass_to_backend(session, now)

        exercises = session.get("exercises") or []
        end_time = session.get("endTime") or (now or datetime.now()).isoformat()
        return {
            "title": session.get("name") or session.get("title") or DEFAULT_WORKOUT_TITLE,
            "note": session.get("note") or session.get("notes") or "",
            "startTime": _iso(session.get("startTime")),
            "endTime": _iso(end_time),
            "duration": session.get("duration") or session.get("totalDuration") or 0,
            "exercises": [
                {
                    "exerciseId": self.to_backend_id(str(ex.get("exerciseTypeId") or "")),
                    "orderIndex": ex.get("orderIndex") or 0,
                    "sets": [
                        {
                            "orderIndex": idx,
                            "weight": s.get("weight") if s.get("weight") is not None else 0,
                            "reps": s.get("reps") if s.get("reps") is not None else 0,
                            "distance": s.get("distance"),
                            "duration": s.get("duration"),
                            "isCompleted": bool(s.get("isCompleted", s.get("completed", False))),
                        }
                        for idx, s in enumerate(ex.get("sets") or [], 1)
                    ],
                }
                for ex in exercises
            ],
        }

    def _dataclass_to_backend(self, session: WorkoutSession, now: datetime | None) -> dict[str, Any]:
        end_time = session.end_time or now or datetime.now()
        return {
            "title": session.title or DEFAULT_WORKOUT_TITLE,
            "note": session.notes or "",
            "startTime": session.start_time.isoformat(),
            "endTime": end_time.isoformat(),
            "duration": session.total_duration,
            "exercises": [self._exercise_to_backend(ex) for ex in session.exercises],
        }

    def _exercise_to_backend(self, exercise: ExerciseEntry) -> dict[str, Any]:
        return {
            "exerciseId": self.to_backend_id(exercise.exercise_type_id),
            "orderIndex": exercise.order_index,
            "sets": [
                {
                    "orderIndex": idx,
                    "weight": s.weight or 0,
                    "reps": s.reps,
                    "distance": s.distance,
                    "duration": s.duration,
                    "isCompleted": s.completed,
                }
                for idx, s in enumerate(exercise.sets, 1)
            ],
        }

    def map_session_from_backend(self, workout: Mapping[str, Any]) -> dict[str, Any]:
        """
        Convert a backend WorkoutResponse into the client session shape.

        Numeric exercise IDs are translated back to client IDs; string IDs
        pass through, so mixed-shape responses are tolerated.
        """
        exercises = workout.get("exercises") or []
        title = workout.get("title") or workout.get("name") or ""
        start = workout.get("startTime") or workout.get("createdAt")

        mapped_exercises = []
        for ex in exercises:
            ref = ex.get("exerciseId")
            if ref is None and isinstance(ex.get("exercise"), Mapping):
                ref = ex["exercise"].get("id")
            mapped_exercises.append(
                {
                    "id": str(ex.get("id") or ""),
                    "exerciseTypeId": self.resolve_exercise_ref(ref),
                    "orderIndex": ex.get("orderIndex") or 0,
                    "sets": [
                        {
                            "id": str(s.get("id") or ""),
                            "weight": s.get("weight") or 0,
                            "reps": s.get("reps") or 0,
                            "distance": s.get("distance"),
                            "duration": s.get("duration"),
                            "isCompleted": bool(s.get("isCompleted", False)),
                            "restTime": s.get("restTime"),
                        }
                        for s in ex.get("sets") or []
                    ],
                }
            )

        return {
            "id": str(workout.get("id") or ""),
            "userId": str(workout.get("userId") or ""),
            "name": title,
            "title": title,
            "date": start or datetime.now().isoformat(),
            "startTime": start,
            "endTime": workout.get("endTime"),
            "duration": workout.get("duration") or 0,
            "note": workout.get("note") or "",
            "totalVolume": workout.get("totalVolume") or 0,
            "exerciseCount": len(exercises),
            "exercises": mapped_exercises,
        }


def _default_mapper() -> ExerciseIdMapper:
    from .exercises.registry import EXERCISE_CATALOG

    return ExerciseIdMapper.build(EXERCISE_CATALOG)


DEFAULT_MAPPER: ExerciseIdMapper = _default_mapper()


def to_backend_id(client_id: str) -> int:
    """Client string ID → backend numeric ID using the bundled catalog."""
    return DEFAULT_MAPPER.to_backend_id(client_id)


def to_client_id(backend_id: int) -> str:
    """Backend numeric ID → client string ID using the bundled catalog."""
    return DEFAULT_MAPPER.to_client_id(backend_id)
