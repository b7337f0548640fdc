"""
Data models for sharegym.

Core dataclasses for logged workouts, the per-exercise statistical
profile (pattern), user-level stats, and the ephemeral cheer shown to
the user during a set.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

CheerTrigger = Literal[
    "firstSet",
    "lastSet",
    "hardSet",
    "newPR",
    "heavierWeight",
    "longRest",
    "struggling",
    "comeback",
    "consistency",
    "volumeIncrease",
]
WorkoutTime = Literal["morning", "afternoon", "evening"]


@dataclass
class WorkoutSet:
    """
    A single set of one exercise.

    Strength sets use reps + weight; cardio sets use distance/duration.
    """

    reps: int = 0
    weight: float | None = None  # kg
    distance: float | None = None  # km
    duration: int | None = None  # seconds
    completed: bool = False
    order_index: int = 0
    rest_time: int | None = None  # seconds
    id: str = ""

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.distance is not None and self.distance < 0:
            raise ValueError("distance must be non-negative")
        if self.duration is not None and self.duration < 0:
            raise ValueError("duration must be non-negative")

    @property
    def volume(self) -> float:
        """weight x reps (bodyweight sets contribute 0)."""
        return (self.weight or 0.0) * self.reps


@dataclass
class ExerciseEntry:
    """One exercise within a session, with its sets and configured rest."""

    exercise_type_id: str
    sets: list[WorkoutSet] = field(default_factory=list)
    rest_time: int = 0  # configured rest between sets, seconds
    order_index: int = 0
    notes: str | None = None
    id: str = ""

    def __post_init__(self) -> None:
        if self.rest_time < 0:
            raise ValueError("rest_time must be non-negative")

    @property
    def completed_sets(self) -> list[WorkoutSet]:
        return [s for s in self.sets if s.completed]


@dataclass
class WorkoutSession:
    """A completed workout: one or more exercises, each with sets."""

    date: datetime
    start_time: datetime
    exercises: list[ExerciseEntry] = field(default_factory=list)
    end_time: datetime | None = None
    total_duration: int = 0  # seconds
    id: str = ""
    user_id: str = ""
    title: str = ""
    notes: str | None = None
    is_public: bool = False

    def __post_init__(self) -> None:
        """Validate session data."""
        if self.total_duration < 0:
            raise ValueError("total_duration must be non-negative")
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")


@dataclass
class ExercisePattern:
    """
    Rolling statistical profile of one exercise.

    Created lazily with the seed values below on the first session in
    which the exercise has a completed set; updated once per session.
    """

    exercise_id: str
    average_rest_time: float = 90.0
    average_sets_count: float = 3.0
    typical_weight: float = 0.0
    typical_reps: float = 0.0
    hardest_set_index: int = 2
    last_workout_weight: float = 0.0
    personal_record: float = 0.0
    total_volume: float = 0.0
    workout_count: int = 0

    def __post_init__(self) -> None:
        if self.workout_count < 0:
            raise ValueError("workout_count must be non-negative")


@dataclass
class UserStats:
    """Singleton per-user workout statistics."""

    last_workout_date: datetime | None = None
    workout_streak: int = 0
    total_workouts: int = 0
    average_workout_duration: float = 0.0
    preferred_workout_time: WorkoutTime = "evening"
    strongest_exercises: list[str] = field(default_factory=list)
    weakest_exercises: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.preferred_workout_time not in ("morning", "afternoon", "evening"):
            raise ValueError(
                f"Invalid preferred_workout_time: {self.preferred_workout_time!r}"
            )


@dataclass
class PersonalizedCheer:
    """A motivational message for the current set. Never persisted."""

    trigger: CheerTrigger
    message: str
    emoji: str
    priority: int
    context: dict[str, Any] = field(default_factory=dict)
