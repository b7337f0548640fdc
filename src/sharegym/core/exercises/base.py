"""
Base type for catalog entries.

ExerciseType describes one exercise the app knows about.  The catalog is
an ordered list of these; its order is part of the backend ID contract.
"""

from dataclasses import dataclass, field

ExerciseCategory = str  # "chest" | "back" | ... | "stretching"


@dataclass(frozen=True)
class ExerciseType:
    """One entry of the exercise catalog."""

    id: str                        # e.g. "bench-press"
    name: str                      # e.g. "Bench Press"
    category: ExerciseCategory | None  # None is mapped as "bodyweight"
    muscle_groups: tuple[str, ...] = field(default_factory=tuple)
    equipment: str | None = None
