"""
Exercise registry.

The bundled catalog is loaded here once at import time.  Use
get_exercise() to look up an ExerciseType by its string id.

If the catalog cannot be loaded a RuntimeError is raised: the ID mapping
and display names depend on it, so the application cannot start without
it.
"""

from ..config import DEFAULT_CATEGORY
from .base import ExerciseType

FALLBACK_DISPLAY_NAME = "Exercise"


def _build_catalog() -> list[ExerciseType]:
    from .loader import load_catalog

    loaded = load_catalog()
    if not loaded:
        raise RuntimeError(
            "sharegym: no exercise definitions could be loaded. "
            "Check that src/sharegym/exercises.yaml is present and valid."
        )
    return loaded


EXERCISE_CATALOG: list[ExerciseType] = _build_catalog()
EXERCISE_REGISTRY: dict[str, ExerciseType] = {}
for _ex in EXERCISE_CATALOG:
    # First definition of a duplicated id wins for lookups
    EXERCISE_REGISTRY.setdefault(_ex.id, _ex)
del _ex


def get_exercise(exercise_id: str) -> ExerciseType | None:
    """Return the ExerciseType for exercise_id, or None if unknown."""
    return EXERCISE_REGISTRY.get(exercise_id)


def display_name(exercise_id: str) -> str:
    """Human-readable name for exercise_id, with a generic fallback."""
    ex = EXERCISE_REGISTRY.get(exercise_id)
    return ex.name if ex is not None else FALLBACK_DISPLAY_NAME


def exercises_in_category(category: str) -> list[ExerciseType]:
    """Catalog entries of one category, in catalog order, without duplicate ids."""
    return [
        ex for ex in EXERCISE_CATALOG
        if EXERCISE_REGISTRY[ex.id] is ex and (ex.category or DEFAULT_CATEGORY) == category
    ]
