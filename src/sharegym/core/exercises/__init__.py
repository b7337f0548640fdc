"""
Exercise catalog for sharegym.

The catalog is an ordered list of ExerciseType objects loaded from the
bundled exercises.yaml.
"""

from .base import ExerciseType
from .registry import EXERCISE_CATALOG, EXERCISE_REGISTRY, display_name, get_exercise

__all__ = [
    "ExerciseType",
    "EXERCISE_CATALOG",
    "EXERCISE_REGISTRY",
    "display_name",
    "get_exercise",
]
