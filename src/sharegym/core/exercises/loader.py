"""
YAML → ExerciseType loader.

Loads the ordered exercise catalog from the bundled
``src/sharegym/exercises.yaml``.  The file is a YAML list; each item is a
flat mapping matching the ExerciseType schema.

File order is preserved exactly: numeric backend IDs are assigned from
the position of each entry within its category, so the list may only be
appended to.

Usage (internal, called by registry.py):
    from .loader import load_catalog
    catalog = load_catalog()   # list[ExerciseType]
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from .base import ExerciseType


def exercise_from_dict(d: dict) -> ExerciseType:
    """Convert a raw dict (from YAML) to an ExerciseType.

    Raises ValueError if ``id`` is absent or empty.
    """
    ex_id = d.get("id")
    if not ex_id:
        raise ValueError("ExerciseType missing field: id")

    category = d.get("category")
    muscle_groups = d.get("muscle_groups") or []

    return ExerciseType(
        id=str(ex_id),
        name=str(d.get("name") or ex_id),
        category=str(category) if category else None,
        muscle_groups=tuple(str(m) for m in muscle_groups),
        equipment=str(d["equipment"]) if d.get("equipment") else None,
    )


def get_bundled_catalog_path() -> Path:
    """Return the path to the bundled exercises.yaml."""
    # loader.py lives at src/sharegym/core/exercises/loader.py
    # three levels up → src/sharegym/
    return Path(__file__).parent.parent.parent / "exercises.yaml"


def load_catalog(path: str | Path | None = None) -> list[ExerciseType]:
    """Return the catalog as a list of ExerciseType, in file order.

    Entries that cannot be converted are skipped with a warning so one
    bad line does not take the whole catalog down.  Duplicate ids only
    warn; they stay in the list because position decides numeric IDs.

    Raises:
        FileNotFoundError: If the catalog file does not exist
        ValueError: If the file is not a YAML list
    """
    catalog_path = Path(path) if path is not None else get_bundled_catalog_path()

    with open(catalog_path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{catalog_path}: expected a list of exercises")

    result: list[ExerciseType] = []
    seen: set[str] = set()
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            warnings.warn(
                f"sharegym: skipping catalog entry #{position}: not a mapping",
                stacklevel=2,
            )
            continue
        try:
            ex = exercise_from_dict(item)
        except ValueError as exc:
            warnings.warn(
                f"sharegym: skipping catalog entry #{position}: {exc}",
                stacklevel=2,
            )
            continue
        if ex.id in seen:
            # Kept: the entry still occupies a numeric slot in its category
            warnings.warn(
                f"sharegym: duplicate catalog id '{ex.id}' at #{position}",
                stacklevel=2,
            )
        seen.add(ex.id)
        result.append(ex)

    return result
