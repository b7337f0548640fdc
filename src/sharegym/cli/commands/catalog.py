"""Catalog commands: exercise-id, catalog."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import UNKNOWN_BACKEND_ID
from ...core.exercises.registry import EXERCISE_CATALOG, display_name, exercises_in_category
from ...core.id_mapping import DEFAULT_MAPPER
from .. import views
from ..app import JsonOption, app


@app.command("exercise-id")
def exercise_id(
    value: Annotated[str, typer.Argument(help="Client exercise ID (bench-press) or backend number (1001)")],
    json_out: JsonOption = False,
) -> None:
    """
    Translate between client string IDs and backend numeric IDs.
    """
    if value.isdigit():
        backend_id = int(value)
        client_id = DEFAULT_MAPPER.to_client_id(backend_id)
    else:
        client_id = value
        backend_id = DEFAULT_MAPPER.to_backend_id(value)

    if json_out:
        print(json.dumps({"clientId": client_id, "backendId": backend_id}, indent=2))
        return

    if backend_id == UNKNOWN_BACKEND_ID or client_id == value == str(backend_id):
        views.print_warning(f"'{value}' is not in the exercise catalog")
    views.console.print(f"{client_id} [dim]<->[/dim] {backend_id}  [bold]{display_name(client_id)}[/bold]")


@app.command()
def catalog(
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Only show one category, e.g. chest"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise catalog with backend numeric IDs.
    """
    exercises = exercises_in_category(category) if category else list(EXERCISE_CATALOG)

    if json_out:
        print(json.dumps([
            {
                "id": ex.id,
                "backendId": DEFAULT_MAPPER.to_backend_id(ex.id),
                "name": ex.name,
                "category": ex.category,
                "muscleGroups": list(ex.muscle_groups),
            }
            for ex in exercises
        ], indent=2))
        return

    views.print_catalog(exercises)
