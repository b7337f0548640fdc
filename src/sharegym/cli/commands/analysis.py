"""Analysis commands: cheer, patterns, stats, predict."""

import json
from typing import Annotated, Optional

import typer

from ...core.analytics import WorkoutAnalyticsEngine
from ...core.exercises.registry import display_name, get_exercise
from ...io.analytics_store import AnalyticsStore
from ...io.serializers import ValidationError, pattern_to_dict, user_stats_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store

ExerciseArg = Annotated[str, typer.Argument(help="Exercise ID, e.g. bench-press")]


def _load_engine_or_exit(store: AnalyticsStore) -> WorkoutAnalyticsEngine:
    try:
        return store.load_engine()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _warn_unknown(exercise_id: str) -> None:
    if get_exercise(exercise_id) is None:
        views.print_warning(f"'{exercise_id}' is not in the exercise catalog")


@app.command()
def cheer(
    exercise_id: ExerciseArg,
    set_index: Annotated[
        int,
        typer.Option("--set-index", "-s", min=0, help="0-based index of the set about to start"),
    ] = 0,
    total_sets: Annotated[
        int,
        typer.Option("--total-sets", "-n", min=1, help="Number of sets planned"),
    ] = 3,
    weight: Annotated[
        Optional[float],
        typer.Option("--weight", "-w", help="Weight for this set (kg)"),
    ] = None,
    reps: Annotated[
        Optional[int],
        typer.Option("--reps", "-r", help="Reps for this set"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the most relevant cheer for the set about to start.
    """
    engine = _load_engine_or_exit(get_store(data_dir))
    result = engine.generate_cheer(
        exercise_id,
        set_index,
        total_sets,
        current_weight=weight,
        current_reps=reps,
    )

    if json_out:
        print(json.dumps(None if result is None else {
            "trigger": result.trigger,
            "message": result.message,
            "emoji": result.emoji,
            "priority": result.priority,
            "context": result.context,
        }, indent=2))
        return

    views.print_cheer(result)
    if weight:
        views.console.print(f"[dim]{engine.get_progress_message(exercise_id, weight)}[/dim]")


@app.command()
def patterns(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show learned per-exercise patterns.
    """
    engine = _load_engine_or_exit(get_store(data_dir))

    if json_out:
        print(json.dumps({
            key: pattern_to_dict(p) for key, p in sorted(engine.exercise_patterns.items())
        }, indent=2))
        return

    views.print_patterns(engine.exercise_patterns)


@app.command()
def stats(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show user statistics: streak, totals, preferred workout time.
    """
    engine = _load_engine_or_exit(get_store(data_dir))
    days_since = engine.days_since_last_workout()

    if json_out:
        payload = user_stats_to_dict(engine.user_stats)
        payload["daysSinceLastWorkout"] = days_since
        print(json.dumps(payload, indent=2))
        return

    views.print_user_stats(engine.user_stats, days_since)


@app.command()
def predict(
    exercise_id: ExerciseArg,
    set_index: Annotated[
        int,
        typer.Option("--set-index", "-s", min=0, help="0-based set index for the rest prediction"),
    ] = 0,
    rest: Annotated[
        Optional[float],
        typer.Option("--rest", help="Observed rest in seconds; reports whether it looks like a struggle"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Predict the next working weight and the rest before a set.
    """
    engine = _load_engine_or_exit(get_store(data_dir))

    next_weight = engine.predict_next_weight(exercise_id)
    rest_seconds = engine.predict_rest_time(exercise_id, set_index)
    struggling = engine.is_struggling(rest, exercise_id) if rest is not None else None

    if json_out:
        print(json.dumps({
            "exerciseId": exercise_id,
            "nextWeight": next_weight,
            "restSeconds": rest_seconds,
            "struggling": struggling,
        }, indent=2))
        return

    _warn_unknown(exercise_id)
    views.console.print(f"[bold]{display_name(exercise_id)}[/bold] [dim]({exercise_id})[/dim]")
    views.console.print(f"  Next weight: [cyan]{next_weight:g} kg[/cyan]")
    views.console.print(f"  Rest before set {set_index + 1}: [cyan]{rest_seconds:.0f}s[/cyan]")
    if struggling is not None:
        label = "[red]yes[/red]" if struggling else "[green]no[/green]"
        views.console.print(f"  Struggling at {rest:.0f}s rest: {label}")
