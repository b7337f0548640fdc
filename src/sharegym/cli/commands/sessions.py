"""Session commands: log-session, sync, and helpers."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer

from ...api.client import ApiClient
from ...api.errors import ApiError
from ...api.workouts import save_workout
from ...core.analytics import WorkoutAnalyticsEngine
from ...core.models import WorkoutSession
from ...core.settings import Settings
from ...io.analytics_store import AnalyticsStore
from ...io.serializers import ValidationError, load_session_file, pattern_to_dict
from ...io.storage import TokenStore
from .. import views
from ..app import DataDirOption, JsonOption, app, get_settings

SessionFileArg = Annotated[
    Path,
    typer.Argument(help="Session JSON file (client shape: date, startTime, exercises)"),
]


def _load_session_or_exit(session_file: Path) -> WorkoutSession:
    try:
        return load_session_file(session_file)
    except FileNotFoundError:
        views.print_error(f"Session file not found: {session_file}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _analyze_and_save(store: AnalyticsStore, session: WorkoutSession) -> WorkoutAnalyticsEngine:
    """Fold one session into the stored engine state and write it back."""
    try:
        engine = store.load_engine()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    engine.analyze_session(session)
    store.save_engine(engine)
    return engine


def _print_session_result(engine: WorkoutAnalyticsEngine, session: WorkoutSession, json_out: bool) -> None:
    touched = {
        ex.exercise_type_id: engine.exercise_patterns[ex.exercise_type_id]
        for ex in session.exercises
        if ex.exercise_type_id in engine.exercise_patterns
    }
    if json_out:
        print(json.dumps({
            "exercisePatterns": {key: pattern_to_dict(p) for key, p in touched.items()},
            "workoutStreak": engine.user_stats.workout_streak,
            "totalWorkouts": engine.user_stats.total_workouts,
        }, indent=2))
        return

    views.print_patterns(touched)
    views.print_info(
        f"Workouts: {engine.user_stats.total_workouts}, "
        f"streak: {engine.user_stats.workout_streak}"
    )


@app.command("log-session")
def log_session(
    session_file: SessionFileArg,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Analyze a completed session and persist the updated patterns.
    """
    settings = get_settings(data_dir)
    session = _load_session_or_exit(session_file)

    engine = _analyze_and_save(AnalyticsStore(settings.data_dir), session)

    if not json_out:
        views.print_success(f"Session logged: {session.start_time:%Y-%m-%d %H:%M}")
    _print_session_result(engine, session, json_out)


async def _push_session(settings: Settings, session: WorkoutSession) -> dict[str, Any] | None:
    async with ApiClient(settings, TokenStore.in_dir(settings.data_dir)) as api:
        return await save_workout(api, session)


@app.command()
def sync(
    session_file: SessionFileArg,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Save a session to the backend and analyze it locally.

    If the backend is unreachable or not configured, the session is still
    analyzed and stored locally.
    """
    settings = get_settings(data_dir)
    session = _load_session_or_exit(session_file)

    saved: dict[str, Any] | None = None
    try:
        saved = asyncio.run(_push_session(settings, session))
    except ApiError as e:
        views.print_warning(f"Backend save failed ({e}); keeping the session locally only.")
    else:
        if not json_out:
            saved_id = (saved or {}).get("id") or "?"
            views.print_success(f"Saved to backend (id {saved_id})")

    engine = _analyze_and_save(AnalyticsStore(settings.data_dir), session)
    _print_session_result(engine, session, json_out)
