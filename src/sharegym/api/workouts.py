"""
Workout endpoints.

Sessions are translated with the exercise ID mapper on the way out and
on the way back, so callers only ever see client string IDs.
"""

from typing import Any

from ..core.id_mapping import DEFAULT_MAPPER, ExerciseIdMapper
from ..core.models import WorkoutSession
from .client import ApiClient
from .utils import unwrap_array_response, unwrap_response


async def get_workout_history(
    api: ApiClient,
    user_id: str,
    mapper: ExerciseIdMapper = DEFAULT_MAPPER,
) -> list[dict[str, Any]]:
    """GET /users/{id}/workouts, mapped to client-shaped session dicts."""
    data = await api.get(f"/users/{user_id}/workouts")
    return [mapper.map_session_from_backend(w) for w in unwrap_array_response(data)]


async def get_last_workout(
    api: ApiClient,
    user_id: str,
    mapper: ExerciseIdMapper = DEFAULT_MAPPER,
) -> dict[str, Any] | None:
    data = unwrap_response(await api.get(f"/users/{user_id}/workouts/last"))
    if not isinstance(data, dict):
        return None
    return mapper.map_session_from_backend(data)


async def save_workout(
    api: ApiClient,
    session: WorkoutSession,
    mapper: ExerciseIdMapper = DEFAULT_MAPPER,
) -> dict[str, Any] | None:
    """
    POST /workouts with the session in backend shape.

    Busts cached workout lists so the next history read is fresh.

    Returns:
        The saved workout in client shape, or None if the body was empty
    """
    payload = mapper.map_session_to_backend(session)
    data = unwrap_response(await api.post("/workouts", payload))
    api.invalidate_cache("/workouts")
    if not isinstance(data, dict):
        return None
    return mapper.map_session_from_backend(data)
