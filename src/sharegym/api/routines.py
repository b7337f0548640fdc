"""
Saved routine endpoints.

Routines keep client string exercise IDs; ``createdAt`` and ``lastUsed``
come back as datetimes.  Every mutation busts cached routine lists,
including the per-user ``/users/{id}/routines`` entry.
"""

from typing import Any

from ..io.serializers import parse_datetime
from .client import ApiClient
from .utils import unwrap_array_response, unwrap_response

ROUTINES_CACHE_PATTERN = "/routines"


def _hydrate(routine: Any) -> Any:
    if not isinstance(routine, dict):
        return routine
    out = dict(routine)
    for key in ("createdAt", "lastUsed"):
        if out.get(key):
            out[key] = parse_datetime(out[key], key)
    return out


async def get_routines(api: ApiClient, user_id: str) -> list[dict[str, Any]]:
    """GET /users/{id}/routines."""
    data = await api.get(f"/users/{user_id}/routines")
    return [_hydrate(r) for r in unwrap_array_response(data)]


async def create_routine(
    api: ApiClient,
    user_id: str,
    name: str,
    exercises: list[dict[str, Any]],
) -> dict[str, Any] | None:
    """
    POST /routines.

    Each exercise is sent with ``orderIndex`` set to its position in
    ``exercises``, overriding any index the caller supplied.
    """
    payload = {
        "userId": user_id,
        "name": name,
        "exercises": [{**ex, "orderIndex": i} for i, ex in enumerate(exercises)],
    }
    data = unwrap_response(await api.post("/routines", payload))
    api.invalidate_cache(ROUTINES_CACHE_PATTERN)
    return _hydrate(data)


async def update_routine(api: ApiClient, routine_id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
    data = unwrap_response(await api.patch(f"/routines/{routine_id}", updates))
    api.invalidate_cache(ROUTINES_CACHE_PATTERN)
    return _hydrate(data)


async def delete_routine(api: ApiClient, routine_id: str) -> None:
    await api.delete(f"/routines/{routine_id}")
    api.invalidate_cache(ROUTINES_CACHE_PATTERN)


async def toggle_routine_favorite(api: ApiClient, routine_id: str, is_favorite: bool) -> dict[str, Any] | None:
    """PATCH /routines/{id} with only the ``isFavorite`` flag."""
    return await update_routine(api, routine_id, {"isFavorite": is_favorite})
