"""Authentication endpoints."""

from typing import Any

from .client import ApiClient
from .utils import unwrap_response


def _store_tokens(api: ApiClient, response: Any) -> None:
    payload = unwrap_response(response)
    if not isinstance(payload, dict):
        return
    token = payload.get("token") or payload.get("accessToken")
    if token:
        api.tokens.set_tokens(token, payload.get("refreshToken"))


async def sign_in(api: ApiClient, email: str, password: str) -> dict[str, Any]:
    """POST /auth/login and persist the returned tokens."""
    response = await api.post(
        "/auth/login",
        {"email": email, "password": password},
        skip_auth=True,
    )
    _store_tokens(api, response)
    return unwrap_response(response)


async def sign_up(api: ApiClient, email: str, password: str, username: str) -> dict[str, Any]:
    """POST /auth/register and persist the returned tokens."""
    response = await api.post(
        "/auth/register",
        {"email": email, "password": password, "username": username},
        skip_auth=True,
    )
    _store_tokens(api, response)
    return unwrap_response(response)


async def sign_out(api: ApiClient) -> None:
    """Tell the server, then drop local tokens and cached responses regardless."""
    try:
        await api.post("/auth/logout", skip_token_refresh=True)
    finally:
        api.tokens.set_tokens(None, None)
        api.clear_cache()


async def get_profile(api: ApiClient) -> dict[str, Any]:
    return unwrap_response(await api.get("/auth/me"))


async def update_profile(api: ApiClient, updates: dict[str, Any]) -> dict[str, Any]:
    response = await api.patch("/auth/me", updates)
    api.invalidate_cache("/auth/me")
    return unwrap_response(response)
