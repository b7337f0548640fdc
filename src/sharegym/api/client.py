"""
Async HTTP client for the ShareGym backend.

Wraps httpx.AsyncClient with:

- bearer-token injection from the persisted auth store
- a TTL response cache for GET requests (see cache.py)
- single-flight access-token refresh on 401 with one retry
- a uniform error taxonomy (see errors.py)

Every request carries an explicit timeout.  With no base URL configured
every call raises BackendDisabledError before any I/O; callers fall back
to local data.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from typing import Any, Callable, Protocol

import httpx

from ..core.config import REFRESH_PATH
from ..core.settings import Settings
from .cache import ResponseCache, get_cache_key
from .errors import ApiError, BackendDisabledError, HttpError, NetworkError, UnauthorizedError
from .utils import unwrap_response

logger = logging.getLogger(__name__)

UnauthorizedCallback = Callable[[], Any]


class TokenStorage(Protocol):
    def get_access_token(self) -> str | None: ...

    def get_refresh_token(self) -> str | None: ...

    def set_tokens(self, access_token: str | None, refresh_token: str | None = None) -> None: ...


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for field in ("message", "error", "errorMessage"):
            if data.get(field):
                return str(data[field])
    if response.text:
        return response.text
    return response.reason_phrase or f"HTTP {response.status_code}"


class ApiClient:
    """
    Backend client shared by all network-calling operations.

    Usage:
        async with ApiClient(settings, TokenStore.in_dir(settings.data_dir)) as api:
            workouts = await api.get(f"/users/{user_id}/workouts")
    """

    def __init__(
        self,
        settings: Settings,
        tokens: TokenStorage,
        cache: ResponseCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_unauthorized: UnauthorizedCallback | None = None,
    ):
        self.settings = settings
        self.tokens = tokens
        self.cache = cache if cache is not None else ResponseCache()
        self._http = httpx.AsyncClient(
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )
        self._on_unauthorized = on_unauthorized
        self._refresh_task: asyncio.Task[str | None] | None = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def set_on_unauthorized(self, callback: UnauthorizedCallback | None) -> None:
        """Register the callback fired when a 401 cannot be recovered."""
        self._on_unauthorized = callback

    def invalidate_cache(self, pattern: str | re.Pattern[str]) -> int:
        return self.cache.invalidate(pattern)

    def clear_cache(self) -> None:
        self.cache.clear()

    def build_url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.settings.api_base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        skip_auth: bool = False,
        skip_cache: bool = False,
        skip_token_refresh: bool = False,
    ) -> Any:
        """
        Send a request and return the parsed body.

        Args:
            method: HTTP method
            path: Path relative to the base URL (absolute URLs pass through)
            body: JSON body (ignored for GET)
            headers: Extra headers
            skip_auth: Do not send the bearer token (and never refresh)
            skip_cache: Bypass the GET cache for this call
            skip_token_refresh: Surface a 401 without trying to refresh

        Returns:
            Parsed JSON, raw text for non-JSON bodies, or None for empty bodies

        Raises:
            BackendDisabledError: No base URL configured
            NetworkError: Transport failure
            UnauthorizedError: 401 not recoverable by refresh
            HttpError: Any other non-2xx response
        """
        if not self.settings.backend_enabled:
            raise BackendDisabledError("API base URL not configured")

        method = method.upper()
        url = self.build_url(path)
        use_cache = method == "GET" and not skip_cache
        cache_key = get_cache_key(method, url)

        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit %s", cache_key)
                return cached

        response = await self._send(method, url, body, headers, skip_auth)

        if response.status_code == 401 and not skip_auth:
            if not skip_token_refresh and not self._is_refresh_call(url):
                new_token = await self.try_refresh_token()
                if new_token:
                    response = await self._send(method, url, body, headers, skip_auth, token=new_token)
            if response.status_code == 401:
                await self._handle_unauthorized()
                raise UnauthorizedError()

        if not response.is_success:
            raise HttpError(response.status_code, extract_error_message(response))

        data = self._parse_body(response)
        if use_cache and data is not None:
            # TTL is keyed on the endpoint path, never the scheme or host
            ttl_path = httpx.URL(url).path if path.startswith("http") else path
            self.cache.set(cache_key, data, ttl_path)
        return data

    async def get(self, path: str, **options: Any) -> Any:
        return await self.request("GET", path, **options)

    async def post(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request("POST", path, body, **options)

    async def put(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request("PUT", path, body, **options)

    async def patch(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request("PATCH", path, body, **options)

    async def delete(self, path: str, **options: Any) -> Any:
        return await self.request("DELETE", path, **options)

    async def _send(
        self,
        method: str,
        url: str,
        body: Any,
        extra_headers: dict[str, str] | None,
        skip_auth: bool,
        token: str | None = None,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json", **(extra_headers or {})}
        if not skip_auth:
            token = token or self.tokens.get_access_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        json_body = body if body is not None and method != "GET" else None
        logger.debug("%s %s", method, url)
        try:
            return await self._http.request(method, url, json=json_body, headers=headers)
        except httpx.HTTPError as e:
            raise NetworkError(e) from e

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _is_refresh_call(self, url: str) -> bool:
        return url == self.build_url(REFRESH_PATH)

    # ------------------------------------------------------------------
    # Token refresh
    # ------------------------------------------------------------------

    async def try_refresh_token(self) -> str | None:
        """
        Exchange the stored refresh token for a new access token.

        Concurrent callers share one in-flight refresh: the first caller
        starts it and everyone awaits the same task.  The reference is
        cleared once it completes so the next wave of 401s refreshes again.

        Returns:
            The new access token, or None on any failure
        """
        task = self._refresh_task
        if task is not None:
            return await task

        task = asyncio.ensure_future(self._refresh())
        self._refresh_task = task
        try:
            return await task
        finally:
            self._refresh_task = None

    async def _refresh(self) -> str | None:
        refresh_token = self.tokens.get_refresh_token()
        if not refresh_token:
            logger.info("No refresh token stored; cannot refresh")
            return None

        logger.info("Access token rejected; refreshing")
        try:
            data = await self.request(
                "POST",
                REFRESH_PATH,
                {"refreshToken": refresh_token},
                skip_auth=True,
                skip_cache=True,
                skip_token_refresh=True,
            )
        except ApiError as e:
            logger.warning("Token refresh failed: %s", e)
            return None

        payload = unwrap_response(data)
        if not isinstance(payload, dict):
            logger.warning("Token refresh returned no token")
            return None
        new_token = payload.get("token") or payload.get("accessToken")
        if not new_token:
            logger.warning("Token refresh returned no token")
            return None

        self.tokens.set_tokens(new_token, payload.get("refreshToken") or refresh_token)
        logger.info("Access token refreshed")
        return str(new_token)

    async def _handle_unauthorized(self) -> None:
        self.tokens.set_tokens(None, None)
        callback = self._on_unauthorized
        if callback is None:
            return
        result = callback()
        if inspect.isawaitable(result):
            await result
