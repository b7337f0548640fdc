"""
Tests for the async API client and endpoint wrappers.

The backend is simulated with httpx.MockTransport; handlers record every
request so call counts and headers can be asserted.
"""

import asyncio
import json
from datetime import datetime

import httpx
import pytest

from sharegym.api.analytics import get_workout_analytics
from sharegym.api.auth import get_profile, sign_in, sign_out, sign_up, update_profile
from sharegym.api.cache import ResponseCache, get_cache_key, resolve_ttl
from sharegym.api.client import ApiClient
from sharegym.api.routines import (
    create_routine,
    delete_routine,
    get_routines,
    toggle_routine_favorite,
    update_routine,
)
from sharegym.api.errors import (
    ApiError,
    BackendDisabledError,
    HttpError,
    NetworkError,
    UnauthorizedError,
)
from sharegym.api.utils import unwrap_array_response, unwrap_response
from sharegym.api.workouts import get_last_workout, get_workout_history, save_workout
from sharegym.core.models import ExerciseEntry, WorkoutSession, WorkoutSet
from sharegym.core.settings import Settings

BASE_URL = "https://api.sharegym.test"


class MemoryTokens:
    """In-memory token storage."""

    def __init__(self, access: str | None = "old", refresh: str | None = "refresh-1"):
        self.access = access
        self.refresh = refresh

    def get_access_token(self):
        return self.access

    def get_refresh_token(self):
        return self.refresh

    def set_tokens(self, access_token, refresh_token=None):
        self.access = access_token
        self.refresh = refresh_token


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _client(handler, tokens=None, cache=None, base_url=BASE_URL, **kwargs) -> ApiClient:
    return ApiClient(
        Settings(api_base_url=base_url),
        tokens if tokens is not None else MemoryTokens(),
        cache=cache,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Response cache
# ---------------------------------------------------------------------------


class TestResponseCache:
    @pytest.mark.parametrize("path,expected", [
        ("/auth/me", 300),
        ("/users/42/workouts", 120),
        ("/feed?page=2", 30),
        ("routines/7", 120),
        ("/workouts", 60),
    ])
    def test_resolve_ttl(self, path, expected):
        assert resolve_ttl(path) == expected

    def test_longest_prefix_wins(self):
        table = {"/users/": 120, "/users/me/feed": 10}
        assert resolve_ttl("/users/me/feed", table) == 10

    def test_lazy_expiry(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        key = get_cache_key("get", f"{BASE_URL}/feed")
        cache.set(key, {"items": []}, "/feed")

        clock.now += 30
        assert cache.get(key) == {"items": []}
        clock.now += 1
        assert cache.get(key) is None
        assert len(cache) == 0

    def test_invalidate_substring_and_regex(self):
        import re

        cache = ResponseCache()
        cache.set("GET:/users/1/workouts", 1, "/users/1/workouts")
        cache.set("GET:/users/1/workouts/last", 2, "/users/1/workouts/last")
        cache.set("GET:/auth/me", 3, "/auth/me")

        assert cache.invalidate("/workouts") == 2
        assert "GET:/auth/me" in cache
        assert cache.invalidate(re.compile(r"^GET:/auth")) == 1
        assert len(cache) == 0


# ---------------------------------------------------------------------------
# Unwrapping
# ---------------------------------------------------------------------------


class TestUnwrap:
    def test_unwrap_response(self):
        assert unwrap_response({"data": {"id": 1}}) == {"id": 1}
        assert unwrap_response({"id": 1}) == {"id": 1}
        assert unwrap_response({"data": None, "id": 1}) == {"data": None, "id": 1}
        assert unwrap_response(None) is None

    def test_unwrap_array_response(self):
        assert unwrap_array_response({"data": [1, 2]}) == [1, 2]
        assert unwrap_array_response([3]) == [3]
        assert unwrap_array_response({"data": {"id": 1}}) == []
        assert unwrap_array_response(None) == []


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    @pytest.mark.asyncio
    async def test_backend_disabled_raises_before_io(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        async with _client(handler, base_url="") as api:
            with pytest.raises(BackendDisabledError):
                await api.get("/auth/me")
        assert calls == []

    @pytest.mark.asyncio
    async def test_bearer_token_and_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"ok": True}})

        async with _client(handler) as api:
            result = await api.post("/workouts", {"title": "x"})

        assert result == {"data": {"ok": True}}
        assert str(seen[0].url) == f"{BASE_URL}/workouts"
        assert seen[0].headers["Authorization"] == "Bearer old"
        assert json.loads(seen[0].content) == {"title": "x"}

    @pytest.mark.asyncio
    async def test_skip_auth_sends_no_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as api:
            await api.post("/auth/login", {}, skip_auth=True)
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_get_is_cached_until_invalidated(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"items": [len(calls)]})

        async with _client(handler) as api:
            first = await api.get("/feed")
            second = await api.get("/feed")
            assert len(calls) == 1
            assert first == second

            assert api.invalidate_cache("/feed") == 1
            third = await api.get("/feed")

        assert len(calls) == 2
        assert third == {"items": [2]}

    @pytest.mark.asyncio
    async def test_cache_expires_after_ttl(self):
        calls = []
        clock = FakeClock()

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"items": []})

        async with _client(handler, cache=ResponseCache(clock=clock)) as api:
            await api.get("/feed")
            clock.now += 29
            await api.get("/feed")
            assert len(calls) == 1
            clock.now += 2
            await api.get("/feed")
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_absolute_url_uses_endpoint_ttl(self):
        calls = []
        clock = FakeClock()

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"items": []})

        async with _client(handler, cache=ResponseCache(clock=clock)) as api:
            await api.get("https://x.test/feed")
            clock.now += 45
            await api.get("https://x.test/feed")

        assert len(calls) == 2
        assert str(calls[0].url) == "https://x.test/feed"

    @pytest.mark.asyncio
    async def test_skip_cache_and_mutations_bypass_cache(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"n": len(calls)})

        async with _client(handler) as api:
            await api.get("/auth/me")
            await api.get("/auth/me", skip_cache=True)
            await api.post("/auth/me", {})
            await api.post("/auth/me", {})
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_empty_and_text_bodies(self):
        def handler(request):
            if request.url.path == "/empty":
                return httpx.Response(204)
            return httpx.Response(200, text="pong")

        async with _client(handler) as api:
            assert await api.delete("/empty") is None
            assert await api.get("/ping") == "pong"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(NetworkError) as exc_info:
                await api.get("/feed")

        assert str(exc_info.value).startswith("network error: ")
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response,status,message", [
        (httpx.Response(404, json={"message": "Workout not found"}), 404, "Workout not found"),
        (httpx.Response(400, json={"error": "Bad input"}), 400, "Bad input"),
        (httpx.Response(500, text="boom"), 500, "boom"),
        (httpx.Response(503), 503, "Service Unavailable"),
    ])
    async def test_http_error_message(self, response, status, message):
        async with _client(lambda request: response) as api:
            with pytest.raises(HttpError) as exc_info:
                await api.get("/workouts/1")

        assert exc_info.value.status == status
        assert exc_info.value.message == message
        assert not isinstance(exc_info.value, UnauthorizedError)


# ---------------------------------------------------------------------------
# Token refresh
# ---------------------------------------------------------------------------


class TestTokenRefresh:
    @pytest.mark.asyncio
    async def test_single_flight_refresh(self):
        """Two concurrent 401s share one refresh and both retry with the new token."""
        refresh_calls = []
        retried = []

        async def handler(request):
            if request.url.path == "/auth/refresh":
                refresh_calls.append(json.loads(request.content))
                await asyncio.sleep(0.01)
                return httpx.Response(200, json={"data": {"token": "new", "refreshToken": "refresh-2"}})
            if request.headers.get("Authorization") == "Bearer new":
                retried.append(request.url.path)
                return httpx.Response(200, json={"path": request.url.path})
            return httpx.Response(401, json={"message": "expired"})

        tokens = MemoryTokens()
        async with _client(handler, tokens=tokens) as api:
            a, b = await asyncio.gather(api.get("/users/1/a"), api.get("/users/1/b"))

        assert refresh_calls == [{"refreshToken": "refresh-1"}]
        assert sorted(retried) == ["/users/1/a", "/users/1/b"]
        assert a == {"path": "/users/1/a"}
        assert b == {"path": "/users/1/b"}
        assert tokens.access == "new"
        assert tokens.refresh == "refresh-2"

    @pytest.mark.asyncio
    async def test_refresh_again_after_completion(self):
        refresh_calls = []
        state = {"valid": None}

        def handler(request):
            if request.url.path == "/auth/refresh":
                refresh_calls.append(1)
                state["valid"] = f"tok-{len(refresh_calls)}"
                return httpx.Response(200, json={"accessToken": state["valid"]})
            if request.headers.get("Authorization") == f"Bearer {state['valid']}":
                return httpx.Response(200, json={})
            return httpx.Response(401)

        async with _client(handler) as api:
            await api.post("/x")
            state["valid"] = "rotated-elsewhere"
            await api.post("/x")

        assert len(refresh_calls) == 2

    @pytest.mark.asyncio
    async def test_refresh_failure_is_unauthorized(self):
        fired = []

        def handler(request):
            return httpx.Response(401, json={"message": "nope"})

        tokens = MemoryTokens()
        async with _client(handler, tokens=tokens, on_unauthorized=lambda: fired.append(1)) as api:
            with pytest.raises(UnauthorizedError) as exc_info:
                await api.get("/auth/me")

        assert exc_info.value.status == 401
        assert exc_info.value.message == "unauthorized"
        assert tokens.access is None
        assert tokens.refresh is None
        assert fired == [1]

    @pytest.mark.asyncio
    async def test_no_refresh_token_skips_refresh(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(401)

        async with _client(handler, tokens=MemoryTokens(refresh=None)) as api:
            with pytest.raises(UnauthorizedError):
                await api.get("/auth/me")

        assert paths == ["/auth/me"]

    @pytest.mark.asyncio
    async def test_async_unauthorized_callback(self):
        fired = []

        async def on_unauthorized():
            fired.append("async")

        async with _client(lambda request: httpx.Response(401), tokens=MemoryTokens(refresh=None)) as api:
            api.set_on_unauthorized(on_unauthorized)
            with pytest.raises(UnauthorizedError):
                await api.get("/auth/me")

        assert fired == ["async"]

    @pytest.mark.asyncio
    async def test_skip_token_refresh(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(401)

        async with _client(handler) as api:
            with pytest.raises(UnauthorizedError):
                await api.post("/auth/logout", skip_token_refresh=True)

        assert paths == ["/auth/logout"]

    @pytest.mark.asyncio
    async def test_skip_auth_401_is_plain_http_error(self):
        tokens = MemoryTokens()
        async with _client(lambda request: httpx.Response(401, json={"message": "bad credentials"}), tokens=tokens) as api:
            with pytest.raises(HttpError) as exc_info:
                await api.post("/auth/login", {}, skip_auth=True)

        assert not isinstance(exc_info.value, UnauthorizedError)
        assert exc_info.value.message == "bad credentials"
        assert tokens.access == "old"


# ---------------------------------------------------------------------------
# Endpoint wrappers
# ---------------------------------------------------------------------------


def _session() -> WorkoutSession:
    start = datetime(2026, 3, 2, 18, 0)
    return WorkoutSession(
        date=start,
        start_time=start,
        end_time=datetime(2026, 3, 2, 19, 0),
        exercises=[
            ExerciseEntry(
                exercise_type_id="bench-press",
                sets=[WorkoutSet(reps=10, weight=60, completed=True)],
            )
        ],
        total_duration=3600,
    )


class TestEndpoints:
    @pytest.mark.asyncio
    async def test_sign_in_and_out(self):
        def handler(request):
            if request.url.path == "/auth/login":
                return httpx.Response(200, json={"data": {"token": "t1", "refreshToken": "r1", "user": {"id": 1}}})
            return httpx.Response(204)

        tokens = MemoryTokens(access=None, refresh=None)
        async with _client(handler, tokens=tokens) as api:
            result = await sign_in(api, "a@b.c", "pw")
            assert result["user"] == {"id": 1}
            assert (tokens.access, tokens.refresh) == ("t1", "r1")

            await sign_out(api)
        assert (tokens.access, tokens.refresh) == (None, None)

    @pytest.mark.asyncio
    async def test_sign_out_clears_tokens_even_on_failure(self):
        tokens = MemoryTokens()
        async with _client(lambda request: httpx.Response(500), tokens=tokens) as api:
            with pytest.raises(HttpError):
                await sign_out(api)
        assert tokens.access is None

    @pytest.mark.asyncio
    async def test_update_profile_busts_profile_cache(self):
        calls = []

        def handler(request):
            calls.append(request.method)
            return httpx.Response(200, json={"data": {"username": f"u{len(calls)}"}})

        async with _client(handler) as api:
            await api.get("/auth/me")
            await update_profile(api, {"username": "new"})
            await api.get("/auth/me")

        assert calls == ["GET", "PATCH", "GET"]

    @pytest.mark.asyncio
    async def test_save_workout_maps_ids_and_busts_cache(self):
        posted = []

        def handler(request):
            if request.method == "POST":
                body = json.loads(request.content)
                posted.append(body)
                return httpx.Response(201, json={"data": {"id": 99, **body}})
            return httpx.Response(200, json={"data": []})

        async with _client(handler) as api:
            await get_workout_history(api, "1")
            assert len(api.cache) == 1
            saved = await save_workout(api, _session())
            assert len(api.cache) == 0

        assert posted[0]["exercises"][0]["exerciseId"] == 1001
        assert saved["id"] == "99"
        assert saved["exercises"][0]["exerciseTypeId"] == "bench-press"

    @pytest.mark.asyncio
    async def test_history_translates_numeric_ids(self):
        def handler(request):
            return httpx.Response(200, json={"data": [
                {"id": 1, "startTime": "2026-03-02T18:00:00", "exercises": [{"exerciseId": 4001, "sets": []}]},
            ]})

        async with _client(handler) as api:
            history = await get_workout_history(api, "1")

        assert history[0]["exercises"][0]["exerciseTypeId"] == "squat"

    @pytest.mark.asyncio
    async def test_server_analytics(self):
        def handler(request):
            return httpx.Response(200, json={"data": {
                "exercisePatterns": {
                    "squat": {"exerciseTypeId": "squat", "personalRecord": 120, "workoutCount": 4},
                },
                "userStats": {"workoutStreak": 3, "totalWorkouts": 12},
            }})

        async with _client(handler) as api:
            engine = await get_workout_analytics(api, "1")

        assert engine.exercise_patterns["squat"].personal_record == 120
        assert engine.user_stats.workout_streak == 3

    @pytest.mark.asyncio
    async def test_server_analytics_falls_back_to_none(self):
        async with _client(lambda request: httpx.Response(500)) as api:
            assert await get_workout_analytics(api, "1") is None

    @pytest.mark.asyncio
    async def test_api_error_is_catchable_base(self):
        async with _client(lambda request: httpx.Response(418)) as api:
            with pytest.raises(ApiError):
                await api.get("/teapot")

    @pytest.mark.asyncio
    async def test_sign_up_and_profile(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, "Authorization" in request.headers))
            if request.url.path == "/auth/register":
                return httpx.Response(201, json={"accessToken": "t2"})
            return httpx.Response(200, json={"data": {"username": "lifter"}})

        tokens = MemoryTokens(access=None, refresh=None)
        async with _client(handler, tokens=tokens) as api:
            await sign_up(api, "a@b.c", "pw", "lifter")
            profile = await get_profile(api)

        assert tokens.access == "t2"
        assert profile == {"username": "lifter"}
        assert seen == [("POST", "/auth/register", False), ("GET", "/auth/me", True)]

    @pytest.mark.asyncio
    async def test_last_workout(self):
        def handler(request):
            if request.url.path.endswith("/last"):
                return httpx.Response(200, json={"data": {"id": 5, "exercises": [{"exerciseId": 2001}]}})
            return httpx.Response(204)

        async with _client(handler) as api:
            last = await get_last_workout(api, "1")
            assert last["exercises"][0]["exerciseTypeId"] == "pull-up"
            assert await get_last_workout(api, "2") is None

    @pytest.mark.asyncio
    async def test_routines_list_and_create(self):
        seen = []

        def handler(request):
            body = json.loads(request.content) if request.content else None
            seen.append((request.method, request.url.path, body))
            if request.method == "POST":
                return httpx.Response(201, json={"data": {"id": "r2", "createdAt": "2026-03-03T08:00:00", **body}})
            return httpx.Response(200, json={"data": [
                {"id": "r1", "name": "Push", "createdAt": "2026-03-01T09:00:00", "lastUsed": None},
            ]})

        async with _client(handler) as api:
            routines = await get_routines(api, "7")
            assert len(api.cache) == 1
            created = await create_routine(api, "7", "Legs", [
                {"exerciseTypeId": "squat", "sets": 5},
                {"exerciseTypeId": "leg-press", "sets": 3, "orderIndex": 9},
            ])
            assert len(api.cache) == 0

        assert routines[0]["createdAt"] == datetime(2026, 3, 1, 9, 0)
        assert routines[0]["lastUsed"] is None
        assert seen[1][:2] == ("POST", "/routines")
        assert seen[1][2]["userId"] == "7"
        assert [ex["orderIndex"] for ex in seen[1][2]["exercises"]] == [0, 1]
        assert seen[1][2]["exercises"][0]["exerciseTypeId"] == "squat"
        assert created["id"] == "r2"
        assert created["createdAt"] == datetime(2026, 3, 3, 8, 0)

    @pytest.mark.asyncio
    async def test_routine_update_favorite_and_delete(self):
        seen = []

        def handler(request):
            body = json.loads(request.content) if request.content else None
            seen.append((request.method, request.url.path, body))
            if request.method == "GET":
                return httpx.Response(200, json=[{"id": "r1", "name": "Push"}])
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json={"data": {"id": "r1", "name": "Push", **body}})

        async with _client(handler) as api:
            await get_routines(api, "7")
            updated = await update_routine(api, "r1", {"name": "Push Day"})
            assert len(api.cache) == 0

            await get_routines(api, "7")
            favorite = await toggle_routine_favorite(api, "r1", True)
            assert len(api.cache) == 0

            await get_routines(api, "7")
            assert await delete_routine(api, "r1") is None
            assert len(api.cache) == 0

        assert updated["name"] == "Push Day"
        assert favorite["isFavorite"] is True
        assert [(method, path) for method, path, _ in seen] == [
            ("GET", "/users/7/routines"),
            ("PATCH", "/routines/r1"),
            ("GET", "/users/7/routines"),
            ("PATCH", "/routines/r1"),
            ("GET", "/users/7/routines"),
            ("DELETE", "/routines/r1"),
        ]
        assert seen[3][2] == {"isFavorite": True}
