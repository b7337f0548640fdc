"""
Tests for persistence, serializers, settings, and the catalog loader.
"""

import json
import warnings
from datetime import datetime

import pytest

from sharegym.core.analytics import WorkoutAnalyticsEngine
from sharegym.core.exercises.loader import load_catalog
from sharegym.core.models import ExercisePattern, UserStats
from sharegym.core.settings import Settings, load_settings
from sharegym.io.analytics_store import AnalyticsStore
from sharegym.io.serializers import (
    ValidationError,
    dict_to_session,
    load_session_file,
    parse_datetime,
    session_to_dict,
)
from sharegym.io.storage import JsonKeyValueStore, TokenStore

SESSION_JSON = {
    "date": "2026-03-02T18:00:00",
    "startTime": "2026-03-02T18:00:00",
    "endTime": "2026-03-02T19:05:00",
    "totalDuration": 3900,
    "exercises": [
        {
            "exerciseTypeId": "bench-press",
            "restTime": 120,
            "sets": [
                {"reps": 10, "weight": 60, "completed": True},
                {"reps": 8, "weight": 62.5, "isCompleted": True},
                {"reps": 6, "weight": 65},
            ],
        }
    ],
}


# ---------------------------------------------------------------------------
# Key-value and token stores
# ---------------------------------------------------------------------------


class TestJsonKeyValueStore:
    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonKeyValueStore.named(tmp_path, "nothing")
        assert not store.exists()
        assert store.load() == {}
        assert store.get("x", 5) == 5

    def test_set_get_remove(self, tmp_path):
        store = JsonKeyValueStore(tmp_path / "nested" / "kv.json")
        store.set("a", 1)
        store.set("b", {"c": [1, 2]})
        assert store.get("b") == {"c": [1, 2]}

        store.remove("a")
        assert store.load() == {"b": {"c": [1, 2]}}

        store.clear()
        assert store.load() == {}

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "kv.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonKeyValueStore(path).load() == {}


class TestTokenStore:
    def test_set_and_clear(self, tmp_path):
        tokens = TokenStore.in_dir(tmp_path)
        assert tokens.get_access_token() is None

        tokens.set_tokens("access", "refresh")
        assert TokenStore.in_dir(tmp_path).get_access_token() == "access"
        assert TokenStore.in_dir(tmp_path).get_refresh_token() == "refresh"

        raw = json.loads((tmp_path / "auth-storage.json").read_text(encoding="utf-8"))
        assert raw == {"sharegym_auth_token": "access", "sharegym_refresh_token": "refresh"}

        tokens.clear()
        assert tokens.get_access_token() is None
        assert tokens.get_refresh_token() is None


# ---------------------------------------------------------------------------
# Analytics store
# ---------------------------------------------------------------------------


class TestAnalyticsStore:
    def test_round_trip_rehydrates_dates(self, tmp_path):
        last = datetime(2026, 3, 2, 18, 30)
        engine = WorkoutAnalyticsEngine(
            exercise_patterns={
                "squat": ExercisePattern(exercise_id="squat", personal_record=120, workout_count=4),
            },
            user_stats=UserStats(last_workout_date=last, workout_streak=3, total_workouts=9),
        )
        store = AnalyticsStore(tmp_path)
        store.save_engine(engine)

        loaded = store.load_engine()
        assert loaded.exercise_patterns == engine.exercise_patterns
        assert loaded.user_stats == engine.user_stats
        assert isinstance(loaded.user_stats.last_workout_date, datetime)
        assert loaded.days_since_last_workout() >= 0

    def test_missing_store_gives_fresh_engine(self, tmp_path):
        engine = AnalyticsStore(tmp_path).load_engine()
        assert engine.exercise_patterns == {}
        assert engine.user_stats == UserStats()

    def test_malformed_patterns_raise(self, tmp_path):
        (tmp_path / "workout-analytics-storage.json").write_text(
            json.dumps({"exercisePatterns": [1, 2]}), encoding="utf-8"
        )
        with pytest.raises(ValidationError):
            AnalyticsStore(tmp_path).load_engine()


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------


class TestSerializers:
    def test_parse_session(self):
        session = dict_to_session(SESSION_JSON)
        assert session.start_time == datetime(2026, 3, 2, 18, 0)
        assert session.total_duration == 3900
        sets = session.exercises[0].sets
        assert [s.completed for s in sets] == [True, True, False]
        assert sets[1].weight == 62.5
        assert session.exercises[0].rest_time == 120

    def test_session_round_trip(self):
        session = dict_to_session(SESSION_JSON)
        assert dict_to_session(session_to_dict(session)) == session

    def test_date_falls_back_to_start_time(self):
        data = {k: v for k, v in SESSION_JSON.items() if k != "date"}
        assert dict_to_session(data).date == datetime(2026, 3, 2, 18, 0)

    def test_missing_exercise_id(self):
        with pytest.raises(ValidationError):
            dict_to_session({**SESSION_JSON, "exercises": [{"sets": []}]})

    def test_negative_reps_rejected(self):
        bad = {**SESSION_JSON, "exercises": [{"exerciseTypeId": "squat", "sets": [{"reps": -1}]}]}
        with pytest.raises(ValidationError):
            dict_to_session(bad)

    def test_parse_datetime(self):
        assert parse_datetime("2026-03-02T18:00:00", "x") == datetime(2026, 3, 2, 18, 0)
        assert parse_datetime("2026-03-02T18:00:00Z", "x").tzinfo is None
        with pytest.raises(ValidationError):
            parse_datetime("yesterday", "x")
        with pytest.raises(ValidationError):
            parse_datetime(None, "x")

    def test_load_session_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps(SESSION_JSON), encoding="utf-8")
        assert len(load_session_file(path).exercises) == 1

        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_session_file(path)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self, tmp_path):
        settings = load_settings({"HOME": str(tmp_path)})
        assert settings.api_base_url == ""
        assert not settings.backend_enabled
        assert settings.request_timeout_seconds == 30
        assert settings.data_dir == tmp_path / ".sharegym"

    def test_yaml_file(self, tmp_path):
        home = tmp_path / "sg"
        home.mkdir()
        (home / "config.yaml").write_text(
            "api:\n  base_url: https://yaml.example/\n  timeout_seconds: 12\n",
            encoding="utf-8",
        )
        settings = load_settings({"SHAREGYM_HOME": str(home)})
        assert settings.api_base_url == "https://yaml.example"
        assert settings.request_timeout_seconds == 12
        assert settings.data_dir == home

    def test_yaml_data_dir_under_home(self, tmp_path):
        config_dir = tmp_path / ".sharegym"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(f"data_dir: {tmp_path / 'store'}\n", encoding="utf-8")
        settings = load_settings({"HOME": str(tmp_path)})
        assert settings.data_dir == tmp_path / "store"
        assert settings.api_base_url == ""

    def test_env_overrides_yaml(self, tmp_path):
        (tmp_path / "config.yaml").write_text("api:\n  base_url: https://yaml.example\n", encoding="utf-8")
        settings = load_settings({
            "SHAREGYM_HOME": str(tmp_path),
            "SHAREGYM_API_URL": "https://env.example/",
            "SHAREGYM_TIMEOUT": "5",
        })
        assert settings.api_base_url == "https://env.example"
        assert settings.request_timeout_seconds == 5
        assert settings.backend_enabled

    def test_broken_yaml_warns(self, tmp_path):
        (tmp_path / "config.yaml").write_text("api: [unclosed\n", encoding="utf-8")
        with pytest.warns(UserWarning):
            settings = load_settings({"SHAREGYM_HOME": str(tmp_path)})
        assert settings.api_base_url == ""

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            Settings(request_timeout_seconds=0)


# ---------------------------------------------------------------------------
# Catalog loader
# ---------------------------------------------------------------------------


class TestCatalogLoader:
    def test_keeps_file_order_and_duplicates(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "- id: b\n  name: B\n  category: back\n"
            "- name: no id\n"
            "- just a string\n"
            "- id: a\n  name: A\n  category: chest\n  muscle_groups: [chest]\n"
            "- id: b\n  name: Duplicate\n",
            encoding="utf-8",
        )
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            catalog = load_catalog(path)

        assert [ex.id for ex in catalog] == ["b", "a", "b"]
        assert catalog[1].muscle_groups == ("chest",)
        assert len(caught) == 3

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("id: x\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_catalog(path)
