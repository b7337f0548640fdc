"""
JSON-file key-value storage.

Each named store (auth, analytics, ...) is one JSON object on disk at
``<data_dir>/<name>.json``.  Values must be JSON-serializable.
"""

import json
from pathlib import Path
from typing import Any

from ..core.config import AUTH_STORE_NAME, AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY


class JsonKeyValueStore:
    """
    A single JSON object file used as a key-value store.

    A missing or corrupt file reads as an empty store; the next write
    replaces it.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: Path to the JSON file backing this store
        """
        self.path = Path(path)

    @classmethod
    def named(cls, data_dir: str | Path, name: str) -> "JsonKeyValueStore":
        """Store for ``name`` inside ``data_dir``."""
        return cls(Path(data_dir) / f"{name}.json")

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> dict[str, Any]:
        """
        Load the whole store.

        Returns:
            Stored mapping, or {} if the file is missing or unreadable
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: dict[str, Any]) -> None:
        """Replace the whole store, creating parent directories if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value
        self.save(data)

    def remove(self, key: str) -> None:
        data = self.load()
        if key in data:
            del data[key]
            self.save(data)

    def clear(self) -> None:
        """Remove every key (dangerous - use with caution)."""
        if self.path.exists():
            self.save({})


class TokenStore:
    """Access and refresh tokens kept in the persisted auth store."""

    def __init__(self, kv: JsonKeyValueStore):
        self.kv = kv

    @classmethod
    def in_dir(cls, data_dir: str | Path) -> "TokenStore":
        return cls(JsonKeyValueStore.named(data_dir, AUTH_STORE_NAME))

    def get_access_token(self) -> str | None:
        return self.kv.get(AUTH_TOKEN_KEY) or None

    def get_refresh_token(self) -> str | None:
        return self.kv.get(REFRESH_TOKEN_KEY) or None

    def set_tokens(self, access_token: str | None, refresh_token: str | None = None) -> None:
        """Store the given tokens; None removes the corresponding key."""
        data = self.kv.load()
        for key, value in ((AUTH_TOKEN_KEY, access_token), (REFRESH_TOKEN_KEY, refresh_token)):
            if value:
                data[key] = value
            else:
                data.pop(key, None)
        self.kv.save(data)

    def clear(self) -> None:
        self.set_tokens(None, None)
