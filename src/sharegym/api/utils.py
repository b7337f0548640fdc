"""
Response unwrapping helpers.

The backend returns either ``T`` or ``{"data": T}`` depending on the
endpoint; these helpers always hand back the bare ``T``.
"""

from typing import Any


def unwrap_response(data: Any) -> Any:
    """Return ``data["data"]`` for wrapped responses, else ``data``."""
    if data is None:
        return None
    if isinstance(data, dict) and data.get("data") is not None:
        return data["data"]
    return data


def unwrap_array_response(data: Any) -> list:
    """Like unwrap_response, but always returns a list."""
    unwrapped = unwrap_response(data)
    return unwrapped if isinstance(unwrapped, list) else []
