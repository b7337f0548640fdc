"""
Error taxonomy for backend calls.

Callers catch ApiError to fall back to local data; the subclasses let
them tell a connectivity problem from a server-reported failure.
"""


class ApiError(Exception):
    """Base class for every error raised by the API layer."""


class BackendDisabledError(ApiError):
    """No API base URL is configured; no connection was attempted."""


class NetworkError(ApiError):
    """Transport-level failure (DNS, connection refused, timeout)."""

    def __init__(self, cause: object):
        super().__init__(f"network error: {cause}")
        self.cause = cause


class HttpError(ApiError):
    """Non-2xx response.  ``message`` is extracted from the body when possible."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class UnauthorizedError(HttpError):
    """401 that could not be resolved by refreshing the access token."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(401, message)
