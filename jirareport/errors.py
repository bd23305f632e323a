"""Error classes raised at the Jira / Tempo boundary.

Callers only need to catch ApiError; the subclasses tell a transport
failure apart from a non-success response or a payload that no longer
matches our schemas.
"""


class ConfigError(Exception):
    """Required configuration is missing or malformed."""


class ApiError(Exception):
    """Base class for remote service failures."""

    def __init__(self, message: str, service: str = ""):
        super().__init__(message)
        self.service = service


class TransportError(ApiError):
    """The request never produced an HTTP response (DNS, timeout, refused)."""


class ResponseError(ApiError):
    """The service answered with a non-success status code."""

    def __init__(self, message: str, service: str = "", status_code: int = 0, body: str = ""):
        super().__init__(message, service)
        self.status_code = status_code
        self.body = body

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500 or self.status_code == 429


class DecodeError(ApiError):
    """The response body could not be parsed into the expected model."""
