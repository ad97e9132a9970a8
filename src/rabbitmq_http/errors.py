from __future__ import annotations

import json
from typing import Any, Optional


class RabbitMQHttpError(Exception):
    """Base class of every error raised by this package."""


class ConfigurationError(RabbitMQHttpError):
    pass


class TransportError(RabbitMQHttpError):
    """DNS, connection, TLS, I/O or timeout failure. The cause is chained."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class DecodeError(RabbitMQHttpError):
    """The response body was not valid JSON or did not match the expected shape."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ResponseError(RabbitMQHttpError):
    """The broker answered with a status code that the operation does not accept."""

    def __init__(self, status_code: int, url: str, body: str = ""):
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"{self.status_code} response from {self.url}"


class AuthenticationFailure(ResponseError):
    pass


class AccessDenied(ResponseError):
    pass


class NotFound(ResponseError):
    pass


class ClientError(ResponseError):
    """
    A 4xx response other than 401, 403 and 404.

    The broker describes the problem in a ``{"error": ..., "reason": ...}`` body,
    which is exposed verbatim through ``error`` and ``reason``.
    """

    def __init__(self, status_code: int, url: str, body: str = ""):
        self.error, self.reason = _parse_error_body(body)
        super().__init__(status_code, url, body)

    def _describe(self) -> str:
        if self.reason:
            return f"{self.status_code} response from {self.url}: {self.reason}"
        return super()._describe()


class ServerError(ResponseError):
    pass


class HealthCheckFailed(ServerError):
    """A health check endpoint reported a failure (503)."""

    def __init__(self, path: str, status_code: int, url: str, details: Any, body=""):
        self.path = path
        self.details = details
        super().__init__(status_code, url, body)

    def _describe(self) -> str:
        reason = getattr(self.details, "reason", None)
        if reason:
            return f"health check {self.path} failed: {reason}"
        return f"health check {self.path} failed"


class IncompatibleError(RabbitMQHttpError):
    """A response could not be projected into a richer type."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"missing or invalid property '{field}'")


class InvalidArgument(RabbitMQHttpError, ValueError):
    pass


class MultipleMatchingBindings(InvalidArgument):
    pass


def _parse_error_body(body: str):
    if not body:
        return None, None
    try:
        parsed = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(parsed, dict):
        return None, None
    return parsed.get("error"), parsed.get("reason")
