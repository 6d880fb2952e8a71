"""Custom exception hierarchy for servicekit."""
from __future__ import annotations

from typing import Any


class ServiceError(RuntimeError):
    """Base error for service failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ClientError(ServiceError):
    """Raised when a request cannot be issued or produced nothing usable."""


class InvalidURLError(ClientError):
    """Raised when a target URL cannot be parsed or resolved against the base URL."""


class NoResponseError(ClientError):
    """Raised when the transport completed without producing a response."""


class DecodeError(ServiceError):
    """Raised when a response body cannot be decoded into the requested type."""
