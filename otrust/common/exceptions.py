"""
Custom exceptions for the OTRUST client.

Every failure belongs to exactly one category so callers can tell a local
usage problem from a network failure, a server rejection or a broken
config file.
"""

from __future__ import annotations

from typing import Any

HTTP_UNAUTHORIZED = 401


class OtrustError(Exception):
    """Base class for all client errors."""

    category: str = "error"
    label: str = "Error"
    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PreconditionError(OtrustError):
    """A local requirement is not met; no request was sent."""

    category = "precondition"
    label = "Precondition error"
    exit_code = 3


class MissingKeyPairError(PreconditionError):
    """No key pair is configured."""

    def __init__(
        self, message: str = 'No key pair found. Run "otrust-cli init" first'
    ) -> None:
        super().__init__(message)


class NotLoggedInError(PreconditionError):
    """No session token is stored."""

    def __init__(self, message: str = "You must be logged in") -> None:
        super().__init__(message)


class ValidationError(PreconditionError):
    """Exception for invalid user input."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class TransportError(OtrustError):
    """The server could not be reached or answered with garbage."""

    category = "transport"
    label = "Network error"
    exit_code = 4


class ServerError(OtrustError):
    """The server answered with a non-2xx status."""

    category = "server"
    exit_code = 5

    def __init__(self, status: int, body: Any = None, reason: str = "") -> None:
        self.status = status
        self.body = body
        self.reason = reason
        super().__init__(self._describe())

    @property
    def label(self) -> str:  # type: ignore[override]
        if self.status == HTTP_UNAUTHORIZED:
            return "Authentication error"
        return f"Server error ({self.status})"

    @property
    def error(self) -> str | None:
        if isinstance(self.body, dict):
            return self.body.get("error")
        return None

    @property
    def details(self) -> str | None:
        if isinstance(self.body, dict):
            return self.body.get("message")
        return None

    def _describe(self) -> str:
        if self.status == HTTP_UNAUTHORIZED and not self.error:
            return "Please login first"
        message = self.error or self.reason or f"HTTP {self.status}"
        if self.details:
            message = f"{message}: {self.details}"
        return message


class PersistenceError(OtrustError):
    """The local config file could not be read or written."""

    category = "persistence"
    label = "Config file error"
    exit_code = 6
