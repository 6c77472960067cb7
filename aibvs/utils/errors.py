"""Domain errors and standardized error responses."""
from __future__ import annotations

from typing import Any

from fastapi import status


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class ConsoleError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details)


class ValidationError(ConsoleError):
    """Missing or malformed caller input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFound(ConsoleError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    @classmethod
    def for_entity(cls, entity: str) -> "NotFound":
        return cls(f"{entity} not found.", code=f"{entity.upper()}_NOT_FOUND")


class Forbidden(ConsoleError):
    """Role or ownership check failed. Never says which role would have passed."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "ACCESS_DENIED"

    def __init__(self, message: str = "Access denied.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class AuthError(ConsoleError):
    """Bad credentials or invalid token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "INVALID_TOKEN"


class InternalError(ConsoleError):
    """Store failure. Detail stays in the server logs."""

    def __init__(self, message: str = "An unexpected error occurred.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


__all__ = [
    "error_response",
    "ConsoleError",
    "ValidationError",
    "NotFound",
    "Forbidden",
    "AuthError",
    "InternalError",
]
