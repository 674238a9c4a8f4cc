from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries the error code and HTTP status it is rendered with.
    """

    code = "BAD_REQUEST"
    status = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    status = 400


class AuthenticationError(DomainError):
    """Raised when there is no session or login credentials are invalid."""

    code = "UNAUTHORIZED"
    status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    status = 403


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status = 404


class ConflictError(DomainError):
    """Raised on uniqueness violations (duplicate email, names, invoices)."""

    code = "CONFLICT"
    status = 409


class StateError(DomainError):
    """Raised when an action is not allowed in the entity's current state."""

    code = "BAD_REQUEST"
    status = 400


class ExternalServiceError(DomainError):
    code = "EXTERNAL_ERROR"
    status = 502
