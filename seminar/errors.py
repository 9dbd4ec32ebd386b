"""Error taxonomy shared by the store, the registration flow and the auth gate."""
from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import status


class SeminarError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: Optional[str] = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def response_message(self) -> str:
        """Return the message that may be shown to the client."""

        return self.public_message or self.message


class ValidationError(SeminarError):
    """Raised when a registration payload is malformed or incomplete."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        errors: List[Dict[str, str]],
        message: str = "Please fill in all required fields correctly.",
    ) -> None:
        super().__init__(message)
        self.errors = errors

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]


class DuplicateEmailError(SeminarError):
    """Raised when an email address already has a registration."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, email: str) -> None:
        super().__init__("This email address is already registered for the seminar.")
        self.email = email


class Unauthorized(SeminarError):
    """Raised when a gated operation is attempted without an admin session."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class InvalidCredentials(Unauthorized):
    """Raised when a login attempt does not match the configured credentials."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password")


class StoreUnavailable(SeminarError):
    """Raised when the backing store cannot be reached or rejects a request."""

    public_message = "The registration store is temporarily unavailable. Please try again."


class SessionError(SeminarError):
    """Raised when the session subsystem fails to complete an operation."""

    public_message = "Could not log out"


__all__ = [
    "DuplicateEmailError",
    "InvalidCredentials",
    "SeminarError",
    "SessionError",
    "StoreUnavailable",
    "Unauthorized",
    "ValidationError",
]
