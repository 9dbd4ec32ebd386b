"""Domain models for seminar registrations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class RegistrationInput:
    """A validated signup payload that has not been stored yet."""

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    expectations: Optional[str] = None
    newsletter_opt_in: bool = False


@dataclass(frozen=True)
class Registration:
    """Represents one stored seminar signup."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    expectations: Optional[str]
    newsletter_opt_in: bool
    registered_at: datetime

    @classmethod
    def from_input(
        cls, data: RegistrationInput, *, id: int, registered_at: datetime
    ) -> "Registration":
        return cls(
            id=id,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone or None,
            expectations=data.expectations or None,
            newsletter_opt_in=bool(data.newsletter_opt_in),
            registered_at=registered_at,
        )

    def to_view(self) -> Dict[str, object]:
        """Return the camelCase JSON representation used by the API."""

        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "expectations": self.expectations,
            "newsletterOptIn": self.newsletter_opt_in,
            "registeredAt": self.registered_at.isoformat(),
        }


@dataclass(frozen=True)
class User:
    """Operator account placeholder kept for store interface symmetry."""

    id: int
    username: str
    password_hash: str


__all__ = ["Registration", "RegistrationInput", "User"]
