"""Signup validation and the duplicate-safe registration flow."""
from __future__ import annotations

import logging
import re
import threading
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import DuplicateEmailError, ValidationError
from .export import format_registrations_csv
from .models import Registration, RegistrationInput
from .storage import Storage

logger = logging.getLogger("seminar.registration")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_FIELD_LABELS = {
    "firstName": "First name",
    "lastName": "Last name",
    "email": "Email",
    "phone": "Phone",
    "expectations": "Expectations",
    "newsletterOptIn": "Newsletter opt-in",
}


class RegistrationRequest(BaseModel):
    """Shape of the signup form payload."""

    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)

    first_name: str = Field(..., alias="firstName", max_length=100)
    last_name: str = Field(..., alias="lastName", max_length=100)
    email: str = Field(..., max_length=254)
    phone: Optional[str] = Field(default=None, max_length=40)
    expectations: Optional[str] = Field(default=None, max_length=2000)
    newsletter_opt_in: Optional[bool] = Field(default=False, alias="newsletterOptIn")

    @field_validator("first_name", "last_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        stripped = value.strip()
        if not EMAIL_PATTERN.match(stripped):
            raise ValueError("must be a valid email address")
        return stripped

    @field_validator("phone", "expectations")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    def to_input(self) -> RegistrationInput:
        return RegistrationInput(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            expectations=self.expectations,
            newsletter_opt_in=bool(self.newsletter_opt_in),
        )


def _error_entry(error: Mapping[str, Any]) -> Dict[str, str]:
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else "__root__"
    label = _FIELD_LABELS.get(field, field)

    original = (error.get("ctx") or {}).get("error")
    if error.get("type") == "missing":
        message = f"{label} is required"
    elif isinstance(original, Exception):
        message = f"{label} {original}"
    else:
        message = f"{label}: {error.get('msg', 'is invalid')}"
    return {"field": field, "message": message}


def validate_registration(payload: object) -> RegistrationInput:
    """Validate a raw payload, reporting every invalid field at once."""

    if not isinstance(payload, Mapping):
        raise ValidationError(
            [{"field": "__root__", "message": "Registration details must be a JSON object"}]
        )

    try:
        request = RegistrationRequest.model_validate(dict(payload))
    except PydanticValidationError as exc:
        errors: List[Dict[str, str]] = []
        seen = set()
        for error in exc.errors():
            entry = _error_entry(error)
            if entry["field"] in seen:
                continue
            seen.add(entry["field"])
            errors.append(entry)
        raise ValidationError(errors) from exc

    return request.to_input()


class RegistrationService:
    """Create registrations while keeping emails unique within this process."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._lock = threading.Lock()

    @property
    def storage(self) -> Storage:
        return self._storage

    def register(self, payload: object) -> Registration:
        data = validate_registration(payload)

        with self._lock:
            if self._storage.get_registration_by_email(data.email) is not None:
                logger.info("Rejected duplicate registration attempt")
                raise DuplicateEmailError(data.email)
            registration = self._storage.create_registration(data)

        logger.info("Created registration #%s", registration.id)
        return registration

    def list_registrations(self) -> List[Registration]:
        return self._storage.get_all_registrations()

    def export_csv(self) -> str:
        return format_registrations_csv(self.list_registrations())


__all__ = [
    "EMAIL_PATTERN",
    "RegistrationRequest",
    "RegistrationService",
    "validate_registration",
]
