"""Seminar signup service: registration form, record store and admin export."""

from __future__ import annotations

from typing import Any

from .models import Registration, RegistrationInput, User
from .storage import MemoryStorage, Storage


def create_application(*args: Any, **kwargs: Any):
    """Factory function that returns the combined pages + API application."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "MemoryStorage",
    "Registration",
    "RegistrationInput",
    "Storage",
    "User",
    "create_application",
]
