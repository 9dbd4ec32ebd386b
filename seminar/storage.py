"""Record store interface and the ephemeral in-process implementation."""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .models import Registration, RegistrationInput, User
from .security import hash_password


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class Storage(Protocol):
    """Capabilities every registration store provides."""

    def get_user(self, user_id: int) -> Optional[User]:
        ...

    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    def create_user(self, username: str, password: str) -> User:
        ...

    def create_registration(self, data: RegistrationInput) -> Registration:
        ...

    def get_all_registrations(self) -> List[Registration]:
        ...

    def get_registration_by_email(self, email: str) -> Optional[Registration]:
        ...


class MemoryStorage:
    """Keeps registrations in process memory; everything is lost on restart."""

    def __init__(self) -> None:
        self._registrations: Dict[int, Registration] = {}
        self._users: Dict[int, User] = {}
        self._next_registration_id = 1
        self._next_user_id = 1
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
        return None

    def create_user(self, username: str, password: str) -> User:
        cleaned = username.strip()
        if not cleaned:
            raise ValueError("Username must not be empty")
        password_hash = hash_password(password)

        with self._lock:
            if any(user.username == cleaned for user in self._users.values()):
                raise ValueError(f"A user named {cleaned!r} already exists")
            user = User(id=self._next_user_id, username=cleaned, password_hash=password_hash)
            self._users[user.id] = user
            self._next_user_id += 1
        return user

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    def create_registration(self, data: RegistrationInput) -> Registration:
        with self._lock:
            registration = Registration.from_input(
                data,
                id=self._next_registration_id,
                registered_at=_current_timestamp(),
            )
            self._registrations[registration.id] = registration
            self._next_registration_id += 1
        return registration

    def get_all_registrations(self) -> List[Registration]:
        with self._lock:
            return list(self._registrations.values())

    def get_registration_by_email(self, email: str) -> Optional[Registration]:
        with self._lock:
            for registration in self._registrations.values():
                if registration.email == email:
                    return registration
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)


__all__ = ["MemoryStorage", "Storage"]
