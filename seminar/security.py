"""Credential helpers for the admin dashboard."""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext

logger = logging.getLogger("seminar.security")

_pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a passlib hash suitable for ``SEMINAR_ADMIN_PASSWORD_HASH``."""

    if not password:
        raise ValueError("Password must not be empty")
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return _pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class AdminCredentials:
    """The single shared operator login.

    When ``password_hash`` is set it takes precedence over ``password``. When
    neither is configured every login attempt is rejected.
    """

    username: str
    password: Optional[str] = None
    password_hash: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.username) and bool(self.password_hash or self.password)

    def verify(self, username: str, password: str) -> bool:
        if not self.configured:
            return False

        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self.username.encode("utf-8")
        )
        if self.password_hash:
            password_ok = verify_password(password, self.password_hash)
        else:
            password_ok = secrets.compare_digest(
                password.encode("utf-8"), (self.password or "").encode("utf-8")
            )
        return username_ok and password_ok


__all__ = ["AdminCredentials", "hash_password", "verify_password"]
