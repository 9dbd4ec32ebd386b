"""Configuration management for the seminar signup service."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

STORAGE_BACKENDS = ("memory", "sheets")

# Environment variables that override the matching ``Settings`` field.
ENVIRONMENT_KEYS: Dict[str, str] = {
    "storage_backend": "SEMINAR_STORAGE",
    "session_secret": "SEMINAR_SESSION_SECRET",
    "session_ttl_hours": "SEMINAR_SESSION_TTL_HOURS",
    "session_secure": "SEMINAR_SESSION_SECURE",
    "admin_username": "SEMINAR_ADMIN_USERNAME",
    "admin_password": "SEMINAR_ADMIN_PASSWORD",
    "admin_password_hash": "SEMINAR_ADMIN_PASSWORD_HASH",
    "sheets_api_key": "GOOGLE_SHEETS_API_KEY",
    "sheets_spreadsheet_id": "GOOGLE_SHEET_ID",
    "sheets_worksheet": "SEMINAR_SHEETS_WORKSHEET",
    "sheets_timeout": "SEMINAR_SHEETS_TIMEOUT",
    "trusted_proxies": "SEMINAR_TRUSTED_PROXIES",
}


def _env_flag(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _positive_number(name: str, value: object, default: float) -> float:
    if value is None or str(value).strip() == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric value {value!r} for {name}") from exc
    if number <= 0:
        raise ValueError(f"{name} must be greater than zero")
    return number


@dataclass(frozen=True)
class Settings:
    """Runtime configuration; credential fields have no usable defaults."""

    storage_backend: str = "memory"
    session_secret: Optional[str] = None
    session_ttl_hours: float = 24.0
    session_secure: bool = False
    admin_username: str = "admin"
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None
    sheets_api_key: Optional[str] = None
    sheets_spreadsheet_id: Optional[str] = None
    sheets_worksheet: str = "Sheet1"
    sheets_timeout: float = 10.0
    trusted_proxies: str = "*"

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from raw values, validating as we go."""

        known = {field.name for field in fields(Settings)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        backend = str(data.get("storage_backend") or "memory").strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend {backend!r}; choose one of {', '.join(STORAGE_BACKENDS)}"
            )

        settings = Settings(
            storage_backend=backend,
            session_secret=_optional_str(data.get("session_secret")),
            session_ttl_hours=_positive_number(
                "session_ttl_hours", data.get("session_ttl_hours"), 24.0
            ),
            session_secure=_env_flag(data.get("session_secure"), False),
            admin_username=_optional_str(data.get("admin_username")) or "admin",
            admin_password=_optional_str(data.get("admin_password")),
            admin_password_hash=_optional_str(data.get("admin_password_hash")),
            sheets_api_key=_optional_str(data.get("sheets_api_key")),
            sheets_spreadsheet_id=_optional_str(data.get("sheets_spreadsheet_id")),
            sheets_worksheet=_optional_str(data.get("sheets_worksheet")) or "Sheet1",
            sheets_timeout=_positive_number("sheets_timeout", data.get("sheets_timeout"), 10.0),
            trusted_proxies=_optional_str(data.get("trusted_proxies")) or "*",
        )

        if settings.storage_backend == "sheets" and not (
            settings.sheets_api_key and settings.sheets_spreadsheet_id
        ):
            raise ValueError(
                "The sheets storage backend requires GOOGLE_SHEETS_API_KEY and GOOGLE_SHEET_ID"
            )
        return settings

    def trusted_proxy_hosts(self) -> list[str] | str:
        hosts = [item.strip() for item in self.trusted_proxies.split(",") if item.strip()]
        if not hosts or hosts == ["*"]:
            return "*"
        return hosts


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "seminar.yaml").resolve(
            strict=False
        )
    return candidate


def load_config_file(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> Settings:
    """Load settings from the YAML file (when present) overlaid by the environment."""

    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("SEMINAR_CONFIG"))

    data: Dict[str, object] = {}
    if path.is_file():
        data.update(load_config_file(path))
    elif config_path is not None:
        raise FileNotFoundError(f"Configuration file {config_path} does not exist")

    for field_name, env_key in ENVIRONMENT_KEYS.items():
        value = env.get(env_key)
        if value is not None and value.strip() != "":
            data[field_name] = value

    return Settings.from_dict(data)


__all__ = [
    "ENVIRONMENT_KEYS",
    "STORAGE_BACKENDS",
    "Settings",
    "load_config_file",
    "load_settings",
    "resolve_config_path",
]
