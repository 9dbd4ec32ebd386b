from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from seminar.config import Settings, load_settings, resolve_config_path


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "seminar.yaml"
    path.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
    return path


def test_defaults_without_file_or_environment(tmp_path: Path) -> None:
    settings = load_settings({"SEMINAR_CONFIG": str(tmp_path / "missing.yaml")})

    assert settings == Settings()
    assert settings.storage_backend == "memory"
    assert settings.session_secret is None
    assert settings.admin_password is None
    assert settings.session_ttl_hours == 24.0


def test_environment_overrides(tmp_path: Path) -> None:
    settings = load_settings(
        {
            "SEMINAR_CONFIG": str(tmp_path / "missing.yaml"),
            "SEMINAR_SESSION_SECRET": "s3cret",
            "SEMINAR_ADMIN_USERNAME": "operator",
            "SEMINAR_ADMIN_PASSWORD": "pw",
            "SEMINAR_SESSION_SECURE": "yes",
            "SEMINAR_SESSION_TTL_HOURS": "12",
            "SEMINAR_TRUSTED_PROXIES": "10.0.0.1, 10.0.0.2",
        }
    )

    assert settings.session_secret == "s3cret"
    assert settings.admin_username == "operator"
    assert settings.admin_password == "pw"
    assert settings.session_secure is True
    assert settings.session_ttl_hours == 12.0
    assert settings.trusted_proxy_hosts() == ["10.0.0.1", "10.0.0.2"]


def test_yaml_file_is_overlaid_by_environment(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        {
            "storage_backend": "sheets",
            "sheets_api_key": "file-key",
            "sheets_spreadsheet_id": "file-sheet",
            "sheets_timeout": 5,
            "session_secure": True,
        },
    )

    settings = load_settings({"GOOGLE_SHEETS_API_KEY": "env-key"}, config_path=path)

    assert settings.storage_backend == "sheets"
    assert settings.sheets_api_key == "env-key"
    assert settings.sheets_spreadsheet_id == "file-sheet"
    assert settings.sheets_timeout == 5.0
    assert settings.session_secure is True
    assert settings.trusted_proxy_hosts() == "*"


def test_blank_environment_values_are_ignored(tmp_path: Path) -> None:
    path = _write_config(tmp_path, {"admin_username": "operator"})
    settings = load_settings({"SEMINAR_ADMIN_USERNAME": "  "}, config_path=path)
    assert settings.admin_username == "operator"


def test_sheets_backend_requires_credentials(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_settings(
            {"SEMINAR_CONFIG": str(tmp_path / "missing.yaml"), "SEMINAR_STORAGE": "sheets"}
        )


@pytest.mark.parametrize(
    "data",
    [
        {"storage_backend": "postgres"},
        {"sheets_timeout": "soon"},
        {"session_ttl_hours": 0},
        {"unknown_key": 1},
    ],
)
def test_invalid_values_rejected(data: dict) -> None:
    with pytest.raises(ValueError):
        Settings.from_dict(data)


def test_explicit_missing_config_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings({}, config_path=tmp_path / "nope.yaml")


def test_non_mapping_config_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "seminar.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings({}, config_path=path)


def test_resolve_config_path(tmp_path: Path) -> None:
    assert resolve_config_path(str(tmp_path / "x.yaml")) == (tmp_path / "x.yaml").resolve()
    assert resolve_config_path(None).name == "seminar.yaml"
