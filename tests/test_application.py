import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from seminar import create_application
from seminar.application import build_storage
from seminar.config import Settings
from seminar.sheets import SheetsStorage
from seminar.storage import MemoryStorage


PASSWORD = "seminar-admin-password"


def _settings(**overrides) -> Settings:
    values = {"session_secret": "tests-secret", "admin_password": PASSWORD}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def client() -> TestClient:
    app = create_application(_settings(), storage=MemoryStorage())
    with TestClient(app) as test_client:
        yield test_client


def test_pages_are_served(client: TestClient) -> None:
    home = client.get("/")
    assert home.status_code == 200
    assert home.headers["content-type"].startswith("text/html")
    assert "/api/registrations" in home.text

    admin = client.get("/admin")
    assert admin.status_code == 200
    assert 'href="/api/registrations/export"' in admin.text


def test_api_is_mounted_under_prefix(client: TestClient) -> None:
    response = client.post(
        "/api/registrations",
        json={"firstName": "Ann", "lastName": "Lee", "email": "ann@example.com"},
    )
    assert response.status_code == 201

    assert client.get("/api/registrations").status_code == 401

    login = client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})
    assert login.status_code == 200

    listing = client.get("/api/registrations")
    assert listing.status_code == 200
    assert [item["email"] for item in listing.json()["data"]] == ["ann@example.com"]


def test_secure_cookie_flag_follows_settings() -> None:
    app = create_application(_settings(session_secure=True), storage=MemoryStorage())
    with TestClient(app, base_url="https://testserver") as client:
        login = client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})

    cookie = login.headers["set-cookie"].lower()
    assert "secure" in cookie
    assert "httponly" in cookie


def test_session_secret_is_required() -> None:
    with pytest.raises(RuntimeError):
        create_application(Settings(admin_password=PASSWORD), storage=MemoryStorage())


def test_build_storage_selects_backend() -> None:
    assert isinstance(build_storage(Settings()), MemoryStorage)

    storage = build_storage(
        Settings(
            storage_backend="sheets",
            sheets_api_key="key",
            sheets_spreadsheet_id="sheet",
        )
    )
    try:
        assert isinstance(storage, SheetsStorage)
    finally:
        storage.close()
