"""Application factory that serves both the API and the pages."""
from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api import create_app as create_api_app
from .auth import AuthGate
from .config import Settings, load_settings
from .registration import RegistrationService
from .security import AdminCredentials
from .sessions import SessionManager
from .sheets import SheetsStorage
from .storage import MemoryStorage, Storage
from .web import create_app as create_web_app

logger = logging.getLogger("seminar.application")

API_PREFIX = "/api"


def build_storage(settings: Settings) -> Storage:
    """Instantiate the store selected by ``settings.storage_backend``."""

    if settings.storage_backend == "sheets":
        logger.info("Using Google Sheets storage (worksheet %s)", settings.sheets_worksheet)
        return SheetsStorage(
            settings.sheets_api_key or "",
            settings.sheets_spreadsheet_id or "",
            worksheet=settings.sheets_worksheet,
            timeout=settings.sheets_timeout,
        )
    logger.info("Using in-memory storage; registrations are lost on restart")
    return MemoryStorage()


def build_auth_gate(settings: Settings) -> AuthGate:
    if not settings.session_secret:
        raise RuntimeError("SEMINAR_SESSION_SECRET must be configured to run the service")

    credentials = AdminCredentials(
        username=settings.admin_username,
        password=settings.admin_password,
        password_hash=settings.admin_password_hash,
    )
    sessions = SessionManager(ttl=timedelta(hours=settings.session_ttl_hours))
    return AuthGate(credentials, sessions)


def create_application(
    settings: Optional[Settings] = None,
    *,
    storage: Optional[Storage] = None,
) -> FastAPI:
    """Create the combined ASGI application."""

    if settings is None:
        settings = load_settings()

    gate = build_auth_gate(settings)
    store = storage if storage is not None else build_storage(settings)
    service = RegistrationService(store)

    if not settings.session_secure:
        logger.warning(
            "Session cookies are not marked as secure. Only disable secure cookies for"
            " local development."
        )

    api_app = create_api_app(
        service=service,
        gate=gate,
        session_secret=settings.session_secret or "",
        secure_cookies=settings.session_secure,
    )
    web_app = create_web_app(api_base_path=API_PREFIX)

    app = FastAPI(
        title="Seminar Registration",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.trusted_proxy_hosts())
    app.state.settings = settings
    app.state.storage = store
    app.state.registration_service = service
    app.state.auth_gate = gate
    app.state.api = api_app
    app.state.web = web_app

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith(API_PREFIX):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s in %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        return response

    app.mount(API_PREFIX, api_app)
    app.mount("/", web_app)

    return app


__all__ = ["API_PREFIX", "build_auth_gate", "build_storage", "create_application"]
