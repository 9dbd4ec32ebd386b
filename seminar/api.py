"""JSON API for registrations and the admin session."""
from __future__ import annotations

import json
import logging
from typing import Dict, Optional, Tuple

import anyio
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .auth import (
    SESSION_COOKIE_NAME,
    SESSION_ID_KEY,
    AuthGate,
    RequireAuth,
    session_id_from_request,
)
from .errors import InvalidCredentials, SeminarError, ValidationError
from .export import CSV_CONTENT_TYPE, export_filename
from .registration import RegistrationService

logger = logging.getLogger("seminar.api")


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


async def _read_json(request: Request) -> object:
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError(
            [{"field": "__root__", "message": "Request body must be valid JSON"}]
        ) from None


def _parse_credentials(payload: object) -> Tuple[str, str]:
    if not isinstance(payload, dict):
        return "", ""
    username = payload.get("username")
    password = payload.get("password")
    return (
        username if isinstance(username, str) else "",
        password if isinstance(password, str) else "",
    )


def create_app(
    *,
    service: RegistrationService,
    gate: AuthGate,
    session_secret: str,
    secure_cookies: bool = False,
) -> FastAPI:
    """Create the JSON API application.

    The session cookie is signed by ``SessionMiddleware`` and only carries the
    server-side session id; login state itself never leaves the process.
    """

    if not session_secret:
        raise ValueError("A session secret is required")

    app = FastAPI(
        title="Seminar Registration API",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=gate.sessions.cookie_max_age,
        same_site="lax",
        https_only=secure_cookies,
    )
    app.state.registration_service = service
    app.state.auth_gate = gate

    require_auth = RequireAuth(gate)

    @app.exception_handler(SeminarError)
    async def handle_seminar_error(request: Request, exc: SeminarError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "%s while handling %s %s: %s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
            )
        body: Dict[str, object] = {"success": False, "message": exc.response_message()}
        if isinstance(exc, ValidationError):
            body["errors"] = exc.errors
        return JSONResponse(body, status_code=exc.status_code)

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    @app.post("/registrations", name="create_registration")
    async def create_registration(request: Request):
        payload = await _read_json(request)
        try:
            registration = await anyio.to_thread.run_sync(service.register, payload)
        except SeminarError:
            raise
        except Exception:
            logger.exception("Registration error")
            return _error_response(
                "An error occurred during registration. Please try again.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return JSONResponse(
            {
                "success": True,
                "message": "Registration successful!",
                "data": registration.to_view(),
            },
            status_code=status.HTTP_201_CREATED,
        )

    @app.get("/registrations", name="list_registrations", dependencies=[Depends(require_auth)])
    async def list_registrations():
        try:
            registrations = await anyio.to_thread.run_sync(service.list_registrations)
        except SeminarError:
            raise
        except Exception:
            logger.exception("Error fetching registrations")
            return _error_response(
                "Error fetching registrations", status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return {"success": True, "data": [item.to_view() for item in registrations]}

    @app.get(
        "/registrations/export",
        name="export_registrations",
        dependencies=[Depends(require_auth)],
    )
    async def export_registrations():
        try:
            content = await anyio.to_thread.run_sync(service.export_csv)
        except SeminarError:
            raise
        except Exception:
            logger.exception("Error exporting registrations")
            return _error_response(
                "Error exporting registrations", status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        # One header line, then one line per registration.
        logger.info("Exported %d registration(s)", content.count("\n"))
        return Response(
            content=content,
            media_type=CSV_CONTENT_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{export_filename()}"',
            },
        )

    # ------------------------------------------------------------------
    # Admin session
    # ------------------------------------------------------------------
    @app.post("/auth/login", name="login")
    async def login(request: Request):
        try:
            payload = await _read_json(request)
        except ValidationError:
            payload = None
        username, password = _parse_credentials(payload)

        try:
            session_id = gate.login(session_id_from_request(request), username, password)
        except InvalidCredentials:
            raise
        except Exception:
            logger.exception("Login error")
            return _error_response("Login error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)

        request.session.clear()
        request.session[SESSION_ID_KEY] = session_id
        return {"success": True, "message": "Login successful"}

    @app.post("/auth/logout", name="logout")
    async def logout(request: Request):
        gate.logout(session_id_from_request(request))
        request.session.clear()
        return {"success": True, "message": "Logged out successfully"}

    @app.get("/auth/status", name="auth_status")
    async def auth_status(request: Request):
        state = gate.status(session_id_from_request(request))
        username: Optional[str] = state.username if state.is_authenticated else None
        return {
            "success": True,
            "isAuthenticated": state.is_authenticated,
            "username": username,
        }

    return app


__all__ = ["create_app"]
