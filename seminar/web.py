"""Landing page and admin dashboard pages."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def create_app(*, api_base_path: str = "/api", title: str = "Seminar Registration") -> FastAPI:
    """Create the page-rendering application.

    The pages are static shells; the browser talks to the JSON API under
    ``api_base_path`` for everything else.
    """

    app = FastAPI(title=title, docs_url=None, redoc_url=None, openapi_url=None)

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    templates.env.globals["api_base_path"] = api_base_path.rstrip("/")
    templates.env.globals["site_title"] = title

    @app.get("/", response_class=HTMLResponse, name="home")
    async def home(request: Request):
        return templates.TemplateResponse(request, "index.html", {})

    @app.get("/admin", response_class=HTMLResponse, name="admin")
    async def admin(request: Request):
        return templates.TemplateResponse(request, "admin.html", {})

    return app


__all__ = ["TEMPLATE_DIR", "create_app"]
