"""
FastAPI application entrypoint for the Gmail signup service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from gmail_connect.api.routes import router
from gmail_connect.core.config import AppSettings, get_settings
from gmail_connect.core.errors import SignupError
from gmail_connect.core.logging import configure_logging
from gmail_connect.web import render_error

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def _register_exception_handlers(app: FastAPI, settings: AppSettings) -> None:
    @app.exception_handler(SignupError)
    async def signup_error_handler(request: Request, exc: SignupError) -> HTMLResponse:
        if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        detail = exc.detail if settings.is_development else None
        return HTMLResponse(
            render_error(exc.title, exc.message, detail),
            status_code=exc.status_code,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> HTMLResponse:
        if exc.status_code == HTTPStatus.NOT_FOUND:
            title = "Page introuvable"
            message = "La page que vous recherchez n'existe pas."
        else:
            title = "Requête invalide"
            message = "La requête n'a pas pu être traitée."
        return HTMLResponse(
            render_error(title, message), status_code=exc.status_code, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        detail = repr(exc) if settings.is_development else None
        return HTMLResponse(
            render_error(SignupError.title, SignupError.message, detail),
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Gmail Connect",
        version="0.1.0",
        description="Company signup with Google OAuth consent for Gmail access.",
        docs_url=None,
        redoc_url=None,
    )
    _register_exception_handlers(app, settings)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(router)

    if not settings.google.is_configured:
        logger.warning("Google OAuth client is not configured; signups will fail.")
    if not settings.supabase.is_configured:
        logger.warning("Supabase is not configured; connections will not be recorded.")
    return app


app = create_app()

__all__ = ["app", "create_app"]
