"""
FastAPI routes for the company signup and Gmail consent flow.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import HTMLResponse, RedirectResponse

from gmail_connect.core.errors import SignupValidationError
from gmail_connect.dependencies import (
    SettingsDependency,
    get_connection_recorder,
    get_signup_flow_service,
)
from gmail_connect.schemas import SignupIntent
from gmail_connect.web import render_index, render_legal, render_success

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/", response_class=HTMLResponse)
async def signup_form(settings: SettingsDependency) -> HTMLResponse:
    return HTMLResponse(
        render_index(
            google_configured=settings.google.is_configured,
            store_configured=settings.supabase.is_configured,
        )
    )


@router.post("/register")
async def register_company(
    flow: Annotated[Any, Depends(get_signup_flow_service)],
    company_name: Annotated[str, Form(alias="companyName")] = "",
    contact_email: Annotated[str, Form(alias="contactEmail")] = "",
) -> RedirectResponse:
    """Mint a signed state for the signup and send the browser to ``/auth/google``."""
    company_name = company_name.strip()
    contact_email = contact_email.strip()
    if not company_name or not contact_email:
        raise SignupValidationError()

    intent = SignupIntent(company_name=company_name, contact_email=contact_email)
    state = flow.mint_state(intent)
    logger.info("Signup started for %s.", company_name)
    return RedirectResponse(
        url=f"/auth/google?{urlencode({'state': state})}",
        status_code=HTTPStatus.FOUND,
    )


@router.get("/auth/google")
async def start_google_oauth_flow(
    flow: Annotated[Any, Depends(get_signup_flow_service)],
    state: Optional[str] = Query(default=None, description="Signed signup state."),
) -> RedirectResponse:
    """Redirect to the Google consent screen carrying the signup state."""
    authorization_url = flow.authorization_url(state)
    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/auth/google/callback", response_class=HTMLResponse)
async def handle_google_oauth_callback(
    flow: Annotated[Any, Depends(get_signup_flow_service)],
    recorder: Annotated[Any, Depends(get_connection_recorder)],
    code: Optional[str] = Query(default=None, description="Authorization code."),
    state: Optional[str] = Query(default=None, description="Signed signup state."),
    error: Optional[str] = Query(default=None, description="Error reported by Google."),
) -> HTMLResponse:
    """Verify the state, exchange the code and forward the connection."""
    completed = await flow.complete_auth(code=code, state=state, error=error)
    result = await recorder.record(completed.intent, completed.grant)

    return HTMLResponse(
        render_success(
            company_name=completed.intent.company_name,
            user_email=completed.grant.google_email,
            saved=result.saved,
        )
    )


@router.get("/mentions-legales", response_class=HTMLResponse)
async def legal_notice() -> HTMLResponse:
    return HTMLResponse(render_legal())


__all__ = ["router"]
