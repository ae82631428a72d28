"""Admin login and session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from sandglobal.auth import login
from sandglobal.config import SandGlobalConfig
from sandglobal.dependencies import bearer_token, get_auth_provider, get_config
from sandglobal.exceptions import AuthenticationError
from sandglobal.schemas import LoginRequest, SessionResponse

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=SessionResponse)
async def sign_in(
    body: LoginRequest,
    auth=Depends(get_auth_provider),
    config: SandGlobalConfig = Depends(get_config),
) -> SessionResponse:
    session = await login(
        auth,
        body.email,
        body.password,
        timeout=config.login_timeout_seconds,
    )
    return SessionResponse(
        authenticated=True,
        email=session.email,
        demo=session.demo,
        access_token=session.access_token,
    )


@router.get("/session", response_model=SessionResponse)
async def current_session(
    request: Request,
    auth=Depends(get_auth_provider),
) -> SessionResponse:
    session = await auth.get_session(bearer_token(request))
    if session is None:
        raise AuthenticationError("Authentication required")
    return SessionResponse(
        authenticated=True,
        email=session.email,
        demo=session.demo,
        access_token=session.access_token,
    )
