from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from board_meeting.application.common import Actor
from board_meeting.application.use_cases.auth import AuthUseCase
from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.database.repositories.user_repository import UserRepository
from board_meeting.infrastructure.security.session_token_service import SessionTokenService
from board_meeting.infrastructure.supabase.auth import SupabaseAuthGateway
from board_meeting.presentation.api.v1.deps import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_auth_gateway,
    get_current_actor,
    get_token_service,
    get_user_repository,
)
from board_meeting.presentation.api.v1.responses import to_response
from board_meeting.presentation.schemas.agenda import LoginIn, TotpCodeIn

router = APIRouter()
logger = logging.getLogger(__name__)


def get_auth(
    repo: UserRepository = Depends(get_user_repository),
    gateway: SupabaseAuthGateway = Depends(get_auth_gateway),
    tokens: SessionTokenService = Depends(get_token_service),
) -> AuthUseCase:
    return AuthUseCase(repo=repo, gateway=gateway, tokens=tokens)


def set_session_cookies(response: JSONResponse, token: str, access_token: Optional[str] = None,
                        refresh_token: Optional[str] = None) -> None:
    settings = get_settings()
    options = {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
        "path": "/",
        "max_age": settings.session_duration_seconds,
    }
    response.set_cookie(settings.session_cookie_name, token, **options)
    if access_token:
        response.set_cookie(ACCESS_TOKEN_COOKIE, access_token, **options)
    if refresh_token:
        response.set_cookie(REFRESH_TOKEN_COOKIE, refresh_token, **options)


def clear_session_cookies(response: JSONResponse) -> None:
    for name in (get_settings().session_cookie_name, ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, path="/")


@router.post("/login", response_model=dict)
def login(request: Request, body: LoginIn = Body(...), auth: AuthUseCase = Depends(get_auth)):
    result = auth.login(
        body.email,
        body.password,
        totp_code=body.totp_code,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    if not result.success:
        return to_response(result)

    data = result.data
    response = JSONResponse(content={"success": True, "data": {"user": data["user"], "redirectTo": "/dashboard"}})
    set_session_cookies(response, data["token"], data["accessToken"], data["refreshToken"])
    return response


@router.post("/logout", response_model=dict)
def logout(request: Request, auth: AuthUseCase = Depends(get_auth)):
    auth.sign_out(request.cookies.get(ACCESS_TOKEN_COOKIE))
    response = JSONResponse(content={"success": True, "data": {"redirectTo": "/login"}})
    clear_session_cookies(response)
    return response


@router.get("/me", response_model=dict)
def me(actor: Optional[Actor] = Depends(get_current_actor), repo: UserRepository = Depends(get_user_repository)):
    if actor is None:
        raise HTTPException(status_code=401, detail="Sesi kadaluarsa.")
    user = repo.get(actor.user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Sesi kadaluarsa.")
    return {"success": True, "data": user.to_dict()}


@router.post("/2fa/setup", response_model=dict)
def setup_two_factor(actor: Optional[Actor] = Depends(get_current_actor), auth: AuthUseCase = Depends(get_auth)):
    return to_response(auth.start_two_factor(actor))


@router.post("/2fa/confirm", response_model=dict)
def confirm_two_factor(
    body: TotpCodeIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    auth: AuthUseCase = Depends(get_auth),
):
    return to_response(auth.confirm_two_factor(actor, body.code))


@router.post("/2fa/disable", response_model=dict)
def disable_two_factor(
    body: TotpCodeIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    auth: AuthUseCase = Depends(get_auth),
):
    return to_response(auth.disable_two_factor(actor, body.code))
