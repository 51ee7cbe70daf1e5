from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.security.session_token_service import SessionTokenService
from board_meeting.infrastructure.supabase.auth import ProviderSession, ProviderUser, SupabaseAuthGateway
from board_meeting.presentation.api.v1.deps import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"
STATIC_PREFIXES = ("/static", "/_next", "/_docs")


def is_static(path: str) -> bool:
    last = path.rsplit("/", 1)[-1]
    return path.startswith(STATIC_PREFIXES) or "." in last


def is_public(path: str) -> bool:
    return (
        path == "/"
        or path == LOGIN_PATH
        or path.startswith("/auth")
        or path == "/health"
        or path.startswith("/api/v1/auth")
        or path in ("/docs", "/redoc", "/openapi.json")
    )


def is_api(path: str) -> bool:
    return path.startswith("/api/")


class RoutingGuard(BaseHTTPMiddleware):
    """Keeps anonymous visitors on the login page and signed-in users off it.

    A request counts as signed in only when the auth provider knows the user
    and the session cookie verifies. Provider tokens are refreshed on the way
    through and the new cookies forwarded on whatever response goes out,
    redirects included. API calls are never redirected.
    """

    def __init__(self, app, gateway_factory: Optional[Callable[[], SupabaseAuthGateway]] = None,
                 tokens_factory: Optional[Callable[[], SessionTokenService]] = None):
        super().__init__(app)
        self._gateway_factory = gateway_factory or SupabaseAuthGateway
        self._tokens_factory = tokens_factory or _default_tokens

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if is_static(path) or is_api(path):
            return await call_next(request)

        user, refreshed = await self._provider_user(request)
        claims = self._session_claims(request.cookies.get(get_settings().session_cookie_name))
        signed_in = user is not None and claims is not None

        if not is_public(path) and not signed_in:
            logger.debug("[guard] redirect %s -> %s", path, LOGIN_PATH)
            response: Response = RedirectResponse(LOGIN_PATH, status_code=307)
        elif signed_in and path != "/" and (path == LOGIN_PATH or path.startswith("/auth")):
            response = RedirectResponse(HOME_PATH, status_code=307)
        else:
            response = await call_next(request)

        if refreshed is not None:
            _forward_tokens(response, refreshed)
        return response

    def _session_claims(self, token: Optional[str]):
        if not token:
            return None
        try:
            tokens = self._tokens_factory()
        except ValueError as e:
            logger.warning("[guard] session cookie ignored: %s", e)
            return None
        return tokens.decode(token)

    async def _provider_user(self, request: Request) -> Tuple[Optional[ProviderUser], Optional[ProviderSession]]:
        gateway = self._gateway_factory()
        access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        user = await run_in_threadpool(gateway.get_user, access_token) if access_token else None
        if user is not None:
            return user, None
        refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
        if not refresh_token:
            return None, None
        session = await run_in_threadpool(gateway.refresh, refresh_token)
        if session is None:
            return None, None
        return session.user, session


def _default_tokens() -> SessionTokenService:
    settings = get_settings()
    return SessionTokenService(settings.session_secret, settings.session_duration_seconds)


def _forward_tokens(response: Response, session: ProviderSession) -> None:
    settings = get_settings()
    options = {"httponly": True, "secure": settings.is_production, "samesite": "lax", "path": "/"}
    response.set_cookie(ACCESS_TOKEN_COOKIE, session.access_token, **options)
    response.set_cookie(REFRESH_TOKEN_COOKIE, session.refresh_token, **options)
