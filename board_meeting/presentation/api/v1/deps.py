from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from board_meeting.application.common import SESSION_EXPIRED, Actor
from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.database.connection import get_database_session
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.database.repositories.user_repository import UserRepository
from board_meeting.infrastructure.documents.minutes_renderer import MinutesRenderer
from board_meeting.infrastructure.security.session_token_service import SessionTokenService
from board_meeting.infrastructure.supabase.auth import SupabaseAuthGateway
from board_meeting.infrastructure.supabase.storage import AgendaStorage

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"


def get_session() -> Generator[Session, None, None]:
    yield from get_database_session()


def get_agenda_repository(session: Session = Depends(get_session)) -> AgendaRepository:
    return AgendaRepository(session)


def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)


def get_storage() -> AgendaStorage:
    return AgendaStorage()


def get_auth_gateway() -> SupabaseAuthGateway:
    return SupabaseAuthGateway()


def get_minutes_renderer() -> MinutesRenderer:
    return MinutesRenderer()


def get_token_service() -> SessionTokenService:
    settings = get_settings()
    return SessionTokenService(settings.session_secret, settings.session_duration_seconds)


def get_current_actor(
    request: Request,
    tokens: SessionTokenService = Depends(get_token_service),
) -> Optional[Actor]:
    """Actor from the session cookie, or None. Actions decide what None means."""
    claims = tokens.decode(request.cookies.get(get_settings().session_cookie_name))
    if claims is None:
        return None
    return Actor(user_id=claims.user_id, role=claims.role)


def require_actor(actor: Optional[Actor] = Depends(get_current_actor)) -> Actor:
    """Signed-in actor or 401; mounted on every router except auth."""
    if actor is None:
        raise HTTPException(status_code=401, detail=SESSION_EXPIRED)
    return actor
