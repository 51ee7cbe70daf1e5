from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from board_meeting.domain.entities.errors import AuthenticationError
from board_meeting.infrastructure.supabase.client import new_auth_client

logger = logging.getLogger(__name__)


@dataclass
class ProviderUser:
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass
class ProviderSession:
    user: ProviderUser
    access_token: str
    refresh_token: str


def _to_user(user) -> ProviderUser:
    meta = getattr(user, "user_metadata", None) or {}
    return ProviderUser(
        id=str(user.id),
        email=str(getattr(user, "email", "") or ""),
        full_name=meta.get("full_name") or meta.get("name"),
        avatar_url=meta.get("avatar_url"),
    )


class SupabaseAuthGateway:
    """Email/password auth against Supabase Auth."""

    def sign_in(self, email: str, password: str) -> ProviderSession:
        client = new_auth_client()
        try:
            res = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.info("[auth] sign in rejected email=%s: %s", email, e)
            raise AuthenticationError(str(e)) from e
        if not res.user or not res.session:
            raise AuthenticationError("Email atau password salah.")
        return ProviderSession(
            user=_to_user(res.user),
            access_token=res.session.access_token,
            refresh_token=res.session.refresh_token,
        )

    def get_user(self, access_token: Optional[str]) -> Optional[ProviderUser]:
        if not access_token:
            return None
        try:
            res = new_auth_client().auth.get_user(access_token)
        except Exception as e:
            logger.debug("[auth] access token rejected: %s", e)
            return None
        user = getattr(res, "user", None)
        return _to_user(user) if user else None

    def refresh(self, refresh_token: Optional[str]) -> Optional[ProviderSession]:
        if not refresh_token:
            return None
        try:
            res = new_auth_client().auth.refresh_session(refresh_token)
        except Exception as e:
            logger.debug("[auth] refresh failed: %s", e)
            return None
        if not res.user or not res.session:
            return None
        return ProviderSession(
            user=_to_user(res.user),
            access_token=res.session.access_token,
            refresh_token=res.session.refresh_token,
        )

    def sign_out(self, access_token: Optional[str]) -> None:
        if not access_token:
            return
        try:
            new_auth_client().auth.admin.sign_out(access_token)
        except Exception as e:
            logger.warning("[auth] provider sign out failed: %s", e)
