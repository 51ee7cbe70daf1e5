from __future__ import annotations

import logging
import re
from typing import Optional

from board_meeting.application.common import SESSION_EXPIRED, Actor
from board_meeting.application.results import ActionResult, action
from board_meeting.domain.entities.errors import AuthenticationError, ConflictError, ValidationError
from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.database.connection import get_database
from board_meeting.infrastructure.database.repositories.user_repository import UserRepository
from board_meeting.infrastructure.security import totp
from board_meeting.infrastructure.security.secret_cipher import SecretCipher
from board_meeting.infrastructure.security.session_token_service import SessionTokenService
from board_meeting.infrastructure.supabase.auth import SupabaseAuthGateway

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class AuthUseCase:
    """Email/password login with optional TOTP, plus 2FA enrolment."""

    def __init__(self, repo: Optional[UserRepository] = None, gateway: Optional[SupabaseAuthGateway] = None,
                 tokens: Optional[SessionTokenService] = None, cipher: Optional[SecretCipher] = None):
        self._repo = repo
        self._gateway = gateway
        self._tokens = tokens
        self._cipher = cipher

    @property
    def repo(self) -> UserRepository:
        if self._repo is None:
            self._repo = UserRepository(get_database().session())
        return self._repo

    @property
    def gateway(self) -> SupabaseAuthGateway:
        if self._gateway is None:
            self._gateway = SupabaseAuthGateway()
        return self._gateway

    @property
    def tokens(self) -> SessionTokenService:
        if self._tokens is None:
            settings = get_settings()
            self._tokens = SessionTokenService(settings.session_secret, settings.session_duration_seconds)
        return self._tokens

    @property
    def cipher(self) -> SecretCipher:
        if self._cipher is None:
            self._cipher = SecretCipher(get_settings().encryption_key)
        return self._cipher

    def _record(self, email: str, success: bool, reason: Optional[str] = None, user_id: Optional[str] = None,
                ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> None:
        self.repo.add_login_log(email, success, user_id=user_id, reason=reason,
                                ip_address=ip_address, user_agent=user_agent)
        self.repo.commit()

    @action("login", "Login gagal.")
    def login(self, email: Optional[str], password: Optional[str], totp_code: Optional[str] = None,
              ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> ActionResult:
        email = (email or "").strip().lower()
        meta = {"ip_address": ip_address, "user_agent": user_agent}
        if not _EMAIL_RE.match(email) or len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError("Data tidak valid")

        try:
            session = self.gateway.sign_in(email, password)
        except AuthenticationError as e:
            self._record(email, False, reason=str(e), **meta)
            raise

        user = self.repo.upsert_profile(session.user.id, session.user.email or email,
                                        session.user.full_name, session.user.avatar_url)
        if user.two_factor_enabled:
            if not totp_code:
                self._record(email, False, reason="2fa_required", user_id=user.id, **meta)
                return ActionResult(success=False, error="Kode 2FA diperlukan.", kind="unauthenticated",
                                    data={"requiresTwoFactor": True})
            secret = self.cipher.decrypt(user.two_factor_secret or "")
            if not totp.verify_code(secret, totp_code):
                self._record(email, False, reason="2fa_invalid", user_id=user.id, **meta)
                raise AuthenticationError("Kode 2FA tidak valid.")

        self._record(email, True, user_id=user.id, **meta)
        logger.info("[login] user %s signed in", user.id)
        return ActionResult.ok(data={
            "token": self.tokens.issue(user.id, user.role),
            "accessToken": session.access_token,
            "refreshToken": session.refresh_token,
            "user": user.to_dict(),
        })

    def sign_out(self, access_token: Optional[str]) -> ActionResult:
        self.gateway.sign_out(access_token)
        return ActionResult.ok()

    def _user_for(self, actor: Optional[Actor]):
        if actor is None or not actor.user_id:
            raise AuthenticationError(SESSION_EXPIRED)
        user = self.repo.get(actor.user_id)
        if user is None:
            raise AuthenticationError(SESSION_EXPIRED)
        return user

    @action("2fa-setup", "Gagal menyiapkan 2FA.")
    def start_two_factor(self, actor: Optional[Actor]) -> ActionResult:
        user = self._user_for(actor)
        if user.two_factor_enabled:
            raise ConflictError("2FA sudah aktif.")
        secret = totp.generate_secret()
        user.two_factor_secret = self.cipher.encrypt(secret)
        self.repo.commit()
        uri = totp.provisioning_uri(secret, user.email, get_settings().totp_issuer)
        return ActionResult.ok(data={"secret": secret, "otpauthUrl": uri})

    @action("2fa-confirm", "Gagal mengaktifkan 2FA.")
    def confirm_two_factor(self, actor: Optional[Actor], code: Optional[str]) -> ActionResult:
        user = self._user_for(actor)
        if not user.two_factor_secret:
            raise ValidationError("2FA belum disiapkan.")
        if not totp.verify_code(self.cipher.decrypt(user.two_factor_secret), code):
            raise ValidationError("Kode 2FA tidak valid.")
        user.two_factor_enabled = True
        self.repo.commit()
        logger.info("[2fa] enabled for user %s", user.id)
        return ActionResult.ok(message="2FA berhasil diaktifkan.")

    @action("2fa-disable", "Gagal menonaktifkan 2FA.")
    def disable_two_factor(self, actor: Optional[Actor], code: Optional[str]) -> ActionResult:
        user = self._user_for(actor)
        if not user.two_factor_enabled:
            raise ConflictError("2FA belum aktif.")
        if not totp.verify_code(self.cipher.decrypt(user.two_factor_secret or ""), code):
            raise ValidationError("Kode 2FA tidak valid.")
        user.two_factor_enabled = False
        user.two_factor_secret = None
        self.repo.commit()
        logger.info("[2fa] disabled for user %s", user.id)
        return ActionResult.ok(message="2FA berhasil dinonaktifkan.")
