from __future__ import annotations

import base64
import hmac
import json
import time
from dataclasses import dataclass
from hashlib import sha256
from typing import Any, Dict, Optional


class SessionTokenError(Exception):
    """Raised when a session cookie cannot be decoded or validated."""


# allowed drift between the issuing clock and ours
CLOCK_SKEW_SECONDS = 60


def _segment(data: Any) -> str:
    """JSON or raw bytes as an unpadded base64url token segment."""
    raw = data if isinstance(data, bytes) else json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unsegment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment.encode("ascii") + b"=" * (-len(segment) % 4))


_HEADER = _segment({"alg": "HS256", "typ": "JWT"})


@dataclass
class SessionClaims:
    user_id: str
    role: Optional[str]
    exp: int
    iat: int

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionClaims":
        try:
            user_id = str(payload["userId"])
            exp = int(payload["exp"])
            iat = int(payload["iat"])
        except (KeyError, TypeError, ValueError) as exc:
            raise SessionTokenError(f"Missing or invalid claim: {exc}") from exc
        if not user_id:
            raise SessionTokenError("Empty userId claim")
        return cls(user_id=user_id, role=payload.get("role"), exp=exp, iat=iat)


class SessionTokenService:
    """Signs and verifies the HS256 token kept in the `session` cookie."""

    def __init__(self, secret: str, duration_seconds: int = 60 * 60 * 24 * 7):
        if not secret:
            raise ValueError("SESSION_SECRET is not configured")
        self._secret = secret.encode("utf-8")
        self.duration_seconds = duration_seconds

    def issue(self, user_id: str, role: Optional[str], now: Optional[int] = None) -> str:
        iat = int(now if now is not None else time.time())
        return self.sign({"userId": user_id, "role": role, "iat": iat, "exp": iat + self.duration_seconds})

    def sign(self, payload: Dict[str, Any]) -> str:
        body = f"{_HEADER}.{_segment(payload)}"
        return f"{body}.{_segment(self._mac(body))}"

    def _mac(self, body: str) -> bytes:
        return hmac.new(self._secret, body.encode("ascii"), sha256).digest()

    def verify(self, token: str, now: Optional[int] = None) -> SessionClaims:
        parts = token.split(".") if isinstance(token, str) else []
        if len(parts) != 3:
            raise SessionTokenError("Invalid token format")
        body, signature = token.rsplit(".", 1)
        try:
            valid = hmac.compare_digest(self._mac(body), _unsegment(signature))
            header = json.loads(_unsegment(parts[0]))
            payload = json.loads(_unsegment(parts[1]))
        except ValueError as exc:
            raise SessionTokenError("Malformed token") from exc
        if not valid:
            raise SessionTokenError("Invalid token signature")
        if not isinstance(header, dict) or header.get("alg") != "HS256":
            raise SessionTokenError("Unsupported signing algorithm")

        claims = SessionClaims.from_payload(payload)
        current = int(time.time()) if now is None else int(now)
        if current > claims.exp:
            raise SessionTokenError("Token expired")
        if claims.iat - CLOCK_SKEW_SECONDS > current:
            raise SessionTokenError("Token not yet valid")
        return claims

    def decode(self, token: Optional[str]) -> Optional[SessionClaims]:
        """verify() that returns None instead of raising."""
        if not token:
            return None
        try:
            return self.verify(token)
        except SessionTokenError:
            return None
