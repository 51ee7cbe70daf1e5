"""
Unit tests for the session cookie token, 2FA helpers and secret encryption
"""
import pyotp
import pytest
from cryptography.fernet import Fernet

from board_meeting.infrastructure.security import totp
from board_meeting.infrastructure.security.secret_cipher import SecretCipher
from board_meeting.infrastructure.security.session_token_service import SessionTokenError, SessionTokenService

NOW = 1_767_600_000


class TestSessionTokenService:
    @pytest.fixture
    def service(self):
        return SessionTokenService("unit-test-secret", duration_seconds=3600)

    def test_issue_and_verify(self, service):
        token = service.issue("user-1", "admin", now=NOW)
        claims = service.verify(token, now=NOW + 10)
        assert (claims.user_id, claims.role, claims.exp) == ("user-1", "admin", NOW + 3600)

    def test_expired(self, service):
        token = service.issue("user-1", None, now=NOW)
        with pytest.raises(SessionTokenError, match="expired"):
            service.verify(token, now=NOW + 3601)

    def test_issued_in_future(self, service):
        token = service.issue("user-1", None, now=NOW + 600)
        with pytest.raises(SessionTokenError, match="not yet valid"):
            service.verify(token, now=NOW)

    def test_tampered_payload(self, service):
        header, _, signature = service.issue("user-1", "user", now=NOW).split(".")
        forged = service.sign({"userId": "user-2", "role": "admin", "iat": NOW, "exp": NOW + 3600}).split(".")[1]
        with pytest.raises(SessionTokenError, match="signature"):
            service.verify(f"{header}.{forged}.{signature}", now=NOW)

    def test_other_secret(self, service):
        token = SessionTokenService("another-secret").issue("user-1", None)
        assert service.decode(token) is None

    @pytest.mark.parametrize("token", [None, "", "abc", "a.b.c", "a.b.c.d", "\u00e4.b.c"])
    def test_decode_garbage(self, service, token):
        assert service.decode(token) is None

    def test_missing_user_claim(self, service):
        token = service.sign({"role": "admin", "iat": NOW, "exp": NOW + 10})
        with pytest.raises(SessionTokenError):
            service.verify(token, now=NOW)

    def test_secret_required(self):
        with pytest.raises(ValueError):
            SessionTokenService("")


class TestTotp:
    def test_current_code(self):
        secret = totp.generate_secret()
        assert totp.verify_code(secret, pyotp.TOTP(secret).now())

    def test_code_with_spaces(self):
        secret = totp.generate_secret()
        code = pyotp.TOTP(secret).now()
        assert totp.verify_code(secret, f" {code[:3]} {code[3:]} ")

    @pytest.mark.parametrize("code", [None, "", "12ab56"])
    def test_rejects(self, code):
        assert not totp.verify_code(totp.generate_secret(), code)

    def test_provisioning_uri(self):
        uri = totp.provisioning_uri("JBSWY3DPEHPK3PXP", "sekper@example.com", "Board Meeting")
        assert uri.startswith("otpauth://totp/")
        assert "sekper%40example.com" in uri
        assert "secret=JBSWY3DPEHPK3PXP" in uri


class TestSecretCipher:
    def test_round_trip(self):
        cipher = SecretCipher(Fernet.generate_key().decode())
        assert cipher.decrypt(cipher.encrypt("JBSWY3DPEHPK3PXP")) == "JBSWY3DPEHPK3PXP"

    def test_wrong_key(self):
        stored = SecretCipher(Fernet.generate_key().decode()).encrypt("secret")
        with pytest.raises(ValueError):
            SecretCipher(Fernet.generate_key().decode()).decrypt(stored)

    @pytest.mark.parametrize("key", ["", "not-a-fernet-key"])
    def test_bad_key(self, key):
        with pytest.raises(ValueError):
            SecretCipher(key)
