from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class SecretCipher:
    """Encrypts 2FA secrets before they are stored on the user row."""

    def __init__(self, key: str):
        if not key:
            raise ValueError("ENCRYPTION_KEY is not configured")
        try:
            self.cipher = Fernet(key.encode())
        except Exception as e:
            logger.error(f"Invalid encryption key format: {e}")
            raise ValueError("Encryption key must be valid base64-encoded Fernet key")

    def encrypt(self, text: str) -> str:
        return self.cipher.encrypt(text.encode()).decode()

    def decrypt(self, token: str) -> str:
        try:
            return self.cipher.decrypt(token.encode()).decode()
        except InvalidToken as e:
            logger.error("Stored secret could not be decrypted")
            raise ValueError("Stored secret could not be decrypted") from e
