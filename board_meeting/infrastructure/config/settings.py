from __future__ import annotations
import os
from functools import lru_cache
from pathlib import Path
import dotenv

# Load environment from .env if present (local dev)
dotenv.load_dotenv()

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates"


class Settings:
    # Runtime
    environment: str = os.getenv("ENV", os.getenv("ENVIRONMENT", "local"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    cors_allow_origins: list[str] = [
        o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()
    ]

    # Database (agenda store)
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./board_meeting.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Supabase (auth + storage)
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", os.getenv("SUPABASE_ANON_KEY", ""))
    storage_bucket: str = os.getenv("STORAGE_BUCKET", "agenda-attachments")
    signed_url_expires_in: int = int(os.getenv("SIGNED_URL_EXPIRES_IN", "3600"))
    max_evidence_bytes: int = int(os.getenv("MAX_EVIDENCE_BYTES", str(5 * 1024 * 1024)))

    # Session cookie
    session_secret: str = os.getenv("SESSION_SECRET", "")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session")
    session_duration_seconds: int = int(os.getenv("SESSION_DURATION_SECONDS", str(60 * 60 * 24 * 7)))

    # 2FA secret encryption (Fernet key, urlsafe base64 32 bytes)
    encryption_key: str = os.getenv("ENCRYPTION_KEY", "")
    totp_issuer: str = os.getenv("TOTP_ISSUER", "Board Meeting")

    # Minutes export (docxtpl templates)
    radir_template_path: str = os.getenv("RADIR_TEMPLATE_PATH") or str(TEMPLATE_DIR / "radir_minutes.docx")
    rakordir_template_path: str = os.getenv("RAKORDIR_TEMPLATE_PATH") or str(TEMPLATE_DIR / "rakordir_minutes.docx")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("prod", "production")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
