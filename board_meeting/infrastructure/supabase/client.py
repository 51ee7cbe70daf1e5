from __future__ import annotations
import logging
from typing import Optional

from supabase import Client, create_client

from board_meeting.infrastructure.config.settings import get_settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def _require_config() -> tuple[str, str]:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("Supabase URL and Key are required")
    return settings.supabase_url, settings.supabase_key


def get_supabase() -> Client:
    """Shared client for storage access."""
    global _client
    if _client is None:
        url, key = _require_config()
        logger.debug("Creating Supabase client url=%s", url)
        _client = create_client(url, key)
    return _client


def new_auth_client() -> Client:
    """Fresh client per auth call; sign-in mutates the client's session state."""
    url, key = _require_config()
    return create_client(url, key)
