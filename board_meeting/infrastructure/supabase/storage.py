from __future__ import annotations

import logging
import os
import re
import time
import uuid
from typing import Iterable, List, Optional

from board_meeting.domain.entities.errors import StorageError
from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.supabase.client import get_supabase

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def file_extension(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lstrip(".")
    return ext or "bin"


def clean_filename(filename: str) -> str:
    """Spaces to underscores, then keep only [A-Za-z0-9._-]."""
    name = re.sub(r"\s", "_", filename or "")
    return re.sub(r"[^a-zA-Z0-9._-]", "", name) or "file"


def underscore_spaces(path: str) -> str:
    return re.sub(r"\s+", "_", path)


class StoragePaths:
    """Object key conventions inside the attachments bucket."""

    @staticmethod
    def radir(user_id: str, field: str, filename: str) -> str:
        return f"radir/{user_id}/{now_millis()}-{field}.{file_extension(filename)}"

    @staticmethod
    def rakordir(user_id: str, field: str, filename: str) -> str:
        return f"rakordir/{user_id}/{uuid.uuid4()}-{field}.{file_extension(filename)}"

    @staticmethod
    def kepdir(user_id: str, field: str, filename: str) -> str:
        return f"kepdir-sirkuler/{user_id}/{now_millis()}-{field}.{file_extension(filename)}"

    @staticmethod
    def supporting(prefix: str, user_id: str, filename: str) -> str:
        return f"{prefix}/{user_id}/{now_millis()}-support-{clean_filename(filename)}"

    @staticmethod
    def evidence(agenda_id: str, decision_id: str, filename: str, meeting_type: str = "RADIR") -> str:
        folder = "evidence/rakordir" if meeting_type == "RAKORDIR" else "evidence"
        return underscore_spaces(f"{folder}/{agenda_id}/{decision_id}_{now_millis()}_{filename}")

    @staticmethod
    def manual_evidence(filename: str) -> str:
        return underscore_spaces(f"evidence/manual-rakordir/{now_millis()}_{filename}")

    @staticmethod
    def minutes(meeting_type: str, agenda_id: str, kind: str, filename: str) -> str:
        folder = "radir" if meeting_type == "RADIR" else "rakordir"
        return f"{folder}/risalah/{agenda_id}/{now_millis()}-{kind}.{file_extension(filename)}"


class AgendaStorage:
    """Attachments bucket on Supabase Storage."""

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or get_settings().storage_bucket
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        options = {"content-type": content_type or "application/octet-stream"}
        try:
            res = self.client.storage.from_(self.bucket).upload(path, content, file_options=options)
        except Exception as e:
            logger.error("[storage] upload failed path=%s error=%s", path, e)
            raise StorageError(f"Gagal upload file: {e}") from e
        stored = getattr(res, "path", None) or path
        logger.info("[storage] uploaded %s (%d bytes)", stored, len(content))
        return stored

    def remove(self, paths: Iterable[Optional[str]]) -> List[str]:
        valid = [p for p in paths if p and p != "null"]
        if not valid:
            return []
        try:
            self.client.storage.from_(self.bucket).remove(valid)
        except Exception as e:
            logger.error("[storage] remove failed paths=%s error=%s", valid, e)
            raise StorageError(f"Gagal menghapus file: {e}") from e
        logger.info("[storage] removed %d object(s)", len(valid))
        return valid

    def remove_quietly(self, paths: Iterable[Optional[str]]) -> None:
        """Best-effort cleanup of replaced files; failures are logged only."""
        try:
            self.remove(paths)
        except StorageError as e:
            logger.warning("[storage] cleanup skipped: %s", e)

    def signed_url(self, path: str, expires_in: Optional[int] = None) -> Optional[str]:
        expires = expires_in or get_settings().signed_url_expires_in
        try:
            res = self.client.storage.from_(self.bucket).create_signed_url(path, expires)
        except Exception as e:
            logger.warning("[storage] signed url failed path=%s error=%s", path, e)
            return None
        if isinstance(res, dict):
            return res.get("signedURL") or res.get("signedUrl")
        return None
