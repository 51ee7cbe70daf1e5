from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set

from board_meeting.domain.entities.agenda import ALL_FILE_COLUMNS, MeetingType
from board_meeting.domain.entities.errors import AuthenticationError, NotFoundError, ValidationError
from board_meeting.domain.services.json_fields import parse_path_list
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.connection import get_database
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.supabase.storage import AgendaStorage

SESSION_EXPIRED = "Sesi kadaluarsa. Silakan login kembali."


@dataclass
class Actor:
    user_id: str
    role: Optional[str] = None
    email: Optional[str] = None


@dataclass
class UploadedFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content or b"")


def present(file: Optional[UploadedFile]) -> bool:
    return file is not None and file.size > 0


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"Tanggal tidak valid: {value}") from e


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Tanggal tidak valid: {value}") from e
    # stored naive in server-local time
    return parsed.astimezone().replace(tzinfo=None) if parsed.tzinfo else parsed


def clean_value(value: Optional[str], fallback):
    if value is None or (isinstance(value, str) and not value.strip()):
        return fallback
    return value


class AgendaUseCase:
    """Shared wiring for agenda actions: repository, storage and page cache."""

    def __init__(self, repo: Optional[AgendaRepository] = None, storage: Optional[AgendaStorage] = None,
                 cache=None):
        self._repo = repo
        self._storage = storage
        self._cache = cache

    @property
    def repo(self) -> AgendaRepository:
        if self._repo is None:
            self._repo = AgendaRepository(get_database().session())
        return self._repo

    @repo.setter
    def repo(self, value: AgendaRepository) -> None:
        self._repo = value

    @property
    def storage(self) -> AgendaStorage:
        if self._storage is None:
            self._storage = AgendaStorage()
        return self._storage

    @storage.setter
    def storage(self, value: AgendaStorage) -> None:
        self._storage = value

    @property
    def cache(self):
        if self._cache is None:
            self._cache = PageCache
        return self._cache

    @cache.setter
    def cache(self, value) -> None:
        self._cache = value

    def _require_actor(self, actor: Optional[Actor], message: str = SESSION_EXPIRED) -> Actor:
        if actor is None or not actor.user_id:
            raise AuthenticationError(message)
        return actor

    def _get_or_404(self, agenda_id: str, message: str = "Data tidak ditemukan.") -> AgendaModel:
        agenda = self.repo.get(agenda_id) if agenda_id else None
        if agenda is None:
            raise NotFoundError(message)
        return agenda

    def _invalidate(self, *paths: str) -> None:
        # every mutation can move dashboard numbers
        self.cache.invalidate("/dashboard", *paths)

    @staticmethod
    def _touch(agenda: AgendaModel) -> None:
        agenda.updated_at = datetime.now()


def unique(values: Iterable[str]) -> List[str]:
    seen = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen


@dataclass
class ProposalInput:
    """Form payload shared by the RADIR, RAKORDIR and KEPDIR proposal forms.

    `not_required_files` is None when the form did not send the field, so an
    update can keep the stored value.
    """

    title: Optional[str] = None
    urgency: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    director: Optional[str] = None
    initiator: Optional[str] = None
    support: Optional[str] = None
    contact_person: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    directors: List[str] = field(default_factory=list)
    initiators: List[str] = field(default_factory=list)
    not_required_files: Optional[List[str]] = None
    files: Dict[str, UploadedFile] = field(default_factory=dict)
    delete_files: Set[str] = field(default_factory=set)
    supporting_documents: List[UploadedFile] = field(default_factory=list)


def agenda_file_paths(agenda: AgendaModel) -> List[str]:
    """Every storage object referenced by a row, evidence files included."""
    paths = [getattr(agenda, col) for col in ALL_FILE_COLUMNS]
    paths.extend(agenda.supporting_paths)
    # older KEPDIR rows kept supporting paths as a JSON string in `support`
    if agenda.meeting_type == MeetingType.KEPDIR_SIRKULER and (agenda.support or "").lstrip().startswith("["):
        paths.extend(parse_path_list(agenda.support, "support"))
    for item in agenda.decisions + agenda.arahan:
        if isinstance(item, dict):
            paths.append(item.get("evidencePath"))
    return unique(p for p in paths if isinstance(p, str) and p and p != "null")
