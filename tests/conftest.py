"""
Pytest configuration and shared fixtures for board meeting tests
"""
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from board_meeting.application.common import Actor, UploadedFile
from board_meeting.domain.entities.errors import StorageError
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.connection import DatabaseConnection, set_database
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.database.repositories.user_repository import UserRepository
from board_meeting.main import app
from board_meeting.presentation.api.v1.deps import (
    get_agenda_repository,
    get_current_actor,
    get_storage,
    get_user_repository,
)


class FakeStorage:
    """In-memory stand-in for AgendaStorage"""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.uploaded: List[str] = []
        self.removed: List[str] = []
        self.fail_upload = False
        self.fail_remove = False

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        if self.fail_upload:
            raise StorageError("Gagal upload file: bucket unavailable")
        self.objects[path] = content
        self.uploaded.append(path)
        return path

    def remove(self, paths: Iterable[Optional[str]]) -> List[str]:
        valid = [p for p in paths if p and p != "null"]
        if not valid:
            return []
        if self.fail_remove:
            raise StorageError("Gagal menghapus file: bucket unavailable")
        for p in valid:
            self.objects.pop(p, None)
        self.removed.extend(valid)
        return valid

    def remove_quietly(self, paths: Iterable[Optional[str]]) -> None:
        try:
            self.remove(paths)
        except StorageError:
            pass

    def signed_url(self, path: str, expires_in: Optional[int] = None) -> Optional[str]:
        return f"https://storage.test/signed/{path}?expires={expires_in or 3600}"


@pytest.fixture(autouse=True)
def clear_page_cache():
    PageCache.clear()
    yield
    PageCache.clear()


@pytest.fixture
def database():
    """Fresh in-memory database per test"""
    db = DatabaseConnection("sqlite://", echo=False)
    db.create_tables()
    set_database(db)
    yield db
    set_database(None)
    db.close()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def agenda_repo(db_session):
    return AgendaRepository(db_session)


@pytest.fixture
def user_repo(db_session):
    return UserRepository(db_session)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def actor():
    return Actor(user_id="user-1", role="admin", email="sekper@example.com")


@pytest.fixture
def pdf():
    def _make(name: str = "dokumen.pdf", content: bytes = b"%PDF-1.4 test") -> UploadedFile:
        return UploadedFile(filename=name, content=content, content_type="application/pdf")
    return _make


@pytest.fixture
def make_agenda(db_session):
    """Insert an agenda row; keyword arguments override the defaults"""
    def _make(**overrides) -> AgendaModel:
        values = {
            "title": "Persetujuan RKAP 2026",
            "meeting_type": "RADIR",
            "status": "DRAFT",
            "meeting_status": "PENDING",
            "director": "DIRUT",
            "initiator": "PLN",
            "not_required_files": [],
            "updated_at": datetime(2026, 1, 10, 9, 0),
        }
        values.update(overrides)
        agenda = AgendaModel(**values)
        db_session.add(agenda)
        db_session.commit()
        return agenda
    return _make


@pytest.fixture
def sample_attendance():
    return {
        "DIREKTUR UTAMA (DIRUT)": {"status": "Hadir"},
        "DIREKTUR KEUANGAN (DIR KEU)": {"status": "Tidak Hadir", "reason": "Dinas luar"},
        "DIREKTUR DISTRIBUSI (DIR DIST)": {
            "status": "Kuasa",
            "proxy": [{"value": "DIRUT", "label": "DIREKTUR UTAMA (DIRUT)"}],
        },
    }


@pytest.fixture
def meeting_day():
    return date(2026, 1, 5)


@pytest.fixture
def make_client(agenda_repo, user_repo, storage):
    """TestClient for the API wired to the in-memory store; `actor=None` means signed out.

    Startup hooks are not run (no `with` block), so nothing touches the real database.
    """
    def _make(actor: Optional[Actor] = None) -> TestClient:
        app.dependency_overrides[get_agenda_repository] = lambda: agenda_repo
        app.dependency_overrides[get_user_repository] = lambda: user_repo
        app.dependency_overrides[get_storage] = lambda: storage
        app.dependency_overrides[get_current_actor] = lambda: actor
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, actor):
    return make_client(actor)
