from __future__ import annotations

import logging
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from board_meeting.infrastructure.config.settings import get_settings

Base = declarative_base()

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Owns the engine and session factory for the agenda store."""

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        settings = get_settings()
        self._url = database_url or settings.database_url
        if not self._url:
            raise ValueError("Database URL is required")
        self._echo = settings.database_echo if echo is None else echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._initialize_database()

    def _initialize_database(self) -> None:
        kwargs = {"echo": self._echo, "future": True}
        if self._url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self._url or self._url.rstrip("/") == "sqlite:":
                # single shared connection so every session sees the same in-memory db
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self._engine = create_engine(self._url, **kwargs)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("Database connection initialized")

    def session(self) -> Session:
        if not self._session_factory:
            raise RuntimeError("Database not initialized")
        return self._session_factory()

    def get_session(self) -> Generator[Session, None, None]:
        session = self.session()
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        # models must be imported so they register on Base.metadata
        from board_meeting.infrastructure.database import models  # noqa: F401

        Base.metadata.create_all(self._engine)
        logger.info("Database tables created")

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connection closed")

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine


_connection: Optional[DatabaseConnection] = None


def get_database() -> DatabaseConnection:
    global _connection
    if _connection is None:
        _connection = DatabaseConnection()
    return _connection


def set_database(connection: Optional[DatabaseConnection]) -> None:
    """Swap the process-wide connection (tests, scripts)."""
    global _connection
    _connection = connection


def get_database_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session."""
    yield from get_database().get_session()
