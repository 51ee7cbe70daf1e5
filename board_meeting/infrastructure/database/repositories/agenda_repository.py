from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.orm import Session

from board_meeting.domain.entities.agenda import AgendaStatus, MeetingStatus, MeetingType
from board_meeting.infrastructure.database.models import AgendaModel

logger = logging.getLogger(__name__)


class AgendaRepository:
    """SQLAlchemy access to the agendas table. Callers own commit/rollback."""

    def __init__(self, session: Session):
        self.session = session

    # reads
    def get(self, agenda_id: str) -> Optional[AgendaModel]:
        return self.session.get(AgendaModel, agenda_id)

    def get_by_type(self, agenda_id: str, meeting_type: str) -> Optional[AgendaModel]:
        stmt = select(AgendaModel).where(
            AgendaModel.id == agenda_id, AgendaModel.meeting_type == meeting_type
        )
        return self.session.scalars(stmt).first()

    def list_by_ids(self, ids: Iterable[str]) -> List[AgendaModel]:
        ids = list(ids)
        if not ids:
            return []
        return list(self.session.scalars(select(AgendaModel).where(AgendaModel.id.in_(ids))))

    def list_by_type(
        self,
        meeting_type: str,
        status: Optional[str] = None,
        order_by_updated: bool = False,
    ) -> List[AgendaModel]:
        stmt = select(AgendaModel).where(AgendaModel.meeting_type == meeting_type)
        if status:
            stmt = stmt.where(AgendaModel.status == status)
        order_col = AgendaModel.updated_at if order_by_updated else AgendaModel.created_at
        stmt = stmt.order_by(order_col.desc())
        return list(self.session.scalars(stmt))

    def list_updated_between(self, start: datetime, end: datetime) -> List[AgendaModel]:
        stmt = (
            select(AgendaModel)
            .where(and_(AgendaModel.updated_at >= start, AgendaModel.updated_at <= end))
            .order_by(AgendaModel.updated_at.desc())
        )
        return list(self.session.scalars(stmt))

    def list_by_session(
        self, meeting_number: str, meeting_year: str, meeting_type: Optional[str] = None
    ) -> List[AgendaModel]:
        stmt = select(AgendaModel).where(
            AgendaModel.meeting_number == meeting_number,
            AgendaModel.meeting_year == meeting_year,
        )
        if meeting_type:
            stmt = stmt.where(AgendaModel.meeting_type == meeting_type)
        stmt = stmt.order_by(AgendaModel.created_at.asc())
        return list(self.session.scalars(stmt))

    def list_ready(self, meeting_type: str) -> List[AgendaModel]:
        """Agendas that passed document checks and await or hold a schedule."""
        stmt = (
            select(AgendaModel)
            .where(
                AgendaModel.meeting_type == meeting_type,
                AgendaModel.status.in_(
                    [
                        AgendaStatus.DAPAT_DILANJUTKAN,
                        AgendaStatus.DIJADWALKAN,
                        AgendaStatus.DITUNDA,
                        AgendaStatus.DIBATALKAN,
                    ]
                ),
            )
            .order_by(AgendaModel.updated_at.desc())
        )
        return list(self.session.scalars(stmt))

    def list_scheduled(self) -> List[AgendaModel]:
        stmt = (
            select(AgendaModel)
            .where(AgendaModel.status.in_(list(AgendaStatus.SCHEDULED_ALIASES)))
            .order_by(AgendaModel.execution_date.asc(), AgendaModel.start_time.asc())
        )
        return list(self.session.scalars(stmt))

    def list_with_session(self, meeting_type: str) -> List[AgendaModel]:
        stmt = (
            select(AgendaModel)
            .where(
                AgendaModel.meeting_type == meeting_type,
                AgendaModel.meeting_number.is_not(None),
                AgendaModel.meeting_year.is_not(None),
            )
            .order_by(AgendaModel.meeting_year.desc(), AgendaModel.meeting_number.desc(), AgendaModel.created_at.asc())
        )
        return list(self.session.scalars(stmt))

    def list_monev(self, meeting_type: str) -> List[AgendaModel]:
        stmt = select(AgendaModel).where(AgendaModel.meeting_type == meeting_type)
        if meeting_type == MeetingType.RAKORDIR:
            stmt = stmt.where(AgendaModel.status == AgendaStatus.RAPAT_SELESAI)
        else:
            stmt = stmt.where(
                or_(
                    AgendaModel.status.in_(list(AgendaStatus.COMPLETED_ALIASES)),
                    AgendaModel.meeting_status == MeetingStatus.COMPLETED,
                )
            )
        stmt = stmt.order_by(AgendaModel.execution_date.desc(), AgendaModel.created_at.desc())
        return list(self.session.scalars(stmt))

    # writes
    def add(self, agenda: AgendaModel) -> AgendaModel:
        self.session.add(agenda)
        self.session.flush()
        return agenda

    def delete(self, agenda: AgendaModel) -> None:
        self.session.delete(agenda)
        self.session.flush()

    def delete_many(self, ids: Iterable[str]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        res = self.session.execute(delete(AgendaModel).where(AgendaModel.id.in_(ids)))
        return res.rowcount or 0

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
