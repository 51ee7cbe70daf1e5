from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from board_meeting.domain.entities.agenda import (
    AgendaStatus,
    AttendanceStatus,
    DIRECTORS_MAP,
    DateRange,
    MeetingStatus,
    MeetingType,
    is_cancelled,
    is_completed,
)
from board_meeting.domain.services.monev import MonevSummary, describe_summary, summarize_items
from board_meeting.infrastructure.database.connection import get_database
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository

logger = logging.getLogger(__name__)

TYPE_KEYS = {
    MeetingType.RADIR: "radir",
    MeetingType.RAKORDIR: "rakordir",
    MeetingType.KEPDIR_SIRKULER: "kepdirSirkuler",
}

# Table filter aliases: one card status covers legacy spellings
STATUS_FILTER_MAP: Dict[str, List[str]] = {
    AgendaStatus.RAPAT_SELESAI: [AgendaStatus.RAPAT_SELESAI, AgendaStatus.COMPLETED],
    AgendaStatus.DIJADWALKAN: [AgendaStatus.DIJADWALKAN, AgendaStatus.SCHEDULED],
    AgendaStatus.DIBATALKAN: [AgendaStatus.DIBATALKAN, AgendaStatus.CANCELLED],
    AgendaStatus.DRAFT: [AgendaStatus.DRAFT],
    AgendaStatus.DAPAT_DILANJUTKAN: [AgendaStatus.DAPAT_DILANJUTKAN],
    AgendaStatus.DITUNDA: [AgendaStatus.DITUNDA],
}


def attendance_fill(percentage: int) -> str:
    if percentage >= 80:
        return "#10b981"
    if percentage >= 50:
        return "#f59e0b"
    return "#ef4444"


def status_bucket(agenda: AgendaModel) -> str:
    """Which dashboard card a row is counted under."""
    if is_cancelled(agenda.status, agenda.meeting_status):
        return "dibatalkan"
    if is_completed(agenda.status, agenda.meeting_status):
        return "selesai"
    if agenda.status in AgendaStatus.SCHEDULED_ALIASES or agenda.meeting_status == MeetingStatus.SCHEDULED:
        return "dijadwalkan"
    if agenda.status == AgendaStatus.DITUNDA:
        return "ditunda"
    if agenda.status == AgendaStatus.DAPAT_DILANJUTKAN:
        return "dapatDilanjutkan"
    return "draft"


def follow_up_items(agenda: AgendaModel) -> list:
    """Items tracked by monev: decisions for RADIR, directives for RAKORDIR."""
    if agenda.meeting_type == MeetingType.RAKORDIR:
        return agenda.arahan or agenda.decisions
    return agenda.decisions


def filter_list_data(items: List[Dict[str, Any]], meeting_type: Optional[str] = None,
                     status: Optional[str] = None) -> List[Dict[str, Any]]:
    out = items
    if meeting_type:
        out = [i for i in out if i.get("meetingType") == meeting_type]
    if status:
        allowed = STATUS_FILTER_MAP.get(status)
        if allowed:
            out = [i for i in out if (i.get("status") or "") in allowed]
        else:
            out = [i for i in out if i.get("status") == status]
    return out


def _empty_counts() -> Dict[str, int]:
    return {
        "draft": 0,
        "dapatDilanjutkan": 0,
        "dijadwalkan": 0,
        "ditunda": 0,
        "selesai": 0,
        "dibatalkan": 0,
        "total": 0,
    }


class GetDashboardStatsUseCase:
    """Rolls agenda rows in a date range up into dashboard statistics."""

    def __init__(self, repo: Optional[AgendaRepository] = None):
        self._repo = repo

    @property
    def repo(self) -> AgendaRepository:
        if self._repo is None:
            self._repo = AgendaRepository(get_database().session())
        return self._repo

    @repo.setter
    def repo(self, value: AgendaRepository) -> None:
        self._repo = value

    def execute(self, date_from: date, date_to: date) -> Dict[str, Any]:
        try:
            period = DateRange(date_from, date_to)
        except ValueError as e:
            return {"success": False, "error": str(e)}

        try:
            rows = self.repo.list_updated_between(period.lower_bound, period.upper_bound)
        except Exception as e:
            logger.error(f"[dashboard] failed to load agendas: {e}")
            return {"success": False, "error": "Gagal memuat statistik"}

        logger.info("[dashboard] aggregating %d agenda(s) %s..%s", len(rows), period.start, period.end)
        return {"success": True, "data": self.aggregate(rows)}

    def aggregate(self, rows: List[AgendaModel]) -> Dict[str, Any]:
        counts = {key: _empty_counts() for key in TYPE_KEYS.values()}
        follow_up = {"radir": MonevSummary(), "rakordir": MonevSummary()}
        directors = {short: {"present": 0, "total": 0} for short in DIRECTORS_MAP.values()}
        list_data: List[Dict[str, Any]] = []

        for agenda in rows:
            type_key = TYPE_KEYS.get(agenda.meeting_type, "radir")
            bucket = status_bucket(agenda)
            counts[type_key][bucket] += 1
            counts[type_key]["total"] += 1

            summary = self._collect_follow_up(agenda, bucket, follow_up)
            if bucket == "selesai" and agenda.meeting_type == MeetingType.RADIR:
                self._collect_attendance(agenda, directors)
            list_data.append(self._list_item(agenda, summary))

        return {
            **counts,
            "followUp": {key: value.to_dict() for key, value in follow_up.items()},
            "directorChartData": self._chart(directors),
            "listData": list_data,
        }

    def _collect_follow_up(self, agenda: AgendaModel, bucket: str,
                           follow_up: Dict[str, MonevSummary]) -> MonevSummary:
        try:
            summary = summarize_items(follow_up_items(agenda))
        except Exception as e:
            logger.warning(f"[dashboard] follow-up skipped for agenda {agenda.id}: {e}")
            return MonevSummary()
        key = TYPE_KEYS.get(agenda.meeting_type)
        if bucket == "selesai" and key in follow_up:
            follow_up[key] = follow_up[key] + summary
        return summary

    def _collect_attendance(self, agenda: AgendaModel, directors: Dict[str, Dict[str, int]]) -> None:
        try:
            attendance = agenda.attendance
            for long_name, short_name in DIRECTORS_MAP.items():
                record = attendance.get(long_name)
                if not isinstance(record, dict):
                    continue
                status = record.get("status")
                if status not in AttendanceStatus.COUNTED:
                    continue
                directors[short_name]["total"] += 1
                if status == AttendanceStatus.HADIR:
                    directors[short_name]["present"] += 1
        except Exception as e:
            logger.warning(f"[dashboard] attendance skipped for agenda {agenda.id}: {e}")

    @staticmethod
    def _chart(directors: Dict[str, Dict[str, int]]) -> List[Dict[str, Any]]:
        chart = []
        for name, val in directors.items():
            total = val["total"]
            # round half up, matching what the charts have always shown
            percentage = int(val["present"] * 100 / total + 0.5) if total else 0
            chart.append({
                "name": name,
                "present": val["present"],
                "total": total,
                "percentage": percentage,
                "fill": attendance_fill(percentage),
            })
        return chart

    @staticmethod
    def _list_item(agenda: AgendaModel, summary: MonevSummary) -> Dict[str, Any]:
        return {
            "id": agenda.id,
            "title": agenda.title,
            "meetingType": agenda.meeting_type,
            "status": agenda.status,
            "monevStatus": agenda.monev_status or "",
            "contactPerson": agenda.contact_person or "",
            "contactPhone": agenda.phone or "",
            "executionDate": agenda.execution_date.isoformat() if agenda.execution_date else None,
            "monevSummary": describe_summary(summary),
        }
