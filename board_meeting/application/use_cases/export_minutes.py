"""Minutes document (risalah / notulensi) of a meeting session, rendered from the Word templates."""
from __future__ import annotations

import base64
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from board_meeting.application.common import AgendaUseCase
from board_meeting.application.results import ActionResult
from board_meeting.domain.entities.agenda import AttendanceStatus, MeetingType
from board_meeting.domain.services.minutes_text import clean_html, format_long_date, letter_index, terbilang, to_roman
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.documents.minutes_renderer import MinutesRenderer

logger = logging.getLogger(__name__)

DEFAULT_INITIATOR = "Direktur Terkait"
DEFAULT_CHAIR = {MeetingType.RADIR: "Direktur Utama", MeetingType.RAKORDIR: "Sekretaris Perusahaan"}


def initiator_label(agenda: AgendaModel) -> str:
    parts = [v for v in (agenda.director, agenda.initiator) if v and v.strip()]
    return ", ".join(parts) or DEFAULT_INITIATOR


def present_count(attendance: Dict[str, Any], meeting_type: str) -> int:
    """RADIR counts Hadir and Kuasa; RAKORDIR counts everyone not marked Tidak Hadir."""
    statuses = [(r or {}).get("status") if isinstance(r, dict) else None for r in attendance.values()]
    if meeting_type == MeetingType.RAKORDIR:
        return sum(1 for s in statuses if s != AttendanceStatus.TIDAK_HADIR)
    return sum(1 for s in statuses if s in (AttendanceStatus.HADIR, AttendanceStatus.KUASA))


def absence_notes(attendance: Dict[str, Any], meeting_type: str) -> str:
    lines = []
    for name, record in attendance.items():
        if not isinstance(record, dict):
            continue
        status = record.get("status")
        if status == AttendanceStatus.KUASA:
            proxy = record.get("proxy") or []
            receiver = proxy[0].get("label") if proxy and isinstance(proxy[0], dict) else None
            receiver = receiver or "Direktur terkait"
            if meeting_type == MeetingType.RAKORDIR:
                lines.append(f"{name} tidak hadir dan memberikan kuasa kepada {receiver};")
            else:
                lines.append(f"• {name} tidak hadir dan memberikan kuasa kepada {receiver}")
        elif status == AttendanceStatus.TIDAK_HADIR:
            if meeting_type == MeetingType.RAKORDIR:
                lines.append(f"{name} tidak hadir karena {record.get('reason') or 'tugas kedinasan lainnya'};")
            else:
                lines.append(f"• {name} tidak hadir (Keterangan: {record.get('reason') or '-'})")
    return "\n".join(lines) or "Seluruh Direksi hadir lengkap"


def chairs_label(chairs: List[Any], meeting_type: str) -> str:
    labels = [c.get("label") for c in chairs if isinstance(c, dict) and c.get("label")]
    return ", ".join(labels) or DEFAULT_CHAIR.get(meeting_type, DEFAULT_CHAIR[MeetingType.RADIR])


def guests_label(guests: List[Any]) -> str:
    names = []
    for g in guests:
        if isinstance(g, dict) and g.get("name"):
            names.append(f"{g['name']} ({g.get('position') or '-'})")
    return ", ".join(names) or "-"


def numbered(items: List[Any], letters: bool = False) -> str:
    lines = []
    for i, item in enumerate(items):
        text = item.get("text") if isinstance(item, dict) else item
        marker = letter_index(i) if letters else str(i + 1)
        lines.append(f"{marker}. {clean_html(str(text or ''), empty='')}")
    return "\n".join(lines) or "-"


def build_context(rows: List[AgendaModel], meeting_type: str, meeting_year: str) -> Dict[str, Any]:
    first = rows[0]
    attendance = first.attendance
    count = present_count(attendance, meeting_type)

    agendas = []
    for i, agenda in enumerate(rows):
        entry = {
            "index": i + 1,
            "title": agenda.title,
            "pemrakarsa": initiator_label(agenda),
            "executiveSummary": clean_html(agenda.executive_summary),
        }
        if meeting_type == MeetingType.RAKORDIR:
            entry["arahanDireksi"] = numbered(agenda.arahan or agenda.decisions, letters=True)
        else:
            entry["considerations"] = clean_html(agenda.considerations)
            entry["meetingDecisions"] = numbered(agenda.decisions)
            entry["dissentingOpinion"] = clean_html(agenda.dissenting_opinion, empty="Tidak ada")
        agendas.append(entry)

    return {
        "executionDate": format_long_date(first.execution_date or date.today()),
        "startTime": first.start_time or "",
        "endTime": first.end_time or "",
        "meetingLocation": first.meeting_location or "",
        "meetingYear": meeting_year,
        "agenda_summary_list": "\n".join(
            f"{to_roman(i + 1)}. {a.title} (Pemrakarsa: {initiator_label(a)})" for i, a in enumerate(rows)
        ),
        "hadir_count_num": count,
        "hadir_count_terbilang": terbilang(count),
        "pimpinanRapat": chairs_label(first.chairs, meeting_type),
        "catatan_ketidakhadiran": absence_notes(attendance, meeting_type),
        "guestParticipants": guests_label(first.guests),
        "agendas": agendas,
    }


def export_filename(meeting_type: str, number: str, year: str) -> str:
    if meeting_type == MeetingType.RAKORDIR:
        return f"Notulensi_Rakordir_{number}_{year}.docx"
    return f"Risalah_RADIR_No_{number}_{year}.docx"


def not_found_message(meeting_type: str, number: str, year: str) -> str:
    if meeting_type == MeetingType.RAKORDIR:
        return "Data Rakordir tidak ditemukan."
    return f"Data tidak ditemukan untuk No: {number} / {year}."


class ExportMinutesUseCase(AgendaUseCase):
    """Renders one session's minutes; the document travels base64-encoded."""

    def __init__(self, repo: Optional[AgendaRepository] = None, renderer: Optional[MinutesRenderer] = None):
        super().__init__(repo=repo)
        self._renderer = renderer

    @property
    def renderer(self) -> MinutesRenderer:
        if self._renderer is None:
            self._renderer = MinutesRenderer()
        return self._renderer

    def render(self, meeting_number: Optional[str], meeting_year: Optional[str],
               meeting_type: str = MeetingType.RADIR) -> ActionResult:
        """Like execute() but keeps the document as bytes."""
        number = meeting_number or "000"
        year = meeting_year or str(date.today().year)
        try:
            rows = self.repo.list_by_session(number, year, meeting_type)
            if not rows:
                return ActionResult.fail(not_found_message(meeting_type, number, year), "not_found")
            content = self.renderer.render(meeting_type, build_context(rows, meeting_type, year))
        except Exception as e:
            logger.exception("[export-minutes] %s %s/%s failed: %s", meeting_type, number, year, e)
            return ActionResult.fail(str(e) or "Terjadi kesalahan tidak diketahui")
        filename = export_filename(meeting_type, number, year)
        logger.info("[export-minutes] %s rendered (%d bytes, %d agenda)", filename, len(content), len(rows))
        return ActionResult.ok(data={"filename": filename, "content": content})

    def execute(self, meeting_number: Optional[str], meeting_year: Optional[str],
                meeting_type: str = MeetingType.RADIR) -> ActionResult:
        result = self.render(meeting_number, meeting_year, meeting_type)
        if not result.success:
            return result
        encoded = base64.b64encode(result.data["content"]).decode("ascii")
        return ActionResult.ok(data={"filename": result.data["filename"], "data": encoded})
