from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from board_meeting.application.common import Actor, AgendaUseCase, UploadedFile, parse_date, present, unique
from board_meeting.application.results import ActionResult, action
from board_meeting.domain.entities.agenda import (
    AgendaStatus,
    AttendanceStatus,
    MeetingStatus,
    MeetingType,
    MonevStatus,
    SessionKey,
    is_cancelled,
    is_completed,
)
from board_meeting.domain.entities.errors import ConflictError, NotFoundError, ValidationError
from board_meeting.domain.services.monev import compute_monev_status
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.supabase.storage import StoragePaths

logger = logging.getLogger(__name__)

# proposal lists show every status, so both sets include "/agenda"
SCHEDULE_PAGES = ("/agenda", "/agenda-siap", "/jadwal-rapat", "/pelaksanaan-rapat")
MEETING_PAGES = ("/agenda", "/agenda-siap", "/jadwal-rapat", "/pelaksanaan-rapat", "/monev")
MEETING_METHODS = ("OFFLINE", "ONLINE", "HYBRID")


@dataclass
class ScheduleInput:
    agenda_id: str
    execution_date: str
    start_time: str
    end_time: Optional[str] = None
    meeting_method: Optional[str] = None
    location: Optional[str] = None
    link: Optional[str] = None


@dataclass
class MinutesInput:
    """Minutes for one agenda. Shared fields are usually identical across a session."""

    agenda_id: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    meeting_location: Optional[str] = None
    pimpinan_rapat: List[Dict[str, Any]] = field(default_factory=list)
    attendance_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    guest_participants: List[Dict[str, Any]] = field(default_factory=list)
    executive_summary: Optional[str] = None
    considerations: Optional[str] = None
    risalah_body: Optional[str] = None
    meeting_decisions: List[Dict[str, Any]] = field(default_factory=list)
    arahan_direksi: List[Dict[str, Any]] = field(default_factory=list)
    dissenting_opinion: Optional[str] = None


def with_item_ids(items: List[Any]) -> List[Dict[str, Any]]:
    """Copy decision/directive items, giving each a string id monev can address."""
    out = []
    for item in items or []:
        if isinstance(item, str):
            item = {"text": item}
        if not isinstance(item, dict):
            continue
        copy = dict(item)
        copy["id"] = str(copy.get("id") or uuid.uuid4())
        out.append(copy)
    return out


def _validate_attendance(attendance: Dict[str, Any]) -> None:
    for name, record in (attendance or {}).items():
        status = record.get("status") if isinstance(record, dict) else None
        if status not in AttendanceStatus.COUNTED:
            raise ValidationError(f"Status kehadiran tidak valid untuk {name}")


class MeetingExecution(AgendaUseCase):
    """Scheduling, live minutes and closing of meeting sessions."""

    # scheduling
    @action("schedule", "Gagal memproses jadwal rapat")
    def upsert_schedule(self, actor: Optional[Actor], data: ScheduleInput) -> ActionResult:
        self._require_actor(actor)
        if not data.agenda_id:
            raise ValidationError("ID Agenda diperlukan")
        execution_date = parse_date(data.execution_date)
        if execution_date is None or not data.start_time:
            raise ValidationError("Tanggal dan jam mulai rapat wajib diisi")
        method = (data.meeting_method or "").upper() or None
        if method and method not in MEETING_METHODS:
            raise ValidationError("Metode rapat harus OFFLINE, ONLINE atau HYBRID")

        agenda = self._get_or_404(data.agenda_id, "ID Agenda tidak ditemukan")
        agenda.execution_date = execution_date
        agenda.start_time = data.start_time
        agenda.end_time = data.end_time or "Selesai"
        agenda.meeting_method = method
        agenda.meeting_location = data.location or None
        agenda.meeting_link = data.link or None
        agenda.status = AgendaStatus.DIJADWALKAN
        agenda.meeting_status = MeetingStatus.SCHEDULED
        self._touch(agenda)
        self.repo.commit()
        self._invalidate(*SCHEDULE_PAGES)
        return ActionResult.ok(message="Jadwal rapat berhasil diproses")

    @action("schedule-rollback", "Gagal melakukan rollback jadwal.")
    def rollback_schedule(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        agenda.status = AgendaStatus.DAPAT_DILANJUTKAN
        agenda.meeting_status = MeetingStatus.PENDING
        agenda.execution_date = None
        agenda.start_time = None
        agenda.end_time = "Selesai"
        agenda.meeting_method = None
        agenda.meeting_location = None
        agenda.meeting_link = None
        self._touch(agenda)
        self.repo.commit()
        self._invalidate(*SCHEDULE_PAGES)
        return ActionResult.ok()

    def scheduled(self) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_scheduled()]

    # live meeting
    @action("start-meeting", "Gagal memulai rapat")
    def start_meeting(self, actor: Optional[Actor], agenda_ids: List[str], meeting_number: str,
                      meeting_year: str) -> ActionResult:
        self._require_actor(actor)
        try:
            key = SessionKey(str(meeting_number or "").strip(), str(meeting_year or "").strip())
        except ValueError as e:
            raise ValidationError(str(e)) from e
        ids = unique(agenda_ids)
        if not ids:
            raise ValidationError("Pilih minimal satu agenda")
        rows = self.repo.list_by_ids(ids)
        if len(rows) != len(ids):
            raise NotFoundError("Sebagian agenda tidak ditemukan")
        meeting_types = {a.meeting_type for a in rows}
        if len(meeting_types) > 1:
            raise ValidationError("Agenda dalam satu rapat harus memiliki jenis rapat yang sama")
        for agenda in rows:
            if is_cancelled(agenda.status, agenda.meeting_status) or is_completed(agenda.status, agenda.meeting_status):
                raise ConflictError(f"Agenda '{agenda.title}' tidak dapat dimulai")
        existing = self.repo.list_by_session(key.meeting_number, key.meeting_year, meeting_types.pop())
        if any(is_completed(a.status, a.meeting_status) for a in existing):
            raise ConflictError(f"Rapat No. {key.label} sudah selesai")

        group_id = next((a.risalah_group_id for a in existing if a.risalah_group_id), None) or str(uuid.uuid4())
        for agenda in rows:
            agenda.meeting_number = key.meeting_number
            agenda.meeting_year = key.meeting_year
            agenda.meeting_status = MeetingStatus.IN_PROGRESS
            agenda.risalah_group_id = group_id
            self._touch(agenda)
        self.repo.commit()
        logger.info("[start-meeting] session %s with %d agenda(s)", key.label, len(rows))
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok(data={"meetingNumber": key.meeting_number, "meetingYear": key.meeting_year,
                                     "risalahGroupId": group_id})

    def _save_minutes(self, entries: List[MinutesInput], meeting_type: Optional[str]) -> int:
        if not entries:
            raise ValidationError("Tidak ada data risalah untuk disimpan")
        for entry in entries:
            if not entry.agenda_id:
                raise ValidationError("ID Agenda tidak ditemukan")
            _validate_attendance(entry.attendance_data)
        for entry in entries:
            agenda = self._get_or_404(entry.agenda_id, "ID Agenda tidak ditemukan")
            if meeting_type and agenda.meeting_type != meeting_type:
                raise ValidationError(f"Agenda '{agenda.title}' bukan agenda {meeting_type}")
            if entry.start_time:
                agenda.start_time = entry.start_time
            if entry.end_time:
                agenda.end_time = entry.end_time
            if entry.meeting_location is not None:
                agenda.meeting_location = entry.meeting_location
            agenda.pimpinan_rapat = list(entry.pimpinan_rapat)
            agenda.attendance_data = dict(entry.attendance_data)
            agenda.guest_participants = list(entry.guest_participants)
            agenda.executive_summary = entry.executive_summary
            if agenda.meeting_type == MeetingType.RAKORDIR:
                agenda.arahan_direksi = with_item_ids(entry.arahan_direksi)
            else:
                agenda.considerations = entry.considerations
                agenda.risalah_body = entry.risalah_body
                agenda.meeting_decisions = with_item_ids(entry.meeting_decisions)
                agenda.dissenting_opinion = entry.dissenting_opinion
            if agenda.meeting_status != MeetingStatus.COMPLETED:
                agenda.meeting_status = MeetingStatus.IN_PROGRESS
            self._touch(agenda)
        self.repo.commit()
        self._invalidate(*MEETING_PAGES)
        return len(entries)

    @action("save-risalah", "Gagal menyimpan risalah rapat")
    def save_risalah(self, actor: Optional[Actor], entries: List[MinutesInput]) -> ActionResult:
        self._require_actor(actor)
        saved = self._save_minutes(entries, MeetingType.RADIR)
        return ActionResult.ok(message="Risalah rapat berhasil disimpan", data={"saved": saved})

    @action("rakordir-live", "Gagal menyimpan notulensi")
    def save_rakordir_live(self, actor: Optional[Actor], entries: List[MinutesInput]) -> ActionResult:
        self._require_actor(actor)
        saved = self._save_minutes(entries, MeetingType.RAKORDIR)
        return ActionResult.ok(message="Notulensi Rakordir berhasil disimpan", data={"saved": saved})

    @action("finish-meeting", "Gagal menyelesaikan rapat.")
    def finish_meeting(self, actor: Optional[Actor], meeting_number: str, meeting_year: str,
                       meeting_type: Optional[str] = None) -> ActionResult:
        self._require_actor(actor)
        rows = self.repo.list_by_session(meeting_number, meeting_year, meeting_type)
        if not rows:
            raise NotFoundError(f"Rapat No. {meeting_number}/{meeting_year} tidak ditemukan")
        for agenda in rows:
            if is_cancelled(agenda.status, agenda.meeting_status):
                continue
            agenda.status = AgendaStatus.RAPAT_SELESAI
            agenda.meeting_status = MeetingStatus.COMPLETED
            items = agenda.arahan if agenda.meeting_type == MeetingType.RAKORDIR else agenda.decisions
            agenda.monev_status = compute_monev_status(items) if items else MonevStatus.ON_PROGRESS
            self._touch(agenda)
        self.repo.commit()
        logger.info("[finish-meeting] session %s/%s closed (%d agenda(s))", meeting_number, meeting_year, len(rows))
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok(message="Rapat berhasil diselesaikan")

    # signed documents
    def _upload_document(self, agenda: AgendaModel, kind: str, file: Optional[UploadedFile]) -> str:
        if not present(file):
            raise ValidationError("File wajib diunggah")
        path = StoragePaths.minutes(agenda.meeting_type, agenda.id, kind, file.filename)
        return self.storage.upload(path, file.content, file.content_type or "application/pdf")

    @action("risalah-upload", "Gagal mengunggah risalah")
    def upload_risalah_ttd(self, actor: Optional[Actor], agenda_id: str, file: Optional[UploadedFile]) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        old = agenda.risalah_ttd
        path = self._upload_document(agenda, "risalah-ttd", file)
        agenda.risalah_ttd = path
        self._touch(agenda)
        self.repo.commit()
        if old and old != path:
            self.storage.remove_quietly([old])
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok(data={"path": path})

    @action("notulensi-upload", "Gagal mengunggah notulensi")
    def upload_session_minutes(self, actor: Optional[Actor], agenda_id: str,
                               file: Optional[UploadedFile]) -> ActionResult:
        """Attach one signed minutes file to every agenda of the agenda's session."""
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        if not agenda.meeting_number or not agenda.meeting_year:
            raise ValidationError("Agenda belum memiliki nomor rapat")
        path = self._upload_document(agenda, "notulensi", file)
        rows = self.repo.list_by_session(agenda.meeting_number, agenda.meeting_year, agenda.meeting_type)
        stale = unique(a.risalah_ttd for a in rows if a.risalah_ttd and a.risalah_ttd != path)
        for row in rows:
            row.risalah_ttd = path
            self._touch(row)
        self.repo.commit()
        self.storage.remove_quietly(stale)
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok(data={"path": path, "linked": len(rows)})

    @action("risalah-delete", "Gagal menghapus risalah")
    def delete_risalah_ttd(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        path = agenda.risalah_ttd
        if not path:
            raise NotFoundError("File risalah tidak ditemukan")
        rows = [agenda]
        if agenda.meeting_number and agenda.meeting_year:
            rows = [a for a in self.repo.list_by_session(agenda.meeting_number, agenda.meeting_year)
                    if a.risalah_ttd == path] or [agenda]
        for row in rows:
            row.risalah_ttd = None
            self._touch(row)
        self.storage.remove([path])
        self.repo.commit()
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok()

    @action("petikan-upload", "Gagal mengunggah petikan risalah")
    def upload_petikan(self, actor: Optional[Actor], agenda_id: str, file: Optional[UploadedFile]) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        old = agenda.petikan_risalah
        path = self._upload_document(agenda, "petikan", file)
        agenda.petikan_risalah = path
        self._touch(agenda)
        self.repo.commit()
        if old and old != path:
            self.storage.remove_quietly([old])
        self._invalidate(*MEETING_PAGES)
        return ActionResult.ok(data={"path": path})

    def document_url(self, actor: Optional[Actor], path: Optional[str]) -> ActionResult:
        if actor is None:
            return ActionResult.fail("Sesi kadaluarsa.", "unauthenticated")
        if not path:
            return ActionResult.fail("File risalah belum tersedia.", "not_found")
        url = self.storage.signed_url(path)
        if not url:
            return ActionResult.fail("Gagal membuat tautan unduhan.", "storage")
        return ActionResult.ok(data={"url": url})

    # monitoring view
    def sessions(self, meeting_type: str) -> List[Dict[str, Any]]:
        """Agendas grouped into meeting sessions, newest session first."""
        groups: "OrderedDict[tuple, List[AgendaModel]]" = OrderedDict()
        for agenda in self.repo.list_with_session(meeting_type):
            groups.setdefault((agenda.meeting_number, agenda.meeting_year), []).append(agenda)

        out = []
        for (number, year), rows in groups.items():
            if all(is_completed(a.status, a.meeting_status) for a in rows):
                status = MeetingStatus.COMPLETED
            else:
                status = MeetingStatus.IN_PROGRESS
            first = rows[0]
            out.append({
                "meetingNumber": number,
                "meetingYear": year,
                "meetingType": meeting_type,
                "executionDate": first.execution_date.isoformat() if first.execution_date else None,
                "meetingStatus": status,
                "risalahGroupId": first.risalah_group_id,
                "risalahTtd": next((a.risalah_ttd for a in rows if a.risalah_ttd), None),
                "agendaCount": len(rows),
                "agendas": [a.to_dict() for a in rows],
            })
        return out

    def session_agendas(self, meeting_number: str, meeting_year: str,
                        meeting_type: Optional[str] = None) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_by_session(meeting_number, meeting_year, meeting_type)]
