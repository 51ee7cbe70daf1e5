from __future__ import annotations

import logging
from typing import List, Optional

from board_meeting.application.common import Actor, AgendaUseCase, agenda_file_paths, unique
from board_meeting.application.results import ActionResult, action
from board_meeting.domain.entities.agenda import AgendaStatus, MeetingStatus
from board_meeting.domain.entities.errors import ValidationError

logger = logging.getLogger(__name__)

ALL_AGENDA_PAGES = (
    "/agenda/radir",
    "/agenda/rakordir",
    "/agenda/kepdir-sirkuler",
    "/agenda-siap/radir",
    "/agenda-siap/rakordir",
    "/jadwal-rapat",
    "/pelaksanaan-rapat",
    "/monev",
)

MIN_REASON_LENGTH = 5


def _validate_reason(reason: Optional[str], what: str) -> str:
    reason = (reason or "").strip()
    if len(reason) < MIN_REASON_LENGTH:
        raise ValidationError(f"Alasan {what} minimal {MIN_REASON_LENGTH} karakter")
    return reason


class AgendaActions(AgendaUseCase):
    """Actions shared by every meeting type."""

    @action("bulk-delete", "Gagal menghapus bulk data.")
    def bulk_delete(self, actor: Optional[Actor], ids: List[str]) -> ActionResult:
        self._require_actor(actor)
        ids = unique(ids)
        if not ids:
            raise ValidationError("Tidak ada agenda yang dipilih.")
        rows = self.repo.list_by_ids(ids)
        files: List[str] = []
        for agenda in rows:
            files.extend(agenda_file_paths(agenda))

        # one transaction: rows go first, files second, commit only if both worked
        deleted = self.repo.delete_many([a.id for a in rows])
        self.storage.remove(unique(files))
        self.repo.commit()

        logger.info("[bulk-delete] deleted %d agenda(s), %d file(s)", deleted, len(files))
        self._invalidate(*ALL_AGENDA_PAGES)
        return ActionResult.ok(data={"deleted": deleted})

    @action("cancel", "Gagal membatalkan agenda.")
    def cancel(self, actor: Optional[Actor], agenda_id: str, reason: Optional[str]) -> ActionResult:
        self._require_actor(actor)
        reason = _validate_reason(reason, "pembatalan")
        agenda = self._get_or_404(agenda_id)
        agenda.status = AgendaStatus.DIBATALKAN
        agenda.meeting_status = MeetingStatus.CANCELLED
        agenda.cancellation_reason = reason
        self._touch(agenda)
        self.repo.commit()
        self._invalidate(*ALL_AGENDA_PAGES)
        return ActionResult.ok(message="Agenda berhasil dibatalkan")

    @action("postpone", "Gagal menunda agenda.")
    def postpone(self, actor: Optional[Actor], agenda_id: str, reason: Optional[str]) -> ActionResult:
        self._require_actor(actor)
        reason = _validate_reason(reason, "penundaan")
        agenda = self._get_or_404(agenda_id)
        agenda.status = AgendaStatus.DITUNDA
        agenda.postponement_reason = reason
        self._touch(agenda)
        self.repo.commit()
        self._invalidate(*ALL_AGENDA_PAGES)
        return ActionResult.ok(message="Agenda berhasil ditunda")

    @action("resume", "Gagal memulihkan agenda.")
    def resume(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        agenda.status = AgendaStatus.DAPAT_DILANJUTKAN
        agenda.meeting_status = MeetingStatus.PENDING
        agenda.cancellation_reason = None
        agenda.postponement_reason = None
        self._touch(agenda)
        self.repo.commit()
        self._invalidate(*ALL_AGENDA_PAGES)
        return ActionResult.ok(message="Agenda berhasil dipulihkan")

    def signed_file_url(self, actor: Optional[Actor], path: Optional[str]) -> Optional[str]:
        if actor is None or not path:
            return None
        return self.storage.signed_url(path)

    def ready_list(self, meeting_type: str) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_ready(meeting_type)]

    def get(self, agenda_id: str) -> Optional[dict]:
        agenda = self.repo.get(agenda_id)
        return agenda.to_dict() if agenda else None
