from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from board_meeting.application.common import Actor, AgendaUseCase, UploadedFile, present
from board_meeting.application.results import ActionResult, action
from board_meeting.domain.entities.agenda import AgendaStatus, MeetingStatus, MeetingType, MonevStatus
from board_meeting.domain.entities.errors import NotFoundError, ValidationError
from board_meeting.domain.services.monev import compute_monev_status, is_done_status, summarize_items
from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.supabase.storage import StoragePaths

logger = logging.getLogger(__name__)

MONEV_PAGES = {
    MeetingType.RADIR: "/monev/radir",
    MeetingType.RAKORDIR: "/monev/rakordir",
}
# follow-up columns also show in the proposal and session lists
FOLLOW_UP_PAGES = ("/agenda", "/pelaksanaan-rapat")


@dataclass
class MonevUpdateInput:
    target_output: Optional[str] = None
    current_progress: Optional[str] = None
    status: Optional[str] = None
    evidence_file: Optional[UploadedFile] = None
    remove_evidence: bool = False


@dataclass
class ManualMonevInput:
    title: Optional[str] = None
    target_output: Optional[str] = None
    current_progress: Optional[str] = None
    status: Optional[str] = None
    evidence_file: Optional[UploadedFile] = None


def _normalize_status(status: Optional[str]) -> str:
    return MonevStatus.DONE if is_done_status(status) else MonevStatus.ON_PROGRESS


def _check_size(file: UploadedFile) -> None:
    limit = get_settings().max_evidence_bytes
    if file.size > limit:
        raise ValidationError(f"Ukuran file maksimal {limit // (1024 * 1024)}MB")


class MonevUseCase(AgendaUseCase):
    """Follow-up monitoring of decisions (RADIR) and directives (RAKORDIR)."""

    def list(self, meeting_type: str) -> List[dict]:
        out = []
        for agenda in self.repo.list_monev(meeting_type):
            row = agenda.to_dict()
            row["monevSummary"] = summarize_items(self._items_of(agenda)[1]).to_dict()
            out.append(row)
        return out

    @staticmethod
    def _items_of(agenda: AgendaModel) -> Tuple[str, list]:
        """Return the column holding follow-up items and a private copy of them.

        RAKORDIR rows keep directives in arahan_direksi; older and manual rows
        used meeting_decisions.
        """
        if agenda.meeting_type == MeetingType.RAKORDIR and agenda.arahan:
            return "arahan_direksi", copy.deepcopy(agenda.arahan)
        return "meeting_decisions", copy.deepcopy(agenda.decisions)

    @action("monev-update", "Gagal memperbarui progress.")
    def update_item(self, actor: Optional[Actor], agenda_id: str, item_id: str,
                    data: MonevUpdateInput) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id, "Agenda tidak ditemukan.")
        column, items = self._items_of(agenda)
        index = next((i for i, d in enumerate(items) if isinstance(d, dict) and str(d.get("id")) == str(item_id)), -1)
        if index == -1:
            noun = "arahan" if agenda.meeting_type == MeetingType.RAKORDIR else "keputusan"
            raise NotFoundError(f"Item {noun} tidak ditemukan.")

        item = items[index]
        old_path = item.get("evidencePath") or None
        new_path = old_path
        stale: List[str] = []
        if data.remove_evidence and old_path:
            stale.append(old_path)
            new_path = None
        if present(data.evidence_file):
            _check_size(data.evidence_file)
            path = StoragePaths.evidence(agenda.id, str(item_id), data.evidence_file.filename, agenda.meeting_type)
            new_path = self.storage.upload(path, data.evidence_file.content, data.evidence_file.content_type)
            if old_path and old_path not in stale:
                stale.append(old_path)

        item.update({
            "targetOutput": data.target_output,
            "currentProgress": data.current_progress,
            "status": _normalize_status(data.status),
            "evidencePath": new_path,
            "lastUpdated": datetime.now().isoformat(),
        })
        # assign a new list so the JSON column is flagged dirty
        setattr(agenda, column, items)
        agenda.monev_status = compute_monev_status(items)
        self._touch(agenda)
        try:
            self.repo.commit()
        except Exception:
            if new_path and new_path != old_path:
                self.storage.remove_quietly([new_path])
            raise
        self.storage.remove_quietly(stale)

        self._invalidate(MONEV_PAGES.get(agenda.meeting_type, "/monev"), *FOLLOW_UP_PAGES)
        return ActionResult.ok(message="Progress berhasil diperbarui.")

    @action("monev-manual", "Gagal menambahkan data monev.")
    def create_manual_rakordir(self, actor: Optional[Actor], data: ManualMonevInput) -> ActionResult:
        actor = self._require_actor(actor)
        title = (data.title or "").strip()
        if not title:
            raise ValidationError("Judul arahan harus diisi")

        evidence_path = None
        if present(data.evidence_file):
            _check_size(data.evidence_file)
            evidence_path = self.storage.upload(
                StoragePaths.manual_evidence(data.evidence_file.filename),
                data.evidence_file.content,
                data.evidence_file.content_type,
            )

        status = _normalize_status(data.status)
        item = {
            "id": str(uuid.uuid4()),
            "text": title,
            "targetOutput": data.target_output,
            "currentProgress": data.current_progress,
            "status": status,
            "evidencePath": evidence_path,
            "lastUpdated": datetime.now().isoformat(),
        }
        agenda = AgendaModel(
            title=title,
            meeting_type=MeetingType.RAKORDIR,
            status=AgendaStatus.RAPAT_SELESAI,
            meeting_status=MeetingStatus.COMPLETED,
            meeting_number="MANUAL",
            meeting_year=str(datetime.now().year),
            arahan_direksi=[item],
            monev_status=status,
            urgency="Normal",
            priority="Medium",
            user_id=actor.user_id,
        )
        try:
            self.repo.add(agenda)
            self.repo.commit()
        except Exception:
            self.storage.remove_quietly([evidence_path])
            raise
        logger.info("[monev-manual] created manual directive %s", agenda.id)
        self._invalidate(MONEV_PAGES[MeetingType.RAKORDIR], *FOLLOW_UP_PAGES)
        return ActionResult.ok(message="Data Monev Rakordir berhasil ditambahkan", data={"id": agenda.id})

    def evidence_url(self, actor: Optional[Actor], path: Optional[str]) -> Optional[str]:
        if actor is None or not path:
            return None
        return self.storage.signed_url(path)
