from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from board_meeting.application.common import (
    Actor,
    AgendaUseCase,
    ProposalInput,
    UploadedFile,
    agenda_file_paths,
    clean_value,
    parse_datetime,
    present,
)
from board_meeting.application.results import ActionResult, action
from board_meeting.domain.entities.agenda import (
    AgendaStatus,
    KEPDIR_FILE_FIELDS,
    MeetingStatus,
    MeetingType,
    RADIR_FILE_FIELDS,
    RAKORDIR_FILE_FIELDS,
)
from board_meeting.domain.entities.errors import ConflictError, NotFoundError, ValidationError
from board_meeting.infrastructure.database.models import AgendaModel
from board_meeting.infrastructure.supabase.storage import StoragePaths

logger = logging.getLogger(__name__)

# a deleted row can sit in any later-stage list
DELETE_PAGES = ("/jadwal-rapat", "/pelaksanaan-rapat", "/monev")


def documents_complete(paths: Dict[str, Optional[str]], not_required: List[str]) -> bool:
    """True when every file field has a stored path or is marked not required."""
    return all(path or field in not_required for field, path in paths.items())


def completeness_status(paths: Dict[str, Optional[str]], not_required: List[str]) -> str:
    return AgendaStatus.DAPAT_DILANJUTKAN if documents_complete(paths, not_required) else AgendaStatus.DRAFT


def calculated_priority(deadline: Optional[datetime], now: Optional[datetime] = None) -> str:
    if deadline is None:
        return "Low"
    days_remaining = (deadline - (now or datetime.now())).days
    if days_remaining <= 7:
        return "High"
    if days_remaining <= 14:
        return "Medium"
    return "Low"


def _validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if len(title) < 5:
        raise ValidationError("Judul agenda minimal 5 karakter")
    return title


class _ProposalActions(AgendaUseCase):
    """Create/update/delete for one meeting type's proposal form."""

    meeting_type: str = MeetingType.RADIR
    file_fields: Dict[str, str] = {}
    storage_prefix: str = ""
    pages: tuple = ()
    label: str = "agenda"

    def _path_for(self, user_id: str, field: str, file: UploadedFile) -> str:
        raise NotImplementedError

    # create
    def _upload_files(self, actor: Actor, form: ProposalInput, uploaded: List[str]) -> Dict[str, Optional[str]]:
        paths: Dict[str, Optional[str]] = {}
        for field in self.file_fields:
            file = form.files.get(field)
            if present(file):
                path = self.storage.upload(self._path_for(actor.user_id, field, file), file.content, file.content_type)
                uploaded.append(path)
                paths[field] = path
            else:
                paths[field] = None
        return paths

    def _upload_supporting(self, actor: Actor, form: ProposalInput, uploaded: List[str]) -> List[str]:
        out = []
        for file in form.supporting_documents:
            if not present(file):
                continue
            path = self.storage.upload(
                StoragePaths.supporting(self.storage_prefix, actor.user_id, file.filename),
                file.content,
                file.content_type,
            )
            uploaded.append(path)
            out.append(path)
        return out

    def _create(self, actor: Optional[Actor], form: ProposalInput) -> ActionResult:
        actor = self._require_actor(actor)
        title = _validate_title(form.title)
        self._validate(form)
        not_required = list(form.not_required_files or [])

        uploaded: List[str] = []
        try:
            paths = self._upload_files(actor, form, uploaded)
            supporting = self._upload_supporting(actor, form, uploaded)
            agenda = AgendaModel(
                title=title,
                meeting_type=self.meeting_type,
                meeting_status=MeetingStatus.PENDING,
                end_time="Selesai",
                not_required_files=not_required,
                supporting_documents=supporting,
                user_id=actor.user_id,
                **{col: paths[field] for field, col in self.file_fields.items()},
            )
            self._fill_new(agenda, form)
            agenda.status = self._initial_status(paths, not_required)
            self.repo.add(agenda)
            self.repo.commit()
        except Exception:
            # nothing references these objects once the insert is gone
            self.storage.remove_quietly(uploaded)
            raise

        logger.info("[%s] created agenda id=%s status=%s", self.label, agenda.id, agenda.status)
        self._invalidate(*self.pages)
        return ActionResult.ok(data={"id": agenda.id, "status": agenda.status})

    def _initial_status(self, paths: Dict[str, Optional[str]], not_required: List[str]) -> str:
        return completeness_status(paths, not_required)

    def _validate(self, form: ProposalInput) -> None:
        pass

    def _fill_new(self, agenda: AgendaModel, form: ProposalInput) -> None:
        raise NotImplementedError

    def _fill_existing(self, agenda: AgendaModel, form: ProposalInput) -> None:
        raise NotImplementedError

    # update
    def _update(self, actor: Optional[Actor], agenda_id: str, form: ProposalInput) -> ActionResult:
        actor = self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        if agenda.meeting_type != self.meeting_type:
            raise NotFoundError("Data tidak ditemukan.")
        if agenda.status in AgendaStatus.LOCKED:
            raise ConflictError("Agenda sudah dikunci karena telah dijadwalkan.")
        if form.title is not None:
            _validate_title(form.title)
        self._validate_update(form)

        not_required = form.not_required_files if form.not_required_files is not None else agenda.not_required
        stale: List[str] = []
        uploaded: List[str] = []
        paths: Dict[str, Optional[str]] = {}
        try:
            for field, col in self.file_fields.items():
                file = form.files.get(field)
                old_path = getattr(agenda, col)
                if present(file):
                    if old_path:
                        stale.append(old_path)
                    path = self.storage.upload(
                        self._path_for(actor.user_id, field, file), file.content, file.content_type
                    )
                    uploaded.append(path)
                    paths[field] = path
                elif field in form.delete_files:
                    if old_path:
                        stale.append(old_path)
                    paths[field] = None
                else:
                    paths[field] = old_path

            supporting = agenda.supporting_paths + self._upload_supporting(actor, form, uploaded)

            for field, col in self.file_fields.items():
                setattr(agenda, col, paths[field])
            agenda.supporting_documents = supporting
            agenda.not_required_files = list(not_required)
            self._fill_existing(agenda, form)
            agenda.status = self._updated_status(agenda, paths, list(not_required))
            self._touch(agenda)
            self.repo.commit()
        except Exception:
            # the row still points at the old files
            self.storage.remove_quietly(uploaded)
            raise

        # replaced or flagged files go only after the row points elsewhere
        self.storage.remove_quietly(stale)
        logger.info("[%s] updated agenda id=%s status=%s", self.label, agenda.id, agenda.status)
        self._invalidate(*self.pages)
        return ActionResult.ok(data={"id": agenda.id, "status": agenda.status})

    def _validate_update(self, form: ProposalInput) -> None:
        pass

    def _updated_status(self, agenda: AgendaModel, paths: Dict[str, Optional[str]], not_required: List[str]) -> str:
        return completeness_status(paths, not_required)

    # delete
    def _delete(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        self._require_actor(actor)
        agenda = self._get_or_404(agenda_id)
        if agenda.meeting_type != self.meeting_type:
            raise NotFoundError("Data tidak ditemukan.")
        files = agenda_file_paths(agenda)
        self.repo.delete(agenda)
        # StorageError here rolls the row deletion back
        self.storage.remove(files)
        self.repo.commit()
        logger.info("[%s] deleted agenda id=%s files=%d", self.label, agenda_id, len(files))
        self._invalidate(*self.pages, *DELETE_PAGES)
        return ActionResult.ok()

    def list(self) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_by_type(self.meeting_type)]


class RadirProposals(_ProposalActions):
    meeting_type = MeetingType.RADIR
    file_fields = RADIR_FILE_FIELDS
    storage_prefix = "radir"
    pages = ("/agenda/radir", "/agenda-siap/radir")
    label = "radir"

    def _path_for(self, user_id: str, field: str, file: UploadedFile) -> str:
        return StoragePaths.radir(user_id, field, file.filename)

    def _fill_new(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.urgency = form.urgency
        agenda.priority = clean_value(form.priority, "Low")
        agenda.deadline = parse_datetime(form.deadline)
        agenda.director = clean_value(form.director, "DIRUT")
        agenda.initiator = clean_value(form.initiator, "PLN")
        agenda.support = form.support or ""
        agenda.contact_person = clean_value(form.contact_person, "N/A")
        agenda.position = clean_value(form.position, "Staff")
        agenda.phone = clean_value(form.phone, "0")

    def _fill_existing(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.title = clean_value(form.title, agenda.title).strip()
        agenda.urgency = clean_value(form.urgency, agenda.urgency)
        agenda.priority = clean_value(form.priority, agenda.priority)
        if form.deadline:
            agenda.deadline = parse_datetime(form.deadline)
        agenda.director = clean_value(form.director, agenda.director)
        agenda.initiator = clean_value(form.initiator, agenda.initiator)
        if form.support is not None:
            agenda.support = form.support
        agenda.contact_person = clean_value(form.contact_person, agenda.contact_person)
        agenda.position = clean_value(form.position, agenda.position)
        agenda.phone = clean_value(form.phone, agenda.phone)

    @action("radir-create", "Gagal menyimpan data.")
    def create(self, actor: Optional[Actor], form: ProposalInput) -> ActionResult:
        return self._create(actor, form)

    @action("radir-update", "Gagal memperbarui data.")
    def update(self, actor: Optional[Actor], agenda_id: str, form: ProposalInput) -> ActionResult:
        return self._update(actor, agenda_id, form)

    @action("radir-delete", "Gagal menghapus data.")
    def delete(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        return self._delete(actor, agenda_id)

    def list(self, now: Optional[datetime] = None) -> List[dict]:
        """RADIR proposals with a deadline-driven priority badge."""
        out = []
        for agenda in self.repo.list_by_type(self.meeting_type):
            item = agenda.to_dict()
            item["calculatedPriority"] = calculated_priority(agenda.deadline, now)
            out.append(item)
        return out


class RakordirProposals(_ProposalActions):
    meeting_type = MeetingType.RAKORDIR
    file_fields = RAKORDIR_FILE_FIELDS
    storage_prefix = "rakordir"
    pages = ("/agenda/rakordir", "/agenda-siap/rakordir")
    label = "rakordir"

    def _path_for(self, user_id: str, field: str, file: UploadedFile) -> str:
        return StoragePaths.rakordir(user_id, field, file.filename)

    def _fill_new(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.urgency = form.urgency or "Biasa"
        agenda.deadline = parse_datetime(form.deadline)
        agenda.priority = form.priority or "Low"
        agenda.director = form.director or "DIRUT"
        agenda.initiator = form.initiator or "PLN"
        agenda.support = form.support or ""
        agenda.contact_person = form.contact_person or ""
        agenda.position = form.position or ""
        agenda.phone = form.phone or ""

    def _fill_existing(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.title = (form.title or agenda.title).strip()
        agenda.priority = form.priority or agenda.priority
        agenda.director = form.director or agenda.director
        agenda.initiator = form.initiator or agenda.initiator
        agenda.contact_person = form.contact_person or agenda.contact_person
        agenda.position = form.position or agenda.position
        agenda.phone = form.phone or agenda.phone
        agenda.urgency = form.urgency or agenda.urgency
        if form.deadline:
            agenda.deadline = parse_datetime(form.deadline)

    @action("rakordir-create", "Gagal menyimpan agenda.")
    def create(self, actor: Optional[Actor], form: ProposalInput) -> ActionResult:
        return self._create(actor, form)

    @action("rakordir-update", "Gagal update agenda")
    def update(self, actor: Optional[Actor], agenda_id: str, form: ProposalInput) -> ActionResult:
        return self._update(actor, agenda_id, form)

    @action("rakordir-delete", "Gagal menghapus agenda")
    def delete(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        return self._delete(actor, agenda_id)


def _names(values: List[str], single: Optional[str]) -> List[str]:
    names = [v.strip() for v in values if v and v.strip()]
    if not names and single and single.strip():
        names = [single.strip()]
    return names


class KepdirProposals(_ProposalActions):
    """Circular decisions: documents only, no meeting is held."""

    meeting_type = MeetingType.KEPDIR_SIRKULER
    file_fields = KEPDIR_FILE_FIELDS
    storage_prefix = "kepdir-sirkuler"
    pages = ("/agenda/kepdir-sirkuler",)
    label = "kepdir"

    def _path_for(self, user_id: str, field: str, file: UploadedFile) -> str:
        return StoragePaths.kepdir(user_id, field, file.filename)

    def _validate(self, form: ProposalInput) -> None:
        if not _names(form.directors, form.director):
            raise ValidationError("Pilih minimal satu Direktur Pemrakarsa")
        if not _names(form.initiators, form.initiator):
            raise ValidationError("Pilih minimal satu Unit Pemrakarsa")
        if not (form.contact_person or "").strip():
            raise ValidationError("Nama narahubung wajib diisi")
        if not (form.position or "").strip():
            raise ValidationError("Jabatan narahubung wajib diisi")
        if not (form.phone or "").strip():
            raise ValidationError("Nomor HP narahubung wajib diisi")

    def _validate_update(self, form: ProposalInput) -> None:
        self._validate(form)

    def _initial_status(self, paths, not_required) -> str:
        return AgendaStatus.DRAFT

    def _updated_status(self, agenda, paths, not_required) -> str:
        return agenda.status

    def _fill_new(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.director = ", ".join(_names(form.directors, form.director))
        agenda.initiator = ", ".join(_names(form.initiators, form.initiator))
        agenda.contact_person = form.contact_person.strip()
        agenda.position = form.position.strip()
        agenda.phone = form.phone.strip()
        agenda.priority = form.priority or "Low"
        agenda.urgency = "Normal"

    def _fill_existing(self, agenda: AgendaModel, form: ProposalInput) -> None:
        agenda.title = (form.title or agenda.title).strip()
        self._fill_new(agenda, form)
        agenda.priority = form.priority or agenda.priority

    @action("kepdir-create", "Terjadi kesalahan internal")
    def create(self, actor: Optional[Actor], form: ProposalInput) -> ActionResult:
        return self._create(actor, form)

    @action("kepdir-update", "Terjadi kesalahan update")
    def update(self, actor: Optional[Actor], agenda_id: str, form: ProposalInput) -> ActionResult:
        return self._update(actor, agenda_id, form)

    @action("kepdir-delete", "Terjadi kesalahan hapus")
    def delete(self, actor: Optional[Actor], agenda_id: str) -> ActionResult:
        return self._delete(actor, agenda_id)

    def get(self, agenda_id: str) -> Optional[dict]:
        agenda = self.repo.get_by_type(agenda_id, self.meeting_type)
        return agenda.to_dict() if agenda else None

    def list_by_status(self, status: str) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_by_type(self.meeting_type, status=status)]

    def list(self) -> List[dict]:
        return [a.to_dict() for a in self.repo.list_by_type(self.meeting_type, order_by_updated=True)]


PROPOSALS: Dict[str, Callable[..., _ProposalActions]] = {
    MeetingType.RADIR: RadirProposals,
    MeetingType.RAKORDIR: RakordirProposals,
    MeetingType.KEPDIR_SIRKULER: KepdirProposals,
}
