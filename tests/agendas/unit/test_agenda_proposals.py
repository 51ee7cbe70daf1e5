"""
Unit tests for the proposal form actions (RADIR, RAKORDIR, KEPDIR_SIRKULER)
"""
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from board_meeting.application.common import ProposalInput
from board_meeting.application.use_cases.agenda_proposals import (
    KepdirProposals,
    RadirProposals,
    RakordirProposals,
    calculated_priority,
    documents_complete,
)
from board_meeting.infrastructure.cache.page_cache import PageCache

RADIR_FIELDS = [
    "legalReview",
    "riskReview",
    "complianceReview",
    "regulationReview",
    "recommendationNote",
    "proposalNote",
    "presentationMaterial",
]


@pytest.fixture
def radir(agenda_repo, storage):
    return RadirProposals(agenda_repo, storage)


@pytest.fixture
def rakordir(agenda_repo, storage):
    return RakordirProposals(agenda_repo, storage)


@pytest.fixture
def kepdir(agenda_repo, storage):
    return KepdirProposals(agenda_repo, storage)


class TestHelpers:
    def test_documents_complete(self):
        assert documents_complete({"a": "x.pdf", "b": None}, ["b"])
        assert not documents_complete({"a": "x.pdf", "b": None}, [])

    @pytest.mark.parametrize("days, expected", [(3, "High"), (7, "High"), (10, "Medium"), (30, "Low")])
    def test_calculated_priority(self, days, expected):
        now = datetime(2026, 1, 1, 8, 0)
        assert calculated_priority(now + timedelta(days=days, hours=1), now) == expected

    def test_no_deadline_is_low(self):
        assert calculated_priority(None) == "Low"


class TestRadirCreate:
    def test_requires_actor(self, radir):
        result = radir.create(None, ProposalInput(title="Persetujuan RKAP"))
        assert result.success is False
        assert result.kind == "unauthenticated"
        assert result.error == "Sesi kadaluarsa. Silakan login kembali."

    def test_short_title_is_rejected(self, radir, actor):
        result = radir.create(actor, ProposalInput(title=" abc "))
        assert result.success is False
        assert result.kind == "validation"

    def test_missing_documents_stay_draft(self, radir, actor, pdf, agenda_repo, storage):
        form = ProposalInput(title="Persetujuan RKAP", files={"legalReview": pdf()})
        result = radir.create(actor, form)

        assert result.success is True
        assert result.data["status"] == "DRAFT"
        agenda = agenda_repo.get(result.data["id"])
        assert agenda.legal_review in storage.objects
        assert agenda.legal_review.startswith("radir/user-1/")
        assert agenda.legal_review.endswith("-legalReview.pdf")
        assert agenda.risk_review is None
        assert agenda.director == "DIRUT"
        assert agenda.contact_person == "N/A"
        assert agenda.phone == "0"
        assert agenda.user_id == "user-1"

    def test_complete_with_not_required_fields(self, radir, actor, pdf, agenda_repo):
        form = ProposalInput(
            title="Persetujuan RKAP",
            files={"proposalNote": pdf(), "presentationMaterial": pdf("slides.pptx")},
            not_required_files=[f for f in RADIR_FIELDS if f not in ("proposalNote", "presentationMaterial")],
        )
        result = radir.create(actor, form)
        assert result.data["status"] == "DAPAT_DILANJUTKAN"
        agenda = agenda_repo.get(result.data["id"])
        assert agenda.presentation_material.endswith(".pptx")

    def test_supporting_documents(self, radir, actor, pdf, agenda_repo):
        form = ProposalInput(
            title="Persetujuan RKAP",
            supporting_documents=[pdf("Lampiran 1.pdf"), pdf("empty.pdf", b"")],
        )
        result = radir.create(actor, form)
        paths = agenda_repo.get(result.data["id"]).supporting_paths
        assert len(paths) == 1
        assert paths[0].endswith("-support-Lampiran_1.pdf")

    def test_upload_failure_leaves_no_row(self, radir, actor, pdf, agenda_repo, storage):
        storage.fail_upload = True
        result = radir.create(actor, ProposalInput(title="Persetujuan RKAP", files={"legalReview": pdf()}))
        assert result.success is False
        assert result.kind == "storage"
        assert agenda_repo.list_by_type("RADIR") == []

    def test_invalidates_dashboard_and_pages(self, radir, actor):
        PageCache.set("/dashboard?from=2026-01-01&to=2026-01-31", {"cached": True})
        PageCache.set("/agenda/radir", [])
        PageCache.set("/monev/radir", [])
        radir.create(actor, ProposalInput(title="Persetujuan RKAP"))
        assert list(PageCache.keys()) == ["/monev/radir"]

    def test_list_has_priority_badge(self, radir, make_agenda):
        make_agenda(deadline=datetime(2026, 1, 3, 9, 0))
        items = radir.list(now=datetime(2026, 1, 1, 8, 0))
        assert items[0]["calculatedPriority"] == "High"


class TestRadirUpdate:
    def test_replaces_file_and_removes_old(self, radir, actor, pdf, make_agenda, storage, agenda_repo):
        agenda = make_agenda(legal_review="radir/user-1/1-legalReview.pdf")
        storage.objects["radir/user-1/1-legalReview.pdf"] = b"old"

        result = radir.update(actor, agenda.id, ProposalInput(files={"legalReview": pdf()}))

        assert result.success is True
        updated = agenda_repo.get(agenda.id)
        assert updated.legal_review != "radir/user-1/1-legalReview.pdf"
        assert storage.removed == ["radir/user-1/1-legalReview.pdf"]

    def test_failed_commit_removes_new_uploads(self, radir, actor, pdf, make_agenda, storage, agenda_repo):
        """New objects are dropped and the stored file stays when the row cannot be saved"""
        agenda = make_agenda(legal_review="radir/user-1/1-legalReview.pdf")
        storage.objects["radir/user-1/1-legalReview.pdf"] = b"old"
        form = ProposalInput(files={"legalReview": pdf()}, supporting_documents=[pdf("Lampiran.pdf")])

        with patch.object(agenda_repo, "commit", side_effect=RuntimeError("database is locked")):
            result = radir.update(actor, agenda.id, form)

        assert result.success is False
        assert result.kind == "internal"
        assert len(storage.uploaded) == 2
        assert sorted(storage.removed) == sorted(storage.uploaded)
        assert list(storage.objects) == ["radir/user-1/1-legalReview.pdf"]
        assert agenda_repo.get(agenda.id).legal_review == "radir/user-1/1-legalReview.pdf"

    def test_delete_flag_clears_field(self, radir, actor, make_agenda, storage, agenda_repo):
        agenda = make_agenda(risk_review="radir/user-1/2-riskReview.pdf")
        result = radir.update(actor, agenda.id, ProposalInput(delete_files={"riskReview"}))
        assert result.success is True
        assert agenda_repo.get(agenda.id).risk_review is None
        assert storage.removed == ["radir/user-1/2-riskReview.pdf"]

    def test_status_recomputed(self, radir, actor, make_agenda, agenda_repo):
        agenda = make_agenda(proposal_note="p.pdf")
        result = radir.update(
            actor, agenda.id, ProposalInput(not_required_files=[f for f in RADIR_FIELDS if f != "proposalNote"])
        )
        assert result.data["status"] == "DAPAT_DILANJUTKAN"

    def test_keeps_not_required_when_absent(self, radir, actor, make_agenda, agenda_repo):
        agenda = make_agenda(not_required_files=["legalReview"])
        radir.update(actor, agenda.id, ProposalInput(contact_person="Siti"))
        updated = agenda_repo.get(agenda.id)
        assert updated.not_required == ["legalReview"]
        assert updated.contact_person == "Siti"

    @pytest.mark.parametrize("status", ["DIJADWALKAN", "RAPAT_SELESAI"])
    def test_locked_rows_refuse_changes(self, radir, actor, make_agenda, status):
        agenda = make_agenda(status=status)
        result = radir.update(actor, agenda.id, ProposalInput(title="Judul baru sekali"))
        assert result.success is False
        assert result.kind == "conflict"

    def test_other_type_is_not_found(self, radir, actor, make_agenda):
        agenda = make_agenda(meeting_type="RAKORDIR")
        result = radir.update(actor, agenda.id, ProposalInput(title="Judul baru sekali"))
        assert result.kind == "not_found"


class TestDelete:
    def test_removes_row_and_files(self, radir, actor, make_agenda, storage, agenda_repo):
        agenda = make_agenda(
            legal_review="radir/u/legal.pdf",
            supporting_documents=["radir/u/support.pdf"],
            meeting_decisions=[{"id": "d1", "evidencePath": "evidence/a/d1.pdf"}],
        )
        result = radir.delete(actor, agenda.id)
        assert result.success is True
        assert agenda_repo.get(agenda.id) is None
        assert sorted(storage.removed) == ["evidence/a/d1.pdf", "radir/u/legal.pdf", "radir/u/support.pdf"]

    def test_storage_failure_keeps_row(self, radir, actor, make_agenda, storage, agenda_repo):
        agenda = make_agenda(legal_review="radir/u/legal.pdf")
        agenda_id = agenda.id
        storage.fail_remove = True

        result = radir.delete(actor, agenda_id)

        assert result.success is False
        assert result.kind == "storage"
        assert agenda_repo.get(agenda_id) is not None

    def test_drops_later_stage_lists(self, radir, actor, make_agenda):
        agenda = make_agenda(status="DIJADWALKAN")
        for key in ("/jadwal-rapat", "/monev/radir", "/pelaksanaan-rapat/radir", "/agenda/rakordir"):
            PageCache.set(key, [])
        radir.delete(actor, agenda.id)
        assert list(PageCache.keys()) == ["/agenda/rakordir"]

    def test_missing_row(self, radir, actor):
        result = radir.delete(actor, "missing")
        assert result.kind == "not_found"


class TestRakordir:
    def test_defaults_and_uuid_paths(self, rakordir, actor, pdf, agenda_repo):
        result = rakordir.create(actor, ProposalInput(title="Koordinasi Direksi", files={"proposalNote": pdf()}))
        agenda = agenda_repo.get(result.data["id"])
        assert agenda.meeting_type == "RAKORDIR"
        assert agenda.urgency == "Biasa"
        assert agenda.proposal_note.startswith("rakordir/user-1/")
        assert result.data["status"] == "DRAFT"


class TestKepdir:
    def _form(self, **overrides):
        values = dict(
            title="Keputusan Sirkuler Tarif",
            directors=["DIRUT", " DIR KEU "],
            initiators=["Divisi Niaga"],
            contact_person="Andi",
            position="Manager",
            phone="0812",
        )
        values.update(overrides)
        return ProposalInput(**values)

    def test_create_is_always_draft(self, kepdir, actor, pdf, agenda_repo):
        result = kepdir.create(actor, self._form(files={"kepdirSirkulerDoc": pdf(), "grcDoc": pdf()}))
        assert result.success is True
        assert result.data["status"] == "DRAFT"
        agenda = agenda_repo.get(result.data["id"])
        assert agenda.director == "DIRUT, DIR KEU"
        assert agenda.urgency == "Normal"
        assert agenda.kepdir_sirkuler_doc.startswith("kepdir-sirkuler/user-1/")

    @pytest.mark.parametrize("overrides, message", [
        ({"directors": []}, "Pilih minimal satu Direktur Pemrakarsa"),
        ({"initiators": [" "]}, "Pilih minimal satu Unit Pemrakarsa"),
        ({"contact_person": ""}, "Nama narahubung wajib diisi"),
        ({"phone": None}, "Nomor HP narahubung wajib diisi"),
    ])
    def test_required_fields(self, kepdir, actor, overrides, message):
        result = kepdir.create(actor, self._form(**overrides))
        assert result.success is False
        assert result.error == message
        assert result.kind == "validation"

    def test_update_keeps_status(self, kepdir, actor, make_agenda, agenda_repo):
        agenda = make_agenda(meeting_type="KEPDIR_SIRKULER", status="DAPAT_DILANJUTKAN")
        result = kepdir.update(actor, agenda.id, self._form(title=None))
        assert result.success is True
        assert agenda_repo.get(agenda.id).status == "DAPAT_DILANJUTKAN"

    def test_list_by_status_and_get(self, kepdir, make_agenda):
        a = make_agenda(meeting_type="KEPDIR_SIRKULER", status="DRAFT")
        make_agenda(meeting_type="KEPDIR_SIRKULER", status="DIBATALKAN")
        assert [i["id"] for i in kepdir.list_by_status("DRAFT")] == [a.id]
        assert kepdir.get(a.id)["meetingType"] == "KEPDIR_SIRKULER"
        assert kepdir.get("missing") is None
