"""
Integration tests for proposal and agenda endpoints
"""
import pytest

from board_meeting.infrastructure.cache.page_cache import PageCache


class TestProposalAPI:
    """RADIR / RAKORDIR / KEPDIR proposal forms over multipart"""

    def test_create_radir_multipart(self, client, agenda_repo, storage):
        """Files are read from the form field names"""
        response = client.post(
            "/api/v1/radir/",
            data={"title": "Persetujuan RKAP 2026", "contactPerson": "Budi", "notRequiredFiles": '["riskReview"]'},
            files={"legalReview": ("kajian hukum.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        agenda = agenda_repo.get(body["data"]["id"])
        assert agenda.contact_person == "Budi"
        assert agenda.not_required == ["riskReview"]
        assert agenda.legal_review in storage.objects

    def test_create_requires_session(self, make_client):
        """No session cookie means 401"""
        response = make_client(None).post("/api/v1/radir/", data={"title": "Persetujuan RKAP 2026"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Sesi kadaluarsa. Silakan login kembali."}

    def test_create_validation_error(self, client):
        response = client.post("/api/v1/kepdir-sirkuler/", data={"title": "Keputusan Sirkuler"})
        assert response.status_code == 422
        assert response.json()["error"] == "Pilih minimal satu Direktur Pemrakarsa"

    def test_kepdir_repeated_director_fields(self, client, agenda_repo):
        response = client.post(
            "/api/v1/kepdir-sirkuler/",
            data={
                "title": "Keputusan Sirkuler Tarif",
                "directors": ["DIRUT", "DIR KEU"],
                "initiators": '["Divisi Niaga"]',
                "contactPerson": "Andi",
                "position": "Manager",
                "phone": "0812",
            },
        )
        assert response.status_code == 201
        assert agenda_repo.get(response.json()["data"]["id"]).director == "DIRUT, DIR KEU"

    def test_update_with_delete_flag(self, client, make_agenda, agenda_repo, storage):
        agenda = make_agenda(legal_review="radir/u/legal.pdf")
        response = client.put(f"/api/v1/radir/{agenda.id}", data={"delete_legalReview": "true"})
        assert response.status_code == 200
        assert agenda_repo.get(agenda.id).legal_review is None
        assert storage.removed == ["radir/u/legal.pdf"]

    def test_update_locked_agenda(self, client, make_agenda):
        agenda = make_agenda(status="DIJADWALKAN")
        response = client.put(f"/api/v1/radir/{agenda.id}", data={"title": "Judul yang baru"})
        assert response.status_code == 409

    def test_list_and_get(self, client, make_agenda):
        agenda = make_agenda()
        make_agenda(meeting_type="RAKORDIR")

        listed = client.get("/api/v1/radir/").json()["data"]
        assert [a["id"] for a in listed] == [agenda.id]
        assert listed[0]["calculatedPriority"] == "Low"

        assert client.get(f"/api/v1/radir/{agenda.id}").json()["data"]["title"] == "Persetujuan RKAP 2026"
        assert client.get(f"/api/v1/rakordir/{agenda.id}").status_code == 404

    def test_kepdir_status_filter(self, client, make_agenda):
        make_agenda(meeting_type="KEPDIR_SIRKULER", status="DRAFT")
        make_agenda(meeting_type="KEPDIR_SIRKULER", status="DIBATALKAN")
        data = client.get("/api/v1/kepdir-sirkuler/", params={"status": "DIBATALKAN"}).json()["data"]
        assert [a["status"] for a in data] == ["DIBATALKAN"]

    def test_delete_storage_failure(self, client, make_agenda, storage, agenda_repo):
        """Storage error keeps the row and maps to 502"""
        agenda = make_agenda(legal_review="radir/u/legal.pdf")
        agenda_id = agenda.id
        storage.fail_remove = True
        response = client.delete(f"/api/v1/radir/{agenda_id}")
        assert response.status_code == 502
        assert agenda_repo.get(agenda_id) is not None


class TestAgendaActionsAPI:
    """Status actions shared by every meeting type"""

    def test_cancel_postpone_resume(self, client, make_agenda, agenda_repo):
        agenda = make_agenda(status="DIJADWALKAN", meeting_status="SCHEDULED")

        response = client.post(f"/api/v1/agendas/{agenda.id}/cancel", json={"reason": "Direksi berhalangan"})
        assert response.json()["message"] == "Agenda berhasil dibatalkan"
        assert agenda_repo.get(agenda.id).status == "DIBATALKAN"

        assert client.post(f"/api/v1/agendas/{agenda.id}/resume").status_code == 200
        assert agenda_repo.get(agenda.id).status == "DAPAT_DILANJUTKAN"

        response = client.post(f"/api/v1/agendas/{agenda.id}/postpone", json={"reason": "abc"})
        assert response.status_code == 422
        assert response.json()["error"] == "Alasan penundaan minimal 5 karakter"

    def test_missing_reason_body(self, client, make_agenda):
        agenda = make_agenda()
        response = client.post(f"/api/v1/agendas/{agenda.id}/cancel", json={})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_bulk_delete(self, client, make_agenda, agenda_repo):
        a, b = make_agenda(), make_agenda()
        response = client.post("/api/v1/agendas/bulk-delete", json={"ids": [a.id, b.id]})
        assert response.json()["data"] == {"deleted": 2}
        assert agenda_repo.list_by_type("RADIR") == []

    @pytest.mark.parametrize("meeting_type, status_code", [("RADIR", 200), ("RAKORDIR", 200), ("KEPDIR_SIRKULER", 422)])
    def test_ready_list(self, client, make_agenda, meeting_type, status_code):
        make_agenda(status="DAPAT_DILANJUTKAN")
        response = client.get("/api/v1/agendas/ready", params={"meeting_type": meeting_type})
        assert response.status_code == status_code

    def test_file_url(self, client, make_client):
        response = client.get("/api/v1/agendas/file-url", params={"path": "radir/u/legal.pdf"})
        assert response.json()["data"]["url"].startswith("https://storage.test/signed/radir/u/legal.pdf")
        assert make_client(None).get("/api/v1/agendas/file-url", params={"path": "x"}).status_code == 401

    def test_get_unknown_agenda(self, client):
        response = client.get("/api/v1/agendas/missing")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Data tidak ditemukan."}


class TestListCache:
    """List endpoints are served from the page cache until a mutation drops them"""

    def test_list_is_cached(self, client, make_agenda):
        first = make_agenda()
        assert len(client.get("/api/v1/radir/").json()["data"]) == 1
        # written behind the API's back: not visible until invalidated
        make_agenda(title="Langsung ke database")
        assert [a["id"] for a in client.get("/api/v1/radir/").json()["data"]] == [first.id]
        assert "/agenda/radir" in PageCache.keys()

    def test_create_refreshes_list(self, client, make_agenda):
        make_agenda()
        client.get("/api/v1/radir/")
        response = client.post("/api/v1/radir/", data={"title": "Persetujuan Investasi 2026"})
        assert response.status_code == 201
        assert len(client.get("/api/v1/radir/").json()["data"]) == 2

    def test_schedule_refreshes_proposal_and_ready_lists(self, client, make_agenda):
        agenda = make_agenda(status="DAPAT_DILANJUTKAN")
        assert client.get("/api/v1/radir/").json()["data"][0]["status"] == "DAPAT_DILANJUTKAN"
        assert len(client.get("/api/v1/agendas/ready", params={"meeting_type": "RADIR"}).json()["data"]) == 1

        client.put("/api/v1/meetings/schedule", json={
            "agenda_id": agenda.id,
            "execution_date": "2026-01-05",
            "start_time": "09:00",
        })

        assert client.get("/api/v1/radir/").json()["data"][0]["status"] == "DIJADWALKAN"
        assert [a["id"] for a in client.get("/api/v1/meetings/schedule").json()["data"]] == [agenda.id]
