"""
Unit tests for MeetingExecution (schedule, live minutes, finish, documents)
"""
from datetime import date

import pytest

from board_meeting.application.use_cases.meeting_execution import (
    MeetingExecution,
    MinutesInput,
    ScheduleInput,
    with_item_ids,
)


@pytest.fixture
def meetings(agenda_repo, storage):
    return MeetingExecution(agenda_repo, storage)


@pytest.fixture
def session_rows(make_agenda, meeting_day):
    """Two RADIR agendas already opened as session 12/2026"""
    common = dict(
        status="DIJADWALKAN",
        meeting_status="IN_PROGRESS",
        meeting_number="12",
        meeting_year="2026",
        execution_date=meeting_day,
        risalah_group_id="group-12",
    )
    return [make_agenda(title="Agenda Pertama", **common), make_agenda(title="Agenda Kedua", **common)]


def test_with_item_ids():
    items = with_item_ids([{"id": 7, "text": "A"}, {"text": "B"}, "C", 42])
    assert [i["text"] for i in items] == ["A", "B", "C"]
    assert items[0]["id"] == "7"
    assert all(isinstance(i["id"], str) and i["id"] for i in items)


class TestSchedule:
    def test_upsert(self, meetings, actor, make_agenda, agenda_repo):
        agenda = make_agenda(status="DAPAT_DILANJUTKAN")
        data = ScheduleInput(agenda.id, "2026-01-05", "09:00", meeting_method="hybrid", location="Ruang Rapat Direksi")

        result = meetings.upsert_schedule(actor, data)

        assert result.success is True
        row = agenda_repo.get(agenda.id)
        assert row.execution_date == date(2026, 1, 5)
        assert row.start_time == "09:00"
        assert row.end_time == "Selesai"
        assert row.meeting_method == "HYBRID"
        assert (row.status, row.meeting_status) == ("DIJADWALKAN", "SCHEDULED")
        assert [a["id"] for a in meetings.scheduled()] == [agenda.id]

    @pytest.mark.parametrize("execution_date, start_time", [("", "09:00"), ("2026-01-05", "")])
    def test_requires_date_and_start(self, meetings, actor, make_agenda, execution_date, start_time):
        agenda = make_agenda(status="DAPAT_DILANJUTKAN")
        result = meetings.upsert_schedule(actor, ScheduleInput(agenda.id, execution_date, start_time))
        assert result.kind == "validation"

    def test_invalid_method(self, meetings, actor, make_agenda):
        agenda = make_agenda(status="DAPAT_DILANJUTKAN")
        result = meetings.upsert_schedule(actor, ScheduleInput(agenda.id, "2026-01-05", "09:00", meeting_method="PHONE"))
        assert result.kind == "validation"

    def test_unknown_agenda(self, meetings, actor):
        result = meetings.upsert_schedule(actor, ScheduleInput("missing", "2026-01-05", "09:00"))
        assert result.kind == "not_found"
        assert result.error == "ID Agenda tidak ditemukan"

    def test_rollback(self, meetings, actor, make_agenda, agenda_repo, meeting_day):
        agenda = make_agenda(
            status="DIJADWALKAN",
            meeting_status="SCHEDULED",
            execution_date=meeting_day,
            start_time="09:00",
            meeting_location="Ruang 1",
        )
        result = meetings.rollback_schedule(actor, agenda.id)
        assert result.success is True
        row = agenda_repo.get(agenda.id)
        assert (row.status, row.meeting_status) == ("DAPAT_DILANJUTKAN", "PENDING")
        assert row.execution_date is None
        assert row.meeting_location is None


class TestStartMeeting:
    def test_assigns_session(self, meetings, actor, make_agenda, agenda_repo):
        a = make_agenda(status="DIJADWALKAN", meeting_status="SCHEDULED")
        b = make_agenda(status="DIJADWALKAN", meeting_status="SCHEDULED")

        result = meetings.start_meeting(actor, [a.id, b.id], " 12 ", "2026")

        assert result.success is True
        assert result.data["meetingNumber"] == "12"
        group_id = result.data["risalahGroupId"]
        for agenda_id in (a.id, b.id):
            row = agenda_repo.get(agenda_id)
            assert row.meeting_status == "IN_PROGRESS"
            assert row.meeting_year == "2026"
            assert row.risalah_group_id == group_id

    def test_joins_existing_session_group(self, meetings, actor, make_agenda, session_rows):
        late = make_agenda(status="DIJADWALKAN", meeting_status="SCHEDULED")
        result = meetings.start_meeting(actor, [late.id], "12", "2026")
        assert result.data["risalahGroupId"] == "group-12"

    def test_bad_year(self, meetings, actor, make_agenda):
        a = make_agenda(status="DIJADWALKAN")
        result = meetings.start_meeting(actor, [a.id], "12", "26")
        assert result.kind == "validation"

    def test_missing_agenda(self, meetings, actor, make_agenda):
        a = make_agenda(status="DIJADWALKAN")
        assert meetings.start_meeting(actor, [a.id, "missing"], "12", "2026").kind == "not_found"

    def test_mixed_meeting_types(self, meetings, actor, make_agenda):
        a = make_agenda(status="DIJADWALKAN")
        b = make_agenda(status="DIJADWALKAN", meeting_type="RAKORDIR")
        assert meetings.start_meeting(actor, [a.id, b.id], "12", "2026").kind == "validation"

    @pytest.mark.parametrize("status, meeting_status", [("DIBATALKAN", "CANCELLED"), ("RAPAT_SELESAI", "COMPLETED")])
    def test_closed_agenda(self, meetings, actor, make_agenda, status, meeting_status):
        a = make_agenda(status=status, meeting_status=meeting_status)
        assert meetings.start_meeting(actor, [a.id], "12", "2026").kind == "conflict"

    def test_completed_session_number(self, meetings, actor, make_agenda):
        make_agenda(status="RAPAT_SELESAI", meeting_status="COMPLETED", meeting_number="3", meeting_year="2026")
        fresh = make_agenda(status="DIJADWALKAN")
        result = meetings.start_meeting(actor, [fresh.id], "3", "2026")
        assert result.kind == "conflict"
        assert result.error == "Rapat No. 3/2026 sudah selesai"


class TestSaveMinutes:
    def test_save_risalah(self, meetings, actor, session_rows, sample_attendance, agenda_repo):
        entry = MinutesInput(
            agenda_id=session_rows[0].id,
            start_time="09:15",
            meeting_location="Ruang Rapat Direksi",
            attendance_data=sample_attendance,
            considerations="<p>Pertimbangan</p>",
            meeting_decisions=[{"text": "Menyetujui RKAP"}],
        )
        result = meetings.save_risalah(actor, [entry])

        assert result.success is True
        assert result.data == {"saved": 1}
        row = agenda_repo.get(session_rows[0].id)
        assert row.start_time == "09:15"
        assert row.attendance["DIREKTUR UTAMA (DIRUT)"]["status"] == "Hadir"
        assert row.decisions[0]["text"] == "Menyetujui RKAP"
        assert row.decisions[0]["id"]
        # workflow status only moves when the meeting is finished
        assert row.status == "DIJADWALKAN"
        assert row.meeting_status == "IN_PROGRESS"

    def test_invalid_attendance_status(self, meetings, actor, session_rows):
        entry = MinutesInput(agenda_id=session_rows[0].id, attendance_data={"DIREKTUR UTAMA (DIRUT)": {"status": "Izin"}})
        result = meetings.save_risalah(actor, [entry])
        assert result.kind == "validation"

    def test_wrong_meeting_type(self, meetings, actor, session_rows):
        result = meetings.save_rakordir_live(actor, [MinutesInput(agenda_id=session_rows[0].id)])
        assert result.kind == "validation"

    def test_rakordir_live_writes_directives(self, meetings, actor, make_agenda, agenda_repo):
        agenda = make_agenda(meeting_type="RAKORDIR", status="DIJADWALKAN", meeting_number="4", meeting_year="2026")
        entry = MinutesInput(agenda_id=agenda.id, arahan_direksi=[{"text": "Percepat pengadaan"}],
                             meeting_decisions=[{"text": "ignored"}])
        result = meetings.save_rakordir_live(actor, [entry])
        assert result.success is True
        row = agenda_repo.get(agenda.id)
        assert row.arahan[0]["text"] == "Percepat pengadaan"
        assert row.decisions == []

    def test_empty_batch(self, meetings, actor):
        assert meetings.save_risalah(actor, []).kind == "validation"


class TestFinishMeeting:
    def test_closes_session(self, meetings, actor, session_rows, make_agenda, agenda_repo):
        session_rows[0].meeting_decisions = [{"id": "d1", "status": "DONE"}]
        agenda_repo.commit()
        cancelled = make_agenda(status="DIBATALKAN", meeting_status="CANCELLED", meeting_number="12", meeting_year="2026")

        result = meetings.finish_meeting(actor, "12", "2026", "RADIR")

        assert result.success is True
        first, second = (agenda_repo.get(r.id) for r in session_rows)
        assert (first.status, first.meeting_status, first.monev_status) == ("RAPAT_SELESAI", "COMPLETED", "DONE")
        assert second.monev_status == "ON_PROGRESS"
        assert agenda_repo.get(cancelled.id).status == "DIBATALKAN"

    def test_unknown_session(self, meetings, actor):
        assert meetings.finish_meeting(actor, "99", "2026").kind == "not_found"


class TestDocuments:
    def test_upload_risalah_ttd_replaces_old(self, meetings, actor, pdf, make_agenda, storage, agenda_repo):
        agenda = make_agenda(risalah_ttd="radir/risalah/x/old.pdf")
        result = meetings.upload_risalah_ttd(actor, agenda.id, pdf())
        assert result.success is True
        path = result.data["path"]
        assert path.startswith(f"radir/risalah/{agenda.id}/")
        assert path.endswith("-risalah-ttd.pdf")
        assert agenda_repo.get(agenda.id).risalah_ttd == path
        assert storage.removed == ["radir/risalah/x/old.pdf"]

    def test_upload_requires_file(self, meetings, actor, pdf, make_agenda):
        agenda = make_agenda()
        assert meetings.upload_risalah_ttd(actor, agenda.id, pdf(content=b"")).kind == "validation"

    def test_session_minutes_link_every_agenda(self, meetings, actor, pdf, session_rows, agenda_repo):
        result = meetings.upload_session_minutes(actor, session_rows[0].id, pdf())
        assert result.data["linked"] == 2
        assert {agenda_repo.get(r.id).risalah_ttd for r in session_rows} == {result.data["path"]}

    def test_session_minutes_need_number(self, meetings, actor, pdf, make_agenda):
        agenda = make_agenda()
        assert meetings.upload_session_minutes(actor, agenda.id, pdf()).kind == "validation"

    def test_delete_clears_shared_path(self, meetings, actor, session_rows, storage, agenda_repo):
        for row in session_rows:
            row.risalah_ttd = "radir/risalah/shared.pdf"
        agenda_repo.commit()

        result = meetings.delete_risalah_ttd(actor, session_rows[0].id)

        assert result.success is True
        assert storage.removed == ["radir/risalah/shared.pdf"]
        assert all(agenda_repo.get(r.id).risalah_ttd is None for r in session_rows)

    def test_delete_without_file(self, meetings, actor, make_agenda):
        assert meetings.delete_risalah_ttd(actor, make_agenda().id).kind == "not_found"

    def test_delete_storage_failure_keeps_path(self, meetings, actor, make_agenda, storage, agenda_repo):
        agenda = make_agenda(risalah_ttd="radir/risalah/a.pdf")
        agenda_id = agenda.id
        storage.fail_remove = True
        assert meetings.delete_risalah_ttd(actor, agenda_id).kind == "storage"
        assert agenda_repo.get(agenda_id).risalah_ttd == "radir/risalah/a.pdf"

    def test_upload_petikan(self, meetings, actor, pdf, make_agenda, agenda_repo):
        agenda = make_agenda(meeting_type="RAKORDIR")
        result = meetings.upload_petikan(actor, agenda.id, pdf())
        assert result.data["path"].startswith("rakordir/risalah/")
        assert agenda_repo.get(agenda.id).petikan_risalah == result.data["path"]

    def test_document_url(self, meetings, actor):
        assert meetings.document_url(None, "a.pdf").kind == "unauthenticated"
        assert meetings.document_url(actor, None).kind == "not_found"
        assert meetings.document_url(actor, "a.pdf").data["url"].startswith("https://storage.test/signed/a.pdf")


class TestSessions:
    def test_groups_by_number_and_year(self, meetings, session_rows, make_agenda):
        make_agenda(status="RAPAT_SELESAI", meeting_status="COMPLETED", meeting_number="11", meeting_year="2026",
                    risalah_ttd="radir/risalah/11.pdf")
        sessions = meetings.sessions("RADIR")

        assert [(s["meetingNumber"], s["agendaCount"]) for s in sessions] == [("12", 2), ("11", 1)]
        assert sessions[0]["meetingStatus"] == "IN_PROGRESS"
        assert sessions[0]["executionDate"] == "2026-01-05"
        assert sessions[0]["risalahGroupId"] == "group-12"
        assert sessions[1]["meetingStatus"] == "COMPLETED"
        assert sessions[1]["risalahTtd"] == "radir/risalah/11.pdf"

    def test_session_agendas(self, meetings, session_rows):
        titles = [a["title"] for a in meetings.session_agendas("12", "2026", "RADIR")]
        assert sorted(titles) == ["Agenda Kedua", "Agenda Pertama"]
