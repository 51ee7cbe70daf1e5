from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile

from board_meeting.application.common import Actor, UploadedFile
from board_meeting.application.results import ActionResult
from board_meeting.application.use_cases.meeting_execution import MeetingExecution, MinutesInput, ScheduleInput
from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.supabase.storage import AgendaStorage
from board_meeting.presentation.api.v1.deps import get_agenda_repository, get_current_actor, get_storage
from board_meeting.presentation.api.v1.forms import read_upload
from board_meeting.presentation.api.v1.responses import to_response
from board_meeting.presentation.schemas.agenda import (
    BulkScheduleIn,
    FinishMeetingIn,
    MinutesBatchIn,
    ScheduleIn,
    StartMeetingIn,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_execution(
    repo: AgendaRepository = Depends(get_agenda_repository),
    storage: AgendaStorage = Depends(get_storage),
) -> MeetingExecution:
    return MeetingExecution(repo=repo, storage=storage)


def _schedule_input(body: ScheduleIn) -> ScheduleInput:
    return ScheduleInput(**body.model_dump())


# schedule (jadwal rapat)
@router.get("/schedule", response_model=dict)
def list_schedule(execution: MeetingExecution = Depends(get_execution)):
    return {"success": True, "data": PageCache.get_or_load("/jadwal-rapat", execution.scheduled)}


@router.put("/schedule", response_model=dict)
def upsert_schedule(
    body: ScheduleIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.upsert_schedule(actor, _schedule_input(body)))


@router.put("/schedule/bulk", response_model=dict)
def upsert_schedule_bulk(
    body: BulkScheduleIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    """Schedule several agendas; stops at the first failure."""
    if not body.items:
        raise HTTPException(status_code=422, detail="Tidak ada agenda yang dijadwalkan")
    for item in body.items:
        result = execution.upsert_schedule(actor, _schedule_input(item))
        if not result.success:
            return to_response(result)
    return to_response(ActionResult.ok(message=f"{len(body.items)} agenda berhasil dijadwalkan"))


@router.delete("/schedule/{agenda_id}", response_model=dict)
def rollback_schedule(
    agenda_id: str,
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.rollback_schedule(actor, agenda_id))


# sessions
@router.get("/sessions", response_model=dict)
def list_sessions(
    meeting_type: str = Query(default=MeetingType.RADIR, description="RADIR or RAKORDIR"),
    execution: MeetingExecution = Depends(get_execution),
):
    rows = PageCache.get_or_load(
        f"/pelaksanaan-rapat/{meeting_type.lower()}", lambda: execution.sessions(meeting_type)
    )
    return {"success": True, "data": rows}


@router.get("/sessions/{meeting_year}/{meeting_number}", response_model=dict)
def get_session_agendas(
    meeting_year: str,
    meeting_number: str,
    meeting_type: Optional[str] = Query(default=None),
    execution: MeetingExecution = Depends(get_execution),
):
    rows = execution.session_agendas(meeting_number, meeting_year, meeting_type)
    if not rows:
        raise HTTPException(status_code=404, detail=f"Rapat No. {meeting_number}/{meeting_year} tidak ditemukan")
    return {"success": True, "data": rows}


@router.post("/start", response_model=dict)
def start_meeting(
    body: StartMeetingIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.start_meeting(actor, body.agenda_ids, body.meeting_number, body.meeting_year))


@router.put("/risalah", response_model=dict)
def save_risalah(
    body: MinutesBatchIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    entries = [MinutesInput(**item.model_dump()) for item in body.items]
    return to_response(execution.save_risalah(actor, entries))


@router.put("/rakordir-live", response_model=dict)
def save_rakordir_live(
    body: MinutesBatchIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    entries = [MinutesInput(**item.model_dump()) for item in body.items]
    return to_response(execution.save_rakordir_live(actor, entries))


@router.post("/finish", response_model=dict)
def finish_meeting(
    body: FinishMeetingIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.finish_meeting(actor, body.meeting_number, body.meeting_year, body.meeting_type))


# signed documents
async def _read_file(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    return await read_upload(file) if file is not None else None


@router.post("/{agenda_id}/risalah-ttd", response_model=dict)
async def upload_risalah_ttd(
    agenda_id: str,
    file: UploadFile = File(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.upload_risalah_ttd(actor, agenda_id, await _read_file(file)))


@router.delete("/{agenda_id}/risalah-ttd", response_model=dict)
def delete_risalah_ttd(
    agenda_id: str,
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.delete_risalah_ttd(actor, agenda_id))


@router.post("/{agenda_id}/notulensi", response_model=dict)
async def upload_session_minutes(
    agenda_id: str,
    file: UploadFile = File(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    """Signed RAKORDIR minutes, linked to every agenda of the session."""
    return to_response(execution.upload_session_minutes(actor, agenda_id, await _read_file(file)))


@router.post("/{agenda_id}/petikan", response_model=dict)
async def upload_petikan(
    agenda_id: str,
    file: UploadFile = File(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.upload_petikan(actor, agenda_id, await _read_file(file)))


@router.get("/document-url", response_model=dict)
def get_document_url(
    path: Optional[str] = Query(default=None),
    actor: Optional[Actor] = Depends(get_current_actor),
    execution: MeetingExecution = Depends(get_execution),
):
    return to_response(execution.document_url(actor, path))
