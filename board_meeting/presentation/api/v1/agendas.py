from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from board_meeting.application.common import Actor
from board_meeting.application.use_cases.agenda_actions import AgendaActions
from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.supabase.storage import AgendaStorage
from board_meeting.presentation.api.v1.deps import get_agenda_repository, get_current_actor, get_storage, require_actor
from board_meeting.presentation.api.v1.responses import to_response
from board_meeting.presentation.schemas.agenda import BulkDeleteIn, ReasonIn

router = APIRouter()


def get_actions(
    repo: AgendaRepository = Depends(get_agenda_repository),
    storage: AgendaStorage = Depends(get_storage),
) -> AgendaActions:
    return AgendaActions(repo=repo, storage=storage)


@router.get("/ready", response_model=dict)
def list_ready_agendas(
    meeting_type: str = Query(default=MeetingType.RADIR, description="RADIR or RAKORDIR"),
    actions: AgendaActions = Depends(get_actions),
):
    """Agendas that passed document checks (agenda siap)."""
    if meeting_type not in (MeetingType.RADIR, MeetingType.RAKORDIR):
        raise HTTPException(status_code=422, detail="meeting_type harus RADIR atau RAKORDIR")
    rows = PageCache.get_or_load(f"/agenda-siap/{meeting_type.lower()}", lambda: actions.ready_list(meeting_type))
    return {"success": True, "data": rows}


@router.get("/file-url", response_model=dict)
def get_file_url(
    path: str = Query(..., description="Storage path inside the attachments bucket"),
    actor: Actor = Depends(require_actor),
    actions: AgendaActions = Depends(get_actions),
):
    url = actions.signed_file_url(actor, path)
    if not url:
        raise HTTPException(status_code=502, detail="Gagal membuat tautan file.")
    return {"success": True, "data": {"url": url}}


@router.post("/bulk-delete", response_model=dict)
def bulk_delete_agendas(
    body: BulkDeleteIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    actions: AgendaActions = Depends(get_actions),
):
    return to_response(actions.bulk_delete(actor, body.ids))


@router.get("/{agenda_id}", response_model=dict)
def get_agenda(agenda_id: str, actions: AgendaActions = Depends(get_actions)):
    agenda = actions.get(agenda_id)
    if agenda is None:
        raise HTTPException(status_code=404, detail="Data tidak ditemukan.")
    return {"success": True, "data": agenda}


@router.post("/{agenda_id}/cancel", response_model=dict)
def cancel_agenda(
    agenda_id: str,
    body: ReasonIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    actions: AgendaActions = Depends(get_actions),
):
    return to_response(actions.cancel(actor, agenda_id, body.reason))


@router.post("/{agenda_id}/postpone", response_model=dict)
def postpone_agenda(
    agenda_id: str,
    body: ReasonIn = Body(...),
    actor: Optional[Actor] = Depends(get_current_actor),
    actions: AgendaActions = Depends(get_actions),
):
    return to_response(actions.postpone(actor, agenda_id, body.reason))


@router.post("/{agenda_id}/resume", response_model=dict)
def resume_agenda(
    agenda_id: str,
    actor: Optional[Actor] = Depends(get_current_actor),
    actions: AgendaActions = Depends(get_actions),
):
    return to_response(actions.resume(actor, agenda_id))
