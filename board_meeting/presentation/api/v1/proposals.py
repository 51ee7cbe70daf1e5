"""Proposal (usulan agenda) endpoints, one router per meeting type."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from board_meeting.application.common import Actor
from board_meeting.application.use_cases.agenda_proposals import PROPOSALS
from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.supabase.storage import AgendaStorage
from board_meeting.presentation.api.v1.deps import get_agenda_repository, get_current_actor, get_storage
from board_meeting.presentation.api.v1.forms import read_proposal_form
from board_meeting.presentation.api.v1.responses import to_response

logger = logging.getLogger(__name__)


def build_router(meeting_type: str) -> APIRouter:
    router = APIRouter()
    factory = PROPOSALS[meeting_type]

    def get_use_case(
        repo: AgendaRepository = Depends(get_agenda_repository),
        storage: AgendaStorage = Depends(get_storage),
    ):
        return factory(repo=repo, storage=storage)

    @router.get("/", response_model=dict)
    def list_proposals(
        status: Optional[str] = Query(default=None, description="Filter by workflow status"),
        use_case=Depends(get_use_case),
    ):
        page = factory.pages[0]
        if status and meeting_type == MeetingType.KEPDIR_SIRKULER:
            rows = PageCache.get_or_load(f"{page}?status={status}", lambda: use_case.list_by_status(status))
            return {"success": True, "data": rows}
        return {"success": True, "data": PageCache.get_or_load(page, use_case.list)}

    @router.get("/{agenda_id}", response_model=dict)
    def get_proposal(agenda_id: str, use_case=Depends(get_use_case)):
        agenda = use_case.repo.get_by_type(agenda_id, meeting_type)
        if agenda is None:
            raise HTTPException(status_code=404, detail="Data tidak ditemukan.")
        return {"success": True, "data": agenda.to_dict()}

    @router.post("/", response_model=dict, status_code=201)
    async def create_proposal(
        request: Request,
        actor: Optional[Actor] = Depends(get_current_actor),
        use_case=Depends(get_use_case),
    ):
        form = await read_proposal_form(await request.form(), factory.file_fields)
        return to_response(use_case.create(actor, form), success_status=201)

    @router.put("/{agenda_id}", response_model=dict)
    async def update_proposal(
        agenda_id: str,
        request: Request,
        actor: Optional[Actor] = Depends(get_current_actor),
        use_case=Depends(get_use_case),
    ):
        form = await read_proposal_form(await request.form(), factory.file_fields)
        return to_response(use_case.update(actor, agenda_id, form))

    @router.delete("/{agenda_id}", response_model=dict)
    def delete_proposal(
        agenda_id: str,
        actor: Optional[Actor] = Depends(get_current_actor),
        use_case=Depends(get_use_case),
    ):
        return to_response(use_case.delete(actor, agenda_id))

    return router


radir_router = build_router(MeetingType.RADIR)
rakordir_router = build_router(MeetingType.RAKORDIR)
kepdir_router = build_router(MeetingType.KEPDIR_SIRKULER)
