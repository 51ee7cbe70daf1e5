from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from board_meeting.application.common import Actor
from board_meeting.application.use_cases.monev import ManualMonevInput, MonevUpdateInput, MonevUseCase
from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.supabase.storage import AgendaStorage
from board_meeting.presentation.api.v1.deps import get_agenda_repository, get_current_actor, get_storage, require_actor
from board_meeting.presentation.api.v1.forms import read_upload
from board_meeting.presentation.api.v1.responses import to_response

router = APIRouter()

MONEV_TYPES = {"radir": MeetingType.RADIR, "rakordir": MeetingType.RAKORDIR}


def get_monev(
    repo: AgendaRepository = Depends(get_agenda_repository),
    storage: AgendaStorage = Depends(get_storage),
) -> MonevUseCase:
    return MonevUseCase(repo=repo, storage=storage)


@router.get("/evidence-url", response_model=dict)
def get_evidence_url(
    path: str = Query(..., description="Evidence path"),
    actor: Actor = Depends(require_actor),
    monev: MonevUseCase = Depends(get_monev),
):
    url = monev.evidence_url(actor, path)
    if not url:
        raise HTTPException(status_code=502, detail="Gagal membuat tautan evidence.")
    return {"success": True, "data": {"url": url}}


@router.post("/rakordir/manual", response_model=dict, status_code=201)
async def create_manual_rakordir(
    judul: Optional[str] = Form(default=None),
    output: Optional[str] = Form(default=None),
    progress: Optional[str] = Form(default=None),
    status: Optional[str] = Form(default=None),
    evidenceFile: Optional[UploadFile] = File(default=None),
    actor: Optional[Actor] = Depends(get_current_actor),
    monev: MonevUseCase = Depends(get_monev),
):
    data = ManualMonevInput(
        title=judul,
        target_output=output,
        current_progress=progress,
        status=status,
        evidence_file=await read_upload(evidenceFile),
    )
    return to_response(monev.create_manual_rakordir(actor, data), success_status=201)


@router.get("/{kind}", response_model=dict)
def list_monev(kind: str, monev: MonevUseCase = Depends(get_monev)):
    meeting_type = MONEV_TYPES.get(kind)
    if meeting_type is None:
        raise HTTPException(status_code=404, detail="Jenis monev tidak dikenal")
    return {"success": True, "data": PageCache.get_or_load(f"/monev/{kind}", lambda: monev.list(meeting_type))}


@router.put("/{agenda_id}/items/{item_id}", response_model=dict)
async def update_monev_item(
    agenda_id: str,
    item_id: str,
    targetOutput: Optional[str] = Form(default=None),
    currentProgress: Optional[str] = Form(default=None),
    status: Optional[str] = Form(default=None),
    removeEvidence: Optional[str] = Form(default=None),
    evidenceFile: Optional[UploadFile] = File(default=None),
    actor: Optional[Actor] = Depends(get_current_actor),
    monev: MonevUseCase = Depends(get_monev),
):
    """Progress update of one decision (RADIR) or directive (RAKORDIR)."""
    data = MonevUpdateInput(
        target_output=targetOutput,
        current_progress=currentProgress,
        status=status,
        evidence_file=await read_upload(evidenceFile),
        remove_evidence=(removeEvidence or "").lower() == "true",
    )
    return to_response(monev.update_item(actor, agenda_id, item_id, data))
