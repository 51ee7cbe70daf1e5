from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from board_meeting.application.use_cases.export_minutes import ExportMinutesUseCase
from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.infrastructure.documents.minutes_renderer import MinutesRenderer
from board_meeting.presentation.api.v1.deps import get_agenda_repository, get_minutes_renderer
from board_meeting.presentation.api.v1.responses import to_response

router = APIRouter()

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _header_safe(filename: str) -> str:
    return "".join(c for c in filename if c.isascii() and c.isprintable() and c not in '"\\')


def get_export(
    meeting_type: str = Query(default=MeetingType.RADIR, description="RADIR or RAKORDIR"),
    repo: AgendaRepository = Depends(get_agenda_repository),
    renderer: MinutesRenderer = Depends(get_minutes_renderer),
) -> ExportMinutesUseCase:
    if meeting_type not in (MeetingType.RADIR, MeetingType.RAKORDIR):
        raise HTTPException(status_code=422, detail="meeting_type harus RADIR atau RAKORDIR")
    return ExportMinutesUseCase(repo=repo, renderer=renderer)


@router.get("/minutes", response_model=dict)
def export_minutes(
    meeting_number: Optional[str] = Query(default=None),
    meeting_year: Optional[str] = Query(default=None),
    meeting_type: str = Query(default=MeetingType.RADIR, description="RADIR or RAKORDIR"),
    export: ExportMinutesUseCase = Depends(get_export),
):
    """Session minutes as a base64 DOCX with its file name."""
    return to_response(export.execute(meeting_number, meeting_year, meeting_type))


@router.get("/minutes/download")
def download_minutes(
    meeting_number: Optional[str] = Query(default=None),
    meeting_year: Optional[str] = Query(default=None),
    meeting_type: str = Query(default=MeetingType.RADIR, description="RADIR or RAKORDIR"),
    export: ExportMinutesUseCase = Depends(get_export),
):
    result = export.render(meeting_number, meeting_year, meeting_type)
    if not result.success:
        return to_response(result)
    return Response(
        content=result.data["content"],
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{_header_safe(result.data["filename"])}"'},
    )
