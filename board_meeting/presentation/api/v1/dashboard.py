from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from board_meeting.application.use_cases.get_dashboard_stats import GetDashboardStatsUseCase, filter_list_data
from board_meeting.infrastructure.cache.page_cache import PageCache
from board_meeting.infrastructure.database.repositories.agenda_repository import AgendaRepository
from board_meeting.presentation.api.v1.deps import get_agenda_repository

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30


@router.get("/stats", response_model=dict)
def get_dashboard_stats(
    date_from: Optional[date] = Query(default=None, alias="from", description="Start date (inclusive)"),
    date_to: Optional[date] = Query(default=None, alias="to", description="End date (inclusive)"),
    meeting_type: Optional[str] = Query(default=None, description="Filter listData by meeting type"),
    status: Optional[str] = Query(default=None, description="Filter listData by status card"),
    repo: AgendaRepository = Depends(get_agenda_repository),
):
    """Dashboard statistics for agendas updated within the date range (default: last 30 days)."""
    date_to = date_to or date.today()
    date_from = date_from or (date_to - timedelta(days=DEFAULT_RANGE_DAYS))
    if date_from > date_to:
        raise HTTPException(status_code=422, detail="Tanggal awal tidak boleh melewati tanggal akhir")
    key = f"/dashboard?from={date_from.isoformat()}&to={date_to.isoformat()}"

    result = PageCache.get(key)
    if result is None:
        result = GetDashboardStatsUseCase(repo=repo).execute(date_from, date_to)
        if not result.get("success"):
            raise HTTPException(status_code=500, detail=result.get("error"))
        PageCache.set(key, result)

    if meeting_type or status:
        data = dict(result["data"])
        data["listData"] = filter_list_data(data["listData"], meeting_type, status)
        return {"success": True, "data": data}
    return result
