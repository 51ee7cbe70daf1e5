from __future__ import annotations

from fastapi.responses import JSONResponse

from board_meeting.application.results import ActionResult

STATUS_BY_KIND = {
    "unauthenticated": 401,
    "not_found": 404,
    "validation": 422,
    "conflict": 409,
    "storage": 502,
    "internal": 500,
}


def to_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    """Serialize an ActionResult, mapping failure kinds onto HTTP status codes."""
    if result.success:
        return JSONResponse(status_code=success_status, content=result.to_dict())
    return JSONResponse(status_code=STATUS_BY_KIND.get(result.kind or "internal", 500), content=result.to_dict())
