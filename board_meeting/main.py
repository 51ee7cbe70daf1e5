from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from board_meeting.infrastructure.config.settings import get_settings
from board_meeting.infrastructure.database.connection import get_database
from board_meeting.presentation.api.v1 import router as api_v1_router
from board_meeting.presentation.middleware.routing_guard import RoutingGuard

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logging.getLogger("board_meeting").setLevel(settings.log_level)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(settings.log_level)

# Supabase goes through httpx; its per-request logs are noise
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger("board_meeting.main")

app = FastAPI(title="Board Meeting API")


@app.on_event("startup")
def on_startup() -> None:
    logger.info("Board Meeting API starting (env=%s, log level=%s)", settings.environment, settings.log_level)
    if not settings.session_secret:
        logger.warning("SESSION_SECRET is not set; session cookies cannot be issued or verified")
    if settings.environment == "local":
        # migrations own the schema everywhere else
        get_database().create_tables()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{where}: {first.get('msg')}" if where else "Data tidak valid"
    return JSONResponse(status_code=422, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"success": False, "error": "Terjadi kesalahan internal"})


_cors_origins = settings.cors_allow_origins
if not _cors_origins and settings.environment == "local":
    _cors_origins = ["http://localhost:3000"]

app.add_middleware(RoutingGuard)
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
    )

app.include_router(api_v1_router, prefix="/api/v1")
