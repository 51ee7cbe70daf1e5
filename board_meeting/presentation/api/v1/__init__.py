from fastapi import APIRouter, Depends

from .agendas import router as agendas_router
from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .deps import require_actor
from .export import router as export_router
from .meetings import router as meetings_router
from .monev import router as monev_router
from .proposals import kepdir_router, radir_router, rakordir_router

SIGNED_IN = [Depends(require_actor)]

router = APIRouter()
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"], dependencies=SIGNED_IN)
router.include_router(radir_router, prefix="/radir", tags=["radir"], dependencies=SIGNED_IN)
router.include_router(rakordir_router, prefix="/rakordir", tags=["rakordir"], dependencies=SIGNED_IN)
router.include_router(kepdir_router, prefix="/kepdir-sirkuler", tags=["kepdir-sirkuler"], dependencies=SIGNED_IN)
router.include_router(agendas_router, prefix="/agendas", tags=["agendas"], dependencies=SIGNED_IN)
router.include_router(meetings_router, prefix="/meetings", tags=["meetings"], dependencies=SIGNED_IN)
router.include_router(monev_router, prefix="/monev", tags=["monev"], dependencies=SIGNED_IN)
router.include_router(export_router, prefix="/export", tags=["export"], dependencies=SIGNED_IN)
