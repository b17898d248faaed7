# app/api/api_health.py

import os
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from ..database import get_db
from ..services.monitoring_service import monitoring_service

router = APIRouter(tags=["health"])

_BOOT_TS = time.time()


@router.get("/healthz")
async def healthz():
    """Liveness probe: the process answers; the database is not touched."""
    return {
        "status": "ok",
        "kind": "live",
        "uptime_s": round(time.time() - _BOOT_TS, 1),
        "pid": os.getpid(),
    }


@router.get(f"{settings.API_V1_STR}/health")
def health(db: Session = Depends(get_db)):
    report = monitoring_service.get_health_check(db)
    code = status.HTTP_503_SERVICE_UNAVAILABLE if report["status"] == "unhealthy" else status.HTTP_200_OK
    return ORJSONResponse(status_code=code, content=report, headers={"Cache-Control": "no-store"})
