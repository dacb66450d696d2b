# File: tazasu/api/v1/routes_health.py

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Liveness probe")
def health(request: Request):
    started_at = getattr(request.app.state, "started_at", None) or time.monotonic()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - started_at, 3),
    }
