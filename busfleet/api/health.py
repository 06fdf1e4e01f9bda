# busfleet/api/health.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from busfleet.api.deps import get_storage
from busfleet.storage.base import Storage

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict:
    # Liveness: always 200 while the process is up
    return {
        "ok": True,
        "service": "busfleet",
        "status": "healthy",
        "ts": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
def readyz(storage: Storage = Depends(get_storage)):
    # Readiness: storage ping + latency
    t0 = time.perf_counter()
    try:
        storage.ping()
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "storage": "down", "error": str(e)},
            headers={"Cache-Control": "no-store"},
        )
    latency_ms = (time.perf_counter() - t0) * 1000.0
    return JSONResponse(
        status_code=200,
        content={"ok": True, "storage": "up", "latency_ms": round(latency_ms, 2)},
        headers={"Cache-Control": "no-store"},
    )
