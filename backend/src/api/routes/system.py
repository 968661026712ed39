"""Liveness routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...services.database import get_database_service

router = APIRouter()


@router.get("/api")
async def api_root():
    """API liveness probe used by the web client."""
    return {"ok": True, "ts": int(datetime.now(timezone.utc).timestamp() * 1000)}


@router.get("/health")
def health():
    """Health check endpoint for container platforms; 503 while Mongo is unreachable."""
    if get_database_service().ping():
        return {"status": "healthy", "database": "ok"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "degraded", "database": "unreachable"},
    )
