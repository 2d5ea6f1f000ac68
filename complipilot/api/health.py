"""
Health and version endpoints.

Lightweight operational checks that never expose secrets.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from complipilot import __version__
from complipilot.core.config import settings
from complipilot.core.database import ping
from complipilot.core.logging import get_request_id, latency_bucket_ms
from complipilot.models.usage import MODE_ENFORCING, MODE_MONITOR

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api", tags=["health"])
root_router = APIRouter(tags=["health"])

DEPLOYED_AT = datetime.now(timezone.utc).isoformat()


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/db/ping")
def db_ping():
    """Database connectivity check."""
    start = time.perf_counter()
    try:
        dialect = ping()
    except Exception as e:
        logger.error(
            "health.db_ping_failed",
            extra={"request_id": get_request_id(), "error_message": str(e)},
        )
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Database connection failed", "database": "disconnected"},
        )

    logger.info(
        "health.db_ping",
        extra={
            "request_id": get_request_id(),
            "latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000),
        },
    )
    return {"ok": True, "result": {"ping": 1}, "database": "connected", "dialect": dialect}


@router.get("/version")
def version():
    enforcing = settings.enforcement_enabled
    bypass_count = len(settings.bypass_ips)
    return {
        "version": __version__,
        "deployedAt": DEPLOYED_AT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "usageLimiting": {
            "mode": MODE_ENFORCING if enforcing else MODE_MONITOR,
            "enforcement": enforcing,
            "reportCap": settings.report_cap,
            "bypassIps": bypass_count,
            "toolName": settings.TOOL_NAME,
        },
        "features": {
            "lowercaseToolNames": True,
            "failOpenOnError": True,
            "monitorOnlyMode": not enforcing,
            "bypassLists": bypass_count > 0,
        },
    }
