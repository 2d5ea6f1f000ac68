"""IP detection and usage diagnostics (for troubleshooting proxy deployments)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from complipilot.core.config import settings
from complipilot.core.database import get_db
from complipilot.core.errors import NotFoundError
from complipilot.core.network import UNKNOWN_IP, detect_client_ip, ip_headers_snapshot
from complipilot.features.usage.service import get_usage_records

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api", tags=["diagnostics"])


@router.get("/check-ip")
def check_ip(request: Request):
    ip, source = detect_client_ip(request)
    logger.info("ip.detected", extra={"event_type": "ip_detection", "source": source})
    return {
        "detectedIp": ip,
        "source": source,
        "headers": ip_headers_snapshot(request),
        "isUnknown": ip == UNKNOWN_IP,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/debug-usage")
def debug_usage(request: Request, db: Session = Depends(get_db)):
    """Usage rows for the caller's IP. Not served in production."""
    if settings.is_production:
        raise NotFoundError("Not Found")

    ip, _ = detect_client_ip(request)
    return {
        "detectedIp": ip,
        "headers": ip_headers_snapshot(request),
        "usageRecords": get_usage_records(db, ip),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
