"""Report generation API (public, capped per client IP)."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from complipilot.core.database import get_db
from complipilot.core.network import get_client_ip
from complipilot.features.generation.service import generate_report
from complipilot.models.compliance import GenerateRequest

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate")
async def generate_endpoint(
    request: Request,
    body: Optional[GenerateRequest] = None,
    db: Session = Depends(get_db),
):
    """Generate a report for ``formData``.

    Response: ``{reportHtml, source, profile, markdown?, usage}``.
    429 with ``limitReached`` once the caller's IP is at the cap.
    """
    ip = get_client_ip(request)
    return await generate_report(db, ip, body or GenerateRequest())
