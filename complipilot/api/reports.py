"""
Reports API: per-user saved reports.

All routes require a Supabase bearer token. A report that does not exist
and a report owned by someone else are both 404.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Path, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from complipilot.core.auth import get_current_user_id
from complipilot.core.database import get_db
from complipilot.features.export.pdf import PdfExporter
from complipilot.features.reports import service
from complipilot.features.reports.sanitizer import html_to_text
from complipilot.features.toolkits.registry import get_toolkit

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/save")
def save_report_endpoint(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    report = service.save_report(db, user_id, payload)
    return report.to_dict()


# Registered before /{report_id} so "list" is never read as an id
@router.get("/list")
def list_reports_endpoint(
    toolkit: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [summary.to_dict() for summary in service.list_reports(db, user_id, (toolkit or "").strip())]


@router.get("/{report_id}")
def get_report_endpoint(
    report_id: str = Path(..., description="Report ID"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return service.get_report(db, user_id, report_id).to_dict()


@router.delete("/{report_id}")
def delete_report_endpoint(
    report_id: str = Path(..., description="Report ID"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service.delete_report(db, user_id, report_id)
    return {"success": True}


@router.get("/{report_id}/pdf")
def report_pdf_endpoint(
    report_id: str = Path(..., description="Report ID"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Render a stored report as a PDF download."""
    report = service.get_report(db, user_id, report_id)
    document = PdfExporter(get_toolkit(report.toolkit_code)).export_result(html_to_text(report.html_content))
    logger.info(
        "report.pdf_exported",
        extra={"user_id": user_id, "tool": report.toolkit_code, "event_type": "pdf_export"},
    )
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": document.content_disposition},
    )
