"""
Export API: render generated results as branded PDFs.

POST /api/export/pdf        {text, toolkit?}
POST /api/export/pdf/batch  {results: [{title?, text, timestamp?}], mode: "latest"|"all", toolkit?}
"""

import logging
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from complipilot.core.errors import ValidationError
from complipilot.features.export.pdf import MODE_ALL, MODE_LATEST, PdfDocument, PdfExporter
from complipilot.features.toolkits.registry import get_toolkit

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api/export", tags=["export"])


class ExportResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    text: str = ""
    timestamp: Optional[str] = None


class ExportRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""
    toolkit: Optional[str] = None


class BatchExportRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: List[ExportResult] = Field(default_factory=list)
    mode: str = MODE_LATEST
    toolkit: Optional[str] = None


def _pdf_response(document: PdfDocument) -> Response:
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": document.content_disposition,
            "X-Page-Count": str(document.page_count),
        },
    )


@router.post("/pdf")
def export_pdf(body: ExportRequest):
    if not body.text.strip():
        raise ValidationError("No result to export")
    document = PdfExporter(get_toolkit(body.toolkit)).export_result(body.text)
    return _pdf_response(document)


@router.post("/pdf/batch")
def export_pdf_batch(body: BatchExportRequest):
    mode = (body.mode or MODE_LATEST).strip().lower()
    if mode not in (MODE_LATEST, MODE_ALL):
        raise ValidationError("mode must be 'latest' or 'all'")
    if not body.results:
        raise ValidationError("No results to export")

    document = PdfExporter(get_toolkit(body.toolkit)).export_results(
        [r.model_dump() for r in body.results], mode
    )
    logger.info("export.batch", extra={"event_type": "pdf_export", "count": len(body.results)})
    return _pdf_response(document)
