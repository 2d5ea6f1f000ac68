"""
complipilot/features/reports/service.py

Per-user report store.

Every query is filtered by the caller's user id; a report that exists but
belongs to someone else is indistinguishable from one that does not exist.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, delete, insert, select
from sqlalchemy.orm import Session

from complipilot.core.database import compliance_reports
from complipilot.core.errors import NotFoundError, ValidationError
from complipilot.features.reports.sanitizer import sanitize_html
from complipilot.models.report import (
    DEFAULT_TOOLKIT_CODE,
    OWNERSHIP_FIELDS,
    ComplianceReport,
    ReportCreate,
    ReportSummary,
)

logger = logging.getLogger("complipilot")

_SUMMARY_COLUMNS = (
    compliance_reports.c.id,
    compliance_reports.c.name,
    compliance_reports.c.entity_name,
    compliance_reports.c.entity_type,
    compliance_reports.c.jurisdiction,
    compliance_reports.c.filing_type,
    compliance_reports.c.deadline,
    compliance_reports.c.checksum,
    compliance_reports.c.created_at,
)


def compute_checksum(entity_name: str, jurisdiction: str, filing_type: str) -> str:
    """Duplicate-detection fingerprint (not a security hash)."""
    return hashlib.md5(f"{entity_name}-{jurisdiction}-{filing_type}".encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _row_to_report(row: Mapping[str, Any]) -> ComplianceReport:
    return ComplianceReport(
        id=row["id"],
        user_id=row["user_id"],
        toolkit_code=row["toolkit_code"],
        name=row["name"],
        entity_name=row["entity_name"],
        entity_type=row["entity_type"],
        jurisdiction=row["jurisdiction"],
        filing_type=row["filing_type"],
        deadline=row["deadline"],
        html_content=row["html_content"],
        checksum=row["checksum"],
        metadata=row["metadata"],
        created_at=_as_utc(row["created_at"]),
    )


def parse_report_payload(payload: Mapping[str, Any]) -> ReportCreate:
    """Drop client-controlled ownership fields, then validate."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid input")
    cleaned = {k: v for k, v in payload.items() if k not in OWNERSHIP_FIELDS}
    try:
        return ReportCreate.model_validate(cleaned)
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(
            f"Invalid input: {', '.join(fields)}" if fields else "Invalid input",
            extra={"fields": fields},
        )


def save_report(db: Session, user_id: str, payload: Mapping[str, Any]) -> ComplianceReport:
    """
    Persist a report for the authenticated user.

    The owner is always user_id; html_content is sanitized; checksum is
    derived from entity name, jurisdiction and filing type.
    """
    data = parse_report_payload(payload)
    now = datetime.now(timezone.utc)
    values = {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "toolkit_code": data.toolkit_code or DEFAULT_TOOLKIT_CODE,
        "name": data.name,
        "entity_name": data.entity_name,
        "entity_type": data.entity_type,
        "jurisdiction": data.jurisdiction,
        "filing_type": data.filing_type,
        "deadline": data.deadline,
        "html_content": sanitize_html(data.html_content),
        "checksum": compute_checksum(data.entity_name, data.jurisdiction, data.filing_type),
        "metadata": data.metadata or {},
        "created_at": now,
    }

    db.execute(insert(compliance_reports).values(**values))
    db.commit()

    logger.info(
        "report.saved",
        extra={"user_id": user_id, "tool": values["toolkit_code"], "event_type": "report_save"},
    )
    return _row_to_report(values)


def list_reports(db: Session, user_id: str, toolkit_code: str) -> List[ReportSummary]:
    """Caller's reports for one toolkit, newest first, without HTML bodies."""
    if not toolkit_code:
        raise ValidationError("toolkit query parameter is required")

    rows = db.execute(
        select(*_SUMMARY_COLUMNS)
        .where(
            and_(
                compliance_reports.c.toolkit_code == toolkit_code,
                compliance_reports.c.user_id == user_id,
            )
        )
        .order_by(compliance_reports.c.created_at.desc())
    ).mappings().all()

    return [
        ReportSummary(**{**dict(row), "created_at": _as_utc(row["created_at"])})
        for row in rows
    ]


def get_report(db: Session, user_id: str, report_id: str) -> ComplianceReport:
    row = db.execute(
        select(compliance_reports).where(
            and_(
                compliance_reports.c.id == report_id,
                compliance_reports.c.user_id == user_id,
            )
        )
    ).mappings().first()

    if row is None:
        raise NotFoundError("Report not found")
    return _row_to_report(row)


def delete_report(db: Session, user_id: str, report_id: str) -> None:
    result = db.execute(
        delete(compliance_reports).where(
            and_(
                compliance_reports.c.id == report_id,
                compliance_reports.c.user_id == user_id,
            )
        )
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("Report not found or access denied")
    db.commit()
    logger.info("report.deleted", extra={"user_id": user_id, "event_type": "report_delete"})
