"""
complipilot/features/usage/service.py

Per-IP, per-tool usage limiter.

Handles:
- Read-only usage checks
- Atomic increments guarded by a SQL predicate (report_count < cap)
- Monitor-only mode, bypass list, fail-open on unknown IP or DB errors

State transitions per (ip, tool): absent -> 1; n -> n + 1 while n < cap
(enforcing) or unconditionally (monitor-only). Counts never decrease.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from complipilot.core.config import settings
from complipilot.core.database import usage_tracking
from complipilot.core.network import UNKNOWN_IP
from complipilot.models.usage import MODE_ENFORCING, MODE_MONITOR, UsageIncrement, UsageStatus

logger = logging.getLogger("complipilot")


def normalize_tool(tool: Optional[str]) -> str:
    return (str(tool or "").strip() or settings.TOOL_NAME).lower().strip()


def limit_message(limit: int) -> str:
    return (
        f"You have reached your {limit}-report limit for this tool. "
        "Please upgrade to continue."
    )


def _mode(enforcing: bool) -> str:
    return MODE_ENFORCING if enforcing else MODE_MONITOR


def _resolve(cap: Optional[int], enforcing: Optional[bool]):
    return (
        settings.report_cap if cap is None else cap,
        settings.enforcement_enabled if enforcing is None else enforcing,
    )


def _is_unknown(ip: Optional[str]) -> bool:
    return not ip or ip == UNKNOWN_IP


def _row_filter(ip: str, tool: str):
    return and_(usage_tracking.c.ip_address == ip, usage_tracking.c.tool == tool)


def _read_count(db: Session, ip: str, tool: str) -> Optional[int]:
    row = db.execute(
        select(usage_tracking.c.report_count).where(_row_filter(ip, tool)).limit(1)
    ).first()
    return None if row is None else int(row.report_count)


def check_usage(
    db: Session,
    ip: Optional[str],
    tool: Optional[str] = None,
    *,
    cap: Optional[int] = None,
    enforcing: Optional[bool] = None,
) -> UsageStatus:
    """
    Read-only usage check.

    Never raises: an undeterminable IP or a database failure allows the
    request (fail open) and is logged.
    """
    tool = normalize_tool(tool)
    cap, enforcing = _resolve(cap, enforcing)
    mode = _mode(enforcing)

    if ip in settings.bypass_ips:
        return UsageStatus(allowed=True, count=0, limit=cap, tool=tool, mode=mode, bypassed=True)

    if _is_unknown(ip):
        logger.warning("usage.unknown_ip", extra={"tool": tool, "event_type": "usage_check"})
        return UsageStatus(allowed=True, count=0, limit=cap, tool=tool, mode=mode, reason="unknown_ip")

    try:
        count = _read_count(db, ip, tool) or 0
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "usage.check_failed",
            exc_info=True,
            extra={"tool": tool, "event_type": "usage_check", "error_code": "db_error", "error_message": str(e)},
        )
        return UsageStatus(allowed=True, count=0, limit=cap, tool=tool, mode=mode, reason="db_error")

    allowed = not (enforcing and count >= cap)
    return UsageStatus(allowed=allowed, count=count, limit=cap, tool=tool, mode=mode)


def _conditional_update(db: Session, ip: str, tool: str, cap: int, enforcing: bool, now: datetime) -> Optional[int]:
    """Increment in place; return the new count or None when no row matched."""
    predicate = _row_filter(ip, tool)
    if enforcing:
        predicate = and_(predicate, usage_tracking.c.report_count < cap)

    result = db.execute(
        update(usage_tracking)
        .where(predicate)
        .values(report_count=usage_tracking.c.report_count + 1, last_updated=now)
    )
    if result.rowcount == 0:
        return None
    return _read_count(db, ip, tool)


def _increment(db: Session, ip: str, tool: str, cap: int, enforcing: bool) -> UsageIncrement:
    mode = _mode(enforcing)

    # Second pass only runs after losing a first-insert race to a concurrent request
    for attempt in range(2):
        now = datetime.now(timezone.utc)
        new_count = _conditional_update(db, ip, tool, cap, enforcing, now)
        if new_count is not None:
            db.commit()
            return UsageIncrement(success=True, count=new_count, limit=cap, tool=tool, mode=mode)

        existing = _read_count(db, ip, tool)
        if existing is not None:
            db.rollback()
            if enforcing and existing >= cap:
                logger.info(
                    "usage.limit_reached",
                    extra={"tool": tool, "event_type": "usage_increment", "status": 429},
                )
                return UsageIncrement(
                    success=False, count=existing, limit=cap, tool=tool, mode=mode, limit_reached=True
                )
            return UsageIncrement(success=True, count=existing, limit=cap, tool=tool, mode=mode)

        if enforcing and cap <= 0:
            db.rollback()
            return UsageIncrement(success=False, count=0, limit=cap, tool=tool, mode=mode, limit_reached=True)

        try:
            db.execute(
                insert(usage_tracking).values(
                    ip_address=ip,
                    tool=tool,
                    report_count=1,
                    last_updated=now,
                    created_at=now,
                )
            )
            db.commit()
            return UsageIncrement(success=True, count=1, limit=cap, tool=tool, mode=mode)
        except IntegrityError:
            db.rollback()
            if attempt:
                raise
            logger.info("usage.insert_conflict_retry", extra={"tool": tool, "event_type": "usage_increment"})

    raise RuntimeError("unreachable")  # pragma: no cover


def increment_usage(
    db: Session,
    ip: Optional[str],
    tool: Optional[str] = None,
    *,
    cap: Optional[int] = None,
    enforcing: Optional[bool] = None,
) -> UsageIncrement:
    """
    Atomically count one report for (ip, tool).

    Returns limit_reached=True (count unchanged) when enforcing and the row
    is already at the cap. Unknown IPs, bypassed IPs and database failures
    succeed without counting.
    """
    tool = normalize_tool(tool)
    cap, enforcing = _resolve(cap, enforcing)
    mode = _mode(enforcing)

    if ip in settings.bypass_ips:
        return UsageIncrement(success=True, count=0, limit=cap, tool=tool, mode=mode, bypassed=True)

    if _is_unknown(ip):
        logger.warning("usage.unknown_ip", extra={"tool": tool, "event_type": "usage_increment"})
        return UsageIncrement(success=True, count=0, limit=cap, tool=tool, mode=mode, reason="unknown_ip")

    try:
        result = _increment(db, ip, tool, cap, enforcing)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "usage.increment_failed",
            exc_info=True,
            extra={"tool": tool, "event_type": "usage_increment", "error_code": "db_error", "error_message": str(e)},
        )
        return UsageIncrement(success=True, count=0, limit=cap, tool=tool, mode=mode, reason="db_error")

    logger.info(
        "usage.incremented" if result.success else "usage.rejected",
        extra={"tool": tool, "event_type": "usage_increment"},
    )
    return result


def get_usage_records(db: Session, ip: str) -> List[Dict[str, Any]]:
    """All usage rows for one IP (diagnostics)."""
    rows = db.execute(
        select(usage_tracking)
        .where(usage_tracking.c.ip_address == ip)
        .order_by(usage_tracking.c.tool)
    ).mappings().all()
    return [
        {
            "id": row["id"],
            "ipAddress": row["ip_address"],
            "tool": row["tool"],
            "reportCount": row["report_count"],
            "lastUpdated": row["last_updated"].isoformat() if row["last_updated"] else None,
            "createdAt": row["created_at"].isoformat() if row["created_at"] else None,
        }
        for row in rows
    ]
