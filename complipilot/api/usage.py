"""
Usage API: inspect or bump the caller's per-tool report counter.

GET/POST /api/usage?action=check|increment&tool=<tool>

``action`` defaults by method (GET checks, POST increments). The tool comes
from the query string or a JSON body ``{"tool": ...}``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from complipilot.core.database import get_db
from complipilot.core.errors import UsageLimitError, ValidationError
from complipilot.core.network import get_client_ip
from complipilot.features.usage.service import check_usage, increment_usage, limit_message

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api", tags=["usage"])

ACTION_CHECK = "check"
ACTION_INCREMENT = "increment"


async def _body_tool(request: Request) -> Optional[str]:
    if request.method != "POST":
        return None
    try:
        payload = await request.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and payload.get("tool"):
        return str(payload["tool"])
    return None


@router.api_route("/usage", methods=["GET", "POST"])
async def usage_endpoint(
    request: Request,
    action: Optional[str] = Query(None),
    tool: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    ip = get_client_ip(request)
    tool = tool or await _body_tool(request)
    action = (action or (ACTION_INCREMENT if request.method == "POST" else ACTION_CHECK)).strip().lower()

    if action == ACTION_CHECK:
        return check_usage(db, ip, tool).to_check_response()

    if action == ACTION_INCREMENT:
        result = increment_usage(db, ip, tool)
        if result.limit_reached:
            exc = UsageLimitError(
                limit_message(result.limit), count=result.count, limit=result.limit, tool=result.tool
            )
            exc.extra.update({"success": False, "reportCount": result.count})
            raise exc
        return result.to_response()

    raise ValidationError("Invalid action")
