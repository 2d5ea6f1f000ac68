"""Error normalization and handlers.

Every error response shares one JSON envelope so clients never have to parse
an HTML error page:

    {"error": {"code", "message", "request_id"}, "detail": message, ...extra}
"""

import json
import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from complipilot.core.config import settings
from complipilot.core.logging import get_request_id

_LAST_RESORT_BODY = json.dumps({"error": "Internal server error"})


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id
        self.extra = dict(extra or {})


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class AuthenticationError(AppError):
    code = "unauthorized"
    status_code = 401


class AuthServiceUnavailableError(AppError):
    """Auth provider unreachable or not configured (distinct from a bad token)."""
    code = "auth_unavailable"
    status_code = 503


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class UsageLimitError(AppError):
    code = "limit_reached"
    status_code = 429

    def __init__(self, message: str, *, count: int, limit: int, tool: str, request_id: Optional[str] = None):
        super().__init__(
            message,
            request_id=request_id,
            extra={"limitReached": True, "count": count, "limit": limit, "tool": tool},
        )
        self.count = count
        self.limit = limit
        self.tool = tool


class UpstreamError(AppError):
    """LLM call failed or timed out."""
    code = "upstream_error"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[str] = None, request_id: Optional[str] = None):
        super().__init__(message, request_id=request_id)
        self.details = details
        if details and not settings.is_production:
            self.extra["details"] = details


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message: str, request_id: str, extra: Optional[Dict[str, Any]] = None) -> dict:
    payload = {
        "error": {"code": code, "message": message, "request_id": request_id},
        "detail": message,
    }
    if extra:
        payload.update(extra)
    return payload


def _json_response(status_code: int, payload: dict, request_id: str) -> Response:
    response = JSONResponse(status_code=status_code, content=payload)
    response.headers["x-request-id"] = request_id
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    payload = _error_payload(exc.code, exc.message, rid, exc.extra)
    logger = logging.getLogger("complipilot")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return _json_response(exc.status_code, payload, rid)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("complipilot")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    response = _json_response(exc.status_code, payload, rid)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "; ".join(problems) or "Invalid request"
    logger = logging.getLogger("complipilot")
    logger.warning("validation.error", extra={"request_id": rid, "error_code": "validation_error", "status": 400})
    return _json_response(400, _error_payload("validation_error", message, rid), rid)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("complipilot")
    logger.error("unhandled.exception", exc_info=True, extra={"request_id": rid, "error_code": "internal_error"})
    try:
        extra = None if settings.is_production else {"debug": str(exc)}
        payload = _error_payload("internal_error", "Something went wrong. Please try again later.", rid, extra)
        return _json_response(500, payload, rid)
    except Exception:
        logger.error("unhandled.exception.serialization_failed", exc_info=True, extra={"request_id": rid})
        return Response(content=_LAST_RESORT_BODY, status_code=500, media_type="application/json")
