"""Request correlation: every request gets an id that shows up in logs and error bodies."""

import logging
import re
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from complipilot.core.logging import LOGGER_NAME, latency_bucket_ms, request_id_ctx_var
from complipilot.core.network import get_client_ip

REQUEST_ID_HEADER = "x-request-id"
# Caller-supplied ids end up in log lines, so only plain tokens are echoed back
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

logger = logging.getLogger(LOGGER_NAME)


def resolve_request_id(incoming) -> str:
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = rid
        token = request_id_ctx_var.set(rid)
        details = {
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "client_ip": get_client_ip(request),
        }
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            details["latency_bucket"] = latency_bucket_ms((time.perf_counter() - started) * 1000)
            logger.error("request.failed", exc_info=True, extra=details)
            raise
        finally:
            request_id_ctx_var.reset(token)

        response.headers[self.header_name] = rid
        details["status"] = response.status_code
        details["latency_bucket"] = latency_bucket_ms((time.perf_counter() - started) * 1000)
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "request.complete",
            extra=details,
        )
        return response
