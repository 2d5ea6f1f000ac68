"""Client IP detection behind Vercel-style proxies.

Header precedence: x-vercel-forwarded-for, x-vercel-ip-address,
x-forwarded-for (first hop), x-real-ip, then the socket peer.
"""
import logging
from typing import Dict, Optional, Tuple

from starlette.requests import Request

logger = logging.getLogger("complipilot")

UNKNOWN_IP = "unknown"

IP_HEADERS = (
    "x-vercel-forwarded-for",
    "x-vercel-ip-address",
    "x-forwarded-for",
    "x-real-ip",
)


def _first_hop(value: str) -> str:
    return value.split(",")[0].strip()


def detect_client_ip(request: Request) -> Tuple[str, str]:
    """Return ``(ip, source)`` where source names the header or "socket"."""
    for header in IP_HEADERS:
        value = request.headers.get(header)
        if value and _first_hop(value):
            return _first_hop(value), header

    if request.client and request.client.host:
        return request.client.host, "socket"

    logger.warning(
        "ip.detection_failed",
        extra={"event_type": "ip_detection", "headers": ip_headers_snapshot(request)},
    )
    return UNKNOWN_IP, "none"


def get_client_ip(request: Request) -> str:
    ip, _ = detect_client_ip(request)
    return ip


def ip_headers_snapshot(request: Request) -> Dict[str, Optional[str]]:
    snapshot: Dict[str, Optional[str]] = {h: request.headers.get(h) for h in IP_HEADERS}
    snapshot["socket.remoteAddress"] = request.client.host if request.client else None
    return snapshot
