"""
Groq chat-completion client.

One process-wide AsyncGroq client, created lazily behind a lock and closed
on application shutdown. Every call is bounded by LLM_TIMEOUT_SECONDS and
never retried.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Optional

import groq

from complipilot.core.config import settings
from complipilot.core.errors import UpstreamError
from complipilot.core.logging import latency_bucket_ms

logger = logging.getLogger("complipilot")

GENERATION_FAILED = "Failed to generate report. Please try again."

_client: Optional[Any] = None
_client_lock = threading.Lock()


def set_client_for_tests(client: Optional[Any]) -> None:
    """Install a fake client (anything exposing chat.completions.create)."""
    global _client
    with _client_lock:
        _client = client


def get_llm_client() -> Any:
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                api_key = (settings.GROQ_API_KEY or "").strip()
                if not api_key:
                    raise UpstreamError(GENERATION_FAILED, details="GROQ_API_KEY is not configured")
                _client = groq.AsyncGroq(
                    api_key=api_key,
                    max_retries=0,
                    timeout=settings.LLM_TIMEOUT_SECONDS,
                )
    return _client


async def close_llm_client() -> None:
    global _client
    with _client_lock:
        client, _client = _client, None
    close = getattr(client, "close", None)
    if close is not None:
        await close()


async def complete(
    system_prompt: str,
    user_prompt: str,
    *,
    model: Optional[str] = None,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Run one chat completion and return the message text.

    Raises:
        UpstreamError: client misconfigured, API error, or timeout
    """
    client = get_llm_client()
    limit = settings.LLM_TIMEOUT_SECONDS if timeout is None else timeout
    start = time.perf_counter()

    try:
        completion = await asyncio.wait_for(
            client.chat.completions.create(
                model=model or settings.LLM_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
            ),
            timeout=limit,
        )
    except asyncio.TimeoutError:
        logger.error("llm.timeout", extra={"error_code": "upstream_error", "event_type": "llm_call"})
        raise UpstreamError(GENERATION_FAILED, details="LLM API timeout")
    except groq.GroqError as e:
        logger.error(
            "llm.error",
            extra={"error_code": "upstream_error", "event_type": "llm_call", "error_message": str(e)},
        )
        raise UpstreamError(GENERATION_FAILED, details=str(e))

    logger.info(
        "llm.complete",
        extra={
            "event_type": "llm_call",
            "latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000),
        },
    )
    return completion.choices[0].message.content or ""
