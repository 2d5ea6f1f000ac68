import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

# Import after dotenv is loaded
from complipilot import __version__
from complipilot.api import auth, compliance, diagnostics, export, generate, health, reports, usage
from complipilot.core.config import settings, validate_config
from complipilot.core.database import close_engine, create_all_tables
from complipilot.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_error_handler,
    unhandled_exception_handler,
)
from complipilot.core.logging import configure_logging
from complipilot.core.middleware.request_id import RequestIdMiddleware
from complipilot.core.validation import validate_env
from complipilot.features.generation.llm import close_llm_client

configure_logging(settings.ENV, settings.LOG_LEVEL)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))

LOCALHOST_ORIGIN_REGEX = r"http://localhost(:\d+)?"


def cors_origin_regex() -> Optional[str]:
    """Configured origin patterns, plus any localhost port outside production."""
    patterns = [p for p in [settings.CORS_ALLOWED_ORIGIN_REGEX] if p]
    if not settings.is_production:
        patterns.append(LOCALHOST_ORIGIN_REGEX)
    if not patterns:
        return None
    return "|".join(f"(?:{p})" for p in patterns)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("complipilot")
    logger.info("Starting CompliPilot backend...")
    if settings.AUTO_CREATE_TABLES:
        create_all_tables()
    try:
        yield
    finally:
        await close_llm_client()
        close_engine()
        logger.info("Stopping CompliPilot backend...")


app = FastAPI(title="CompliPilot API", version=__version__, lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=cors_origin_regex(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    expose_headers=["Content-Disposition", "X-Request-Id"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(health.root_router)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(generate.router)
app.include_router(usage.router)
app.include_router(reports.router)
app.include_router(diagnostics.router)
app.include_router(compliance.router)
app.include_router(export.router)
