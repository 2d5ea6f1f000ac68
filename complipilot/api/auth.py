"""
Auth API: public Supabase config and password login.

The anon key is meant to be public; the browser uses it to talk to
Supabase directly. Login proxies the password grant so clients without the
Supabase SDK can obtain an access token.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from complipilot.core.config import settings
from complipilot.core.errors import AuthServiceUnavailableError, ValidationError
from complipilot.features.auth.client import get_auth_client, is_configured

logger = logging.getLogger("complipilot")

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None


@router.get("/config")
def auth_config():
    if not is_configured():
        return {"authEnabled": False, "message": "Authentication service not configured"}
    return {
        "supabaseUrl": settings.SUPABASE_URL,
        "supabaseAnonKey": settings.SUPABASE_ANON_KEY,
        "authEnabled": True,
    }


@router.post("/login")
async def login(body: LoginRequest):
    """Exchange email + password for an access token.

    Errors:
    - 400: email or password missing
    - 401: invalid credentials
    - 503: Supabase not configured or unreachable
    """
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    if not is_configured():
        logger.error("auth.not_configured", extra={"event_type": "login"})
        raise AuthServiceUnavailableError("Authentication service unavailable")

    result = await get_auth_client().sign_in_with_password(body.email, body.password)
    logger.info("auth.login", extra={"event_type": "login", "user_id": result["user"]["id"]})
    return result
