"""
Auth utilities for the report API.

Resolves the caller's user id from a Supabase access token:
1. Local HS256 verification with PyJWT when SUPABASE_JWT_SECRET is set
2. Otherwise ask the auth provider (GET /auth/v1/user)

Missing or invalid token -> 401; provider down or unconfigured -> 503.
"""
import logging
from typing import Optional

import jwt
from fastapi import Request

from complipilot.core.config import settings
from complipilot.core.errors import AuthenticationError, AuthServiceUnavailableError
from complipilot.features.auth.client import get_auth_client, is_configured

logger = logging.getLogger("complipilot")

SUPABASE_AUDIENCE = "authenticated"


def extract_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_supabase_jwt(token: str, secret: str) -> str:
    """
    Verify a Supabase access token locally and return its 'sub' claim.

    Raises:
        AuthenticationError: Invalid, expired or subject-less token
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=SUPABASE_AUDIENCE,
            options={"require": ["exp", "sub", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise AuthenticationError("Authentication required.")

    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Authentication required.")
    return user_id


async def get_current_user_id(request: Request) -> str:
    """
    FastAPI dependency: the authenticated caller's user id.

    Raises:
        AuthenticationError: Missing or rejected token (401)
        AuthServiceUnavailableError: Auth provider unreachable or not configured (503)
    """
    token = extract_bearer_token(request)
    if not token:
        raise AuthenticationError("Authentication required.")

    secret = settings.SUPABASE_JWT_SECRET
    if secret:
        user_id = verify_supabase_jwt(token, secret)
    else:
        if not is_configured():
            logger.error("auth.not_configured")
            raise AuthServiceUnavailableError("Authentication service temporarily unavailable.")
        user = await get_auth_client().get_user(token)
        user_id = user["id"]

    request.state.user_id = user_id
    return user_id
