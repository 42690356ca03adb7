"""
Auth utilities for the Glyph API.

Validates JWTs issued by the hosted auth provider and extracts user_id from
request context. Falls back to the X-User-Id header for local development
and tests. Credentials are never inspected beyond signature verification.
"""
from fastapi import Header, HTTPException, Request
from typing import Optional
from glyph.core.config import settings
import jwt
import logging

logger = logging.getLogger(__name__)


def verify_jwt(token: str) -> Optional[str]:
    """
    Verify a provider-issued JWT and extract user_id.

    Args:
        token: JWT from Authorization header (Bearer {token})

    Returns:
        user_id from the 'sub' claim, or None when no secret is configured

    Raises:
        HTTPException 401: Invalid or expired token
    """
    if not settings.AUTH_JWT_SECRET:
        logger.debug("No AUTH_JWT_SECRET configured, skipping JWT validation")
        return None

    options = {"verify_signature": True, "verify_exp": True, "verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


def _resolve_user_id(request: Request, x_user_id: Optional[str]) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        user_id = verify_jwt(auth_header[7:])
        if user_id:
            return user_id
    return x_user_id or None


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Development/test user ID"),
) -> str:
    """
    Extract current user ID from request context.

    Priority:
    1. JWT from Authorization header
    2. X-User-Id header
    3. Raise 401 Unauthorized
    """
    user_id = _resolve_user_id(request, x_user_id)
    if user_id:
        return user_id

    raise HTTPException(
        status_code=401,
        detail="Missing Authorization (Bearer JWT) or X-User-Id header",
    )


async def get_optional_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Development/test user ID"),
) -> Optional[str]:
    """Like get_current_user_id, but anonymous callers get None instead of 401."""
    return _resolve_user_id(request, x_user_id)
