"""
Admin token verification for the chat HTTP surface.

Chat clients are never authenticated; only the administrative routes
(stats, history wipe) are. Tokens are HS256 JWTs signed with JWT_SECRET and
carrying an ``isAdmin`` claim, sent either as ``x-auth-token`` or as
``Authorization: Bearer <token>``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt

from chat_gateway.core.config import settings
from chat_gateway.core.logging import get_logger

logger = get_logger(__name__)

TOKEN_HEADER = "x-auth-token"
DEFAULT_TOKEN_TTL = timedelta(days=7)


def create_access_token(claims: Dict[str, Any], expires_in: timedelta = DEFAULT_TOKEN_TTL) -> str:
    """Sign a token for operator tooling (e.g. ``{"email": ..., "isAdmin": True}``)."""
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not defined in environment variables")

    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def extract_token(request: Request) -> Optional[str]:
    token = request.headers.get(TOKEN_HEADER)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):].strip() or None
    return None


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning("Rejected admin token: %s", e)
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token is not valid")


async def require_admin(request: Request) -> Dict[str, Any]:
    """
    Dependency for admin-only endpoints.

    Returns the verified token claims.
    """
    if not settings.JWT_SECRET:
        logger.error("Admin endpoint called but JWT_SECRET is not configured")
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Admin authentication is not configured")

    token = extract_token(request)
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "No token, authorization denied")

    claims = decode_token(token)
    if claims.get("isAdmin") is not True:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return claims
