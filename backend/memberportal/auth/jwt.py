"""Bearer tokens for the admin and privacy APIs.

Login lives in the portal's authentication service; this module signs and
verifies the tokens it hands out (HS256, secret from ``JWT_SECRET``).

Claims: ``sub`` (member UUID), ``email``, ``is_admin`` (informational, the
flag is re-read from the database per request), ``iat`` and ``exp``.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

import jwt

ALGORITHM = "HS256"
DEFAULT_EXPIRY_MINUTES = 60


def _signing_key() -> str:
    secret = os.getenv('JWT_SECRET')
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def _expiry() -> timedelta:
    raw = os.getenv('JWT_EXPIRY_MINUTES', str(DEFAULT_EXPIRY_MINUTES))
    try:
        minutes = int(raw)
    except ValueError:
        minutes = DEFAULT_EXPIRY_MINUTES
    return timedelta(minutes=minutes)


def create_access_token(user_id: UUID, email: str, is_admin: bool = False) -> str:
    """Sign a token for a member.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        'sub': str(user_id),
        'email': email,
        'is_admin': is_admin,
        'iat': int(issued_at.timestamp()),
        'exp': int((issued_at + _expiry()).timestamp()),
    }
    return jwt.encode(claims, _signing_key(), algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry and return the claims.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or tampered with
        ValueError: If JWT_SECRET is not set
    """
    return jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
