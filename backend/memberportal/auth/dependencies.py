"""Authentication dependencies for the admin and privacy routers.

``CurrentUser`` resolves the bearer token to a live (not soft-deleted)
member; ``CurrentAdmin`` additionally requires the staff flag and rejects
everyone else before the endpoint body runs.
"""

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.member import Member
from .jwt import decode_token


security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _member_id_from_token(token: str) -> UUID:
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID claim")

    try:
        return UUID(subject)
    except ValueError as e:
        raise _unauthorized(f"Invalid token claims: {e}")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Member:
    """Member behind the bearer token.

    Tokens of soft-deleted members stop working as soon as ``deleted_at`` is
    set, regardless of their expiry.

    Raises:
        HTTPException 401: Missing, invalid or expired token, or unknown member
    """
    member_id = _member_id_from_token(credentials.credentials)

    member = db.query(Member).filter(
        Member.id == member_id,
        Member.deleted_at.is_(None),
    ).first()
    if not member:
        raise _unauthorized("User not found")

    return member


def get_current_admin(current_user: Member = Depends(get_current_user)) -> Member:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


CurrentUser = Annotated[Member, Depends(get_current_user)]
CurrentAdmin = Annotated[Member, Depends(get_current_admin)]
