"""Authentication utilities for JWT handling.

Identity comes from an external provider that issues signed JWTs:
- Bearer <jwt> -> signature/claims verified with python-jose -> Principal
- Principal -> users row (upserted on auth_uid) -> user.id

Invalid or missing credentials resolve to None; routes that need an
identity raise UnauthenticatedError, which main.py maps to 401 with a
sign-in redirect hint.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from jose import jwt, JWTError
from sqlmodel import Session

from orgspace.core.config import settings
from orgspace.core.database import get_db
from orgspace.domain.exceptions import DomainValidationError, UnauthenticatedError
from orgspace.domain.user_operations import UserOperations
from orgspace.models.database.user import User
from orgspace.models.dto.tenant import Principal

logger = logging.getLogger(__name__)


def decode_token(token: str) -> Optional[Principal]:
    """
    Verify a JWT and extract the principal.

    Audience and issuer are only checked when configured.

    Returns:
        Principal, or None when the token is invalid or has no 'sub'
    """
    if not settings.AUTH_JWT_SECRET:
        # Auth not configured (dev mode): nobody is authenticated
        return None

    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE or None,
            issuer=settings.AUTH_JWT_ISSUER or None,
            options={
                "verify_exp": True,   # Reject expired tokens
                "verify_aud": bool(settings.AUTH_JWT_AUDIENCE),
                "require_sub": True,  # Require subject claim
            },
        )
    except jwt.ExpiredSignatureError:
        logger.warning("JWT expired")
        return None
    except JWTError as e:
        # Invalid signature, malformed token, etc.
        logger.warning("JWT error: %s", e)
        return None

    auth_uid = payload.get("sub")
    if not auth_uid:
        logger.warning("No 'sub' claim in JWT payload")
        return None

    return Principal(
        auth_uid=str(auth_uid),
        email=payload.get("email"),
        name=payload.get("name"),
        image_url=payload.get("picture"),
    )


async def get_current_principal(
    authorization: Optional[str] = Header(None)
) -> Optional[Principal]:
    """
    Extract the verified principal from the Authorization header.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        Principal if authenticated, None otherwise
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        return None
    return decode_token(token)


async def get_current_user(
    principal: Optional[Principal] = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Resolve the principal to a users row, creating it on first sight.

    A principal without an email cannot be provisioned and counts as
    unauthenticated.
    """
    if principal is None:
        return None
    try:
        return UserOperations.upsert_from_principal(db, principal)
    except DomainValidationError as e:
        logger.warning("Cannot provision user for auth_uid %s...: %s", principal.auth_uid[:8], e.detail)
        return None


async def require_current_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """
    Require an authenticated user.

    Raises:
        UnauthenticatedError: no valid identity (HTTP 401 + sign-in hint)
    """
    if user is None:
        raise UnauthenticatedError()
    return user
