"""Domain operations for User entity."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from orgspace.core.database import transaction
from orgspace.domain.exceptions import DomainValidationError
from orgspace.models.database.user import User
from orgspace.models.dto.tenant import Principal

logger = logging.getLogger(__name__)

MAX_EMAIL_LENGTH = 320


def normalize_email(value: str) -> str:
    """Trim and lower-case an email address or identifier."""
    return value.strip().lower()


class UserOperations:
    """Users are created from verified identity claims, never deleted."""

    @staticmethod
    def get_by_auth_uid(session: Session, auth_uid: str) -> Optional[User]:
        return session.exec(select(User).where(User.auth_uid == auth_uid)).first()

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[User]:
        """Case-insensitive lookup against existing users only."""
        normalized = normalize_email(email)
        if not normalized:
            return None
        stmt = select(User).where(func.lower(User.email) == normalized)
        return session.exec(stmt).first()

    @staticmethod
    def upsert_from_principal(session: Session, principal: Principal) -> User:
        """
        Create or refresh the user for a verified principal.

        Keyed on auth_uid. Email/name/image follow the identity provider on
        every resolution. Emails are stored normalized and belong to one
        user only.

        Raises:
            DomainValidationError: principal carries no usable email, or the
                email already belongs to another user
        """
        email = normalize_email(principal.email or "")
        if not email:
            raise DomainValidationError("Identity has no email address")
        if len(email) > MAX_EMAIL_LENGTH:
            raise DomainValidationError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")

        try:
            with transaction(session):
                owner = UserOperations.get_by_email(session, email)
                if owner is not None and owner.auth_uid != principal.auth_uid:
                    raise DomainValidationError("Email address is already in use")

                user = UserOperations.get_by_auth_uid(session, principal.auth_uid)
                if user is None:
                    user = User(
                        auth_uid=principal.auth_uid,
                        email=email,
                        name=principal.name,
                        image_url=principal.image_url,
                    )
                    session.add(user)
                    session.flush()
                    logger.info("Created user %s for auth_uid %s...", user.id, principal.auth_uid[:8])
                    return user

                changed = (
                    user.email != email
                    or user.name != principal.name
                    or user.image_url != principal.image_url
                )
                if changed:
                    user.email = email
                    user.name = principal.name
                    user.image_url = principal.image_url
                    session.add(user)
                    session.flush()
                return user
        except IntegrityError as exc:
            # Concurrent first login with the same email (or auth_uid)
            logger.warning("User upsert for auth_uid %s... conflicted: %s", principal.auth_uid[:8], exc.orig)
            raise DomainValidationError("Email address is already in use") from exc
