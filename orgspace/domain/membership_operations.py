"""Domain operations for Membership entity.

Every organization keeps at least one OWNER. The OWNER count is taken with
the OWNER rows locked, inside the same transaction as the change, so two
concurrent demotions cannot both pass the check.
"""

import logging
from typing import List, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from orgspace.core.database import transaction
from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import (
    AlreadyMemberError,
    DomainValidationError,
    EntityNotFoundError,
    LastOwnerError,
    UserNotFoundError,
)
from orgspace.domain.rbac import require_owner
from orgspace.domain.user_operations import MAX_EMAIL_LENGTH, UserOperations, normalize_email
from orgspace.models.database.audit_log import AuditAction, AuditTargetType
from orgspace.models.database.membership import MemberRead, Membership, MemberRole
from orgspace.models.database.user import User
from orgspace.models.dto.tenant import TenantContext

logger = logging.getLogger(__name__)


def parse_role(value: Union[str, MemberRole]) -> MemberRole:
    try:
        return MemberRole(value)
    except ValueError:
        raise DomainValidationError(f"Unknown role: {value}")


class MembershipOperations:
    """Membership management. Mutations are OWNER-only."""

    @staticmethod
    def list(session: Session, organization_id: UUID) -> List[MemberRead]:
        """Members of an organization with display fields, oldest first."""
        rows = session.exec(
            select(Membership, User)
            .join(User, User.id == Membership.user_id)
            .where(Membership.organization_id == organization_id)
            .order_by(Membership.created_at)
        ).all()
        return [
            MemberRead(
                id=membership.id,
                user_id=user.id,
                role=membership.role,
                created_at=membership.created_at,
                name=user.name,
                email=user.email,
                image_url=user.image_url,
            )
            for membership, user in rows
        ]

    @staticmethod
    def add_by_identifier(
        session: Session,
        ctx: TenantContext,
        identifier: str,
        role: Union[str, MemberRole] = MemberRole.MEMBER,
    ) -> Membership:
        """
        Add an existing user (matched by email, case-insensitive) to ctx's org.

        Raises:
            ForbiddenError: caller is not OWNER
            DomainValidationError: empty/oversized identifier or unknown role
            UserNotFoundError: no existing user matches
            AlreadyMemberError: user already belongs to the organization
        """
        require_owner(ctx)

        email = normalize_email(identifier or "")
        if not email:
            raise DomainValidationError("Email is required")
        if len(email) > MAX_EMAIL_LENGTH:
            raise DomainValidationError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
        member_role = parse_role(role)

        with transaction(session):
            user = UserOperations.get_by_email(session, email)
            if user is None:
                raise UserNotFoundError()

            existing = session.exec(
                select(Membership)
                .where(Membership.user_id == user.id)
                .where(Membership.organization_id == ctx.org_id)
            ).first()
            if existing is not None:
                raise AlreadyMemberError()

            membership = Membership(
                user_id=user.id,
                organization_id=ctx.org_id,
                role=member_role,
            )
            session.add(membership)
            try:
                session.flush()
            except IntegrityError as exc:
                # Concurrent add of the same pair hit the unique constraint
                raise AlreadyMemberError() from exc

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.MEMBERSHIP_ADD,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=membership.id,
                meta={"userId": str(user.id), "role": member_role.value, "email": email},
            )

        logger.info("Added user %s to org %s as %s", user.id, ctx.org_id, member_role.value)
        return membership

    @staticmethod
    def change_role(
        session: Session,
        ctx: TenantContext,
        membership_id: UUID,
        new_role: Union[str, MemberRole],
    ) -> Membership:
        """
        Change a member's role. Unchanged role is a no-op (no audit entry).

        Raises:
            ForbiddenError: caller is not OWNER
            EntityNotFoundError: membership not in ctx's organization
            LastOwnerError: would demote the only OWNER
        """
        require_owner(ctx)
        role = parse_role(new_role)

        with transaction(session):
            membership = MembershipOperations._lock_membership(session, ctx.org_id, membership_id)
            from_role = membership.role
            if from_role == role:
                return membership

            if from_role == MemberRole.OWNER:
                MembershipOperations._ensure_other_owner(session, ctx.org_id)

            membership.role = role
            session.add(membership)
            session.flush()

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.MEMBERSHIP_ROLE_UPDATE,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=membership.id,
                meta={
                    "userId": str(membership.user_id),
                    "fromRole": from_role.value,
                    "toRole": role.value,
                },
            )

        logger.info(
            "Membership %s role %s -> %s in org %s",
            membership.id, from_role.value, role.value, ctx.org_id,
        )
        return membership

    @staticmethod
    def remove(session: Session, ctx: TenantContext, membership_id: UUID) -> None:
        """
        Remove a member from ctx's organization.

        Raises:
            ForbiddenError: caller is not OWNER
            EntityNotFoundError: membership not in ctx's organization
            LastOwnerError: would remove the only OWNER
        """
        require_owner(ctx)

        with transaction(session):
            membership = MembershipOperations._lock_membership(session, ctx.org_id, membership_id)
            if membership.role == MemberRole.OWNER:
                MembershipOperations._ensure_other_owner(session, ctx.org_id)

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.MEMBERSHIP_REMOVE,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=membership.id,
                meta={"userId": str(membership.user_id), "role": membership.role.value},
            )
            session.delete(membership)
            session.flush()

        logger.info("Removed membership %s from org %s", membership_id, ctx.org_id)

    @staticmethod
    def count_owners(session: Session, organization_id: UUID) -> int:
        """OWNER count with the OWNER rows locked. Call inside a transaction."""
        owners = session.exec(
            select(Membership.id)
            .where(Membership.organization_id == organization_id)
            .where(Membership.role == MemberRole.OWNER)
            .with_for_update()
        ).all()
        return len(owners)

    @staticmethod
    def _lock_membership(session: Session, organization_id: UUID, membership_id: UUID) -> Membership:
        membership = session.exec(
            select(Membership)
            .where(Membership.id == membership_id)
            .where(Membership.organization_id == organization_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if membership is None:
            raise EntityNotFoundError("Membership", membership_id)
        return membership

    @staticmethod
    def _ensure_other_owner(session: Session, organization_id: UUID) -> None:
        if MembershipOperations.count_owners(session, organization_id) <= 1:
            raise LastOwnerError()
