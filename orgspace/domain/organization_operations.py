"""Domain operations for Organization entity (onboarding)."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Session

from orgspace.core.database import transaction
from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import DomainValidationError
from orgspace.domain.usage_operations import UsageOperations
from orgspace.models.database.audit_log import AuditAction, AuditTargetType
from orgspace.models.database.membership import Membership, MemberRole
from orgspace.models.database.organization import Organization, Plan

logger = logging.getLogger(__name__)

ORG_NAME_MIN_LENGTH = 2
ORG_NAME_MAX_LENGTH = 60


def normalize_org_name(name: str) -> str:
    value = (name or "").strip()
    if len(value) < ORG_NAME_MIN_LENGTH:
        raise DomainValidationError(f"Organization name must be at least {ORG_NAME_MIN_LENGTH} characters")
    if len(value) > ORG_NAME_MAX_LENGTH:
        raise DomainValidationError(f"Organization name must be at most {ORG_NAME_MAX_LENGTH} characters")
    return value


class OrganizationOperations:
    """Organization lifecycle. Every org is born with an OWNER and a usage row."""

    @staticmethod
    def create_for_user(
        session: Session,
        user_id: UUID,
        name: str,
        plan: Plan = Plan.FREE,
        now: Optional[datetime] = None,
    ) -> Organization:
        """
        Create an organization owned by `user_id`.

        Organization, OWNER membership, current-month usage row and the
        org.create audit entry are written atomically.

        Raises:
            DomainValidationError: name outside 2-60 characters after trimming
        """
        org_name = normalize_org_name(name)

        with transaction(session):
            organization = Organization(name=org_name, plan=plan)
            session.add(organization)
            session.flush()

            session.add(Membership(
                user_id=user_id,
                organization_id=organization.id,
                role=MemberRole.OWNER,
            ))
            UsageOperations.create_for_organization(session, organization.id, now)

            AuditLogOperations.record(
                session,
                organization_id=organization.id,
                actor_user_id=user_id,
                action=AuditAction.ORG_CREATE,
                target_type=AuditTargetType.ORGANIZATION,
                target_id=organization.id,
                meta={"name": org_name},
            )

        logger.info("Created organization %s (%s) for user %s", organization.id, plan.value, user_id)
        return organization
