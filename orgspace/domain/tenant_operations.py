"""Tenant context resolution.

Turns (authenticated user, active-organization hint) into a validated
TenantContext, or a tagged failure telling the caller how to recover.
Read-only: nothing here writes.
"""

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlmodel import Session, select

from orgspace.domain.exceptions import (
    NoActiveOrgError,
    StaleOrgSelectionError,
    UnauthenticatedError,
)
from orgspace.models.database.membership import Membership, UserOrganizationRead
from orgspace.models.database.organization import Organization
from orgspace.models.dto.tenant import OrgSummary, TenantContext

logger = logging.getLogger(__name__)


def parse_org_hint(value: Union[str, UUID, None]) -> Optional[UUID]:
    """Parse a selection hint. Returns None for malformed values."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(value.strip())
    except (ValueError, AttributeError):
        return None


class TenantOperations:
    """Membership-backed tenant lookups."""

    @staticmethod
    def resolve(
        session: Session,
        user_id: Optional[UUID],
        selected_org_id: Union[str, UUID, None],
    ) -> TenantContext:
        """
        Resolve the tenant context for one request.

        Raises:
            UnauthenticatedError: no user
            NoActiveOrgError: no (or empty) selection hint
            StaleOrgSelectionError: hint names an org the user is not a member of,
                or is not a valid id at all
        """
        if user_id is None:
            raise UnauthenticatedError()

        if selected_org_id is None or (isinstance(selected_org_id, str) and not selected_org_id.strip()):
            raise NoActiveOrgError()

        org_id = parse_org_hint(selected_org_id)
        if org_id is None:
            logger.info("Malformed active org hint for user %s", user_id)
            raise StaleOrgSelectionError()

        # Role and org summary come from the same row read
        row = session.exec(
            select(Membership, Organization)
            .join(Organization, Organization.id == Membership.organization_id)
            .where(Membership.user_id == user_id)
            .where(Membership.organization_id == org_id)
        ).first()

        if row is None:
            logger.info("Stale active org %s for user %s", org_id, user_id)
            raise StaleOrgSelectionError()

        membership, organization = row
        return TenantContext(
            user_id=user_id,
            org_id=organization.id,
            role=membership.role,
            org=OrgSummary(name=organization.name, plan=organization.plan),
        )

    @staticmethod
    def list_for_user(session: Session, user_id: UUID) -> List[UserOrganizationRead]:
        """All organizations the user belongs to, oldest membership first."""
        rows = session.exec(
            select(Membership, Organization)
            .join(Organization, Organization.id == Membership.organization_id)
            .where(Membership.user_id == user_id)
            .order_by(Membership.created_at)
        ).all()
        return [
            UserOrganizationRead(
                organization_id=organization.id,
                name=organization.name,
                plan=organization.plan,
                role=membership.role,
            )
            for membership, organization in rows
        ]

    @staticmethod
    def has_membership(session: Session, user_id: UUID, org_id: UUID) -> bool:
        membership = session.exec(
            select(Membership.id)
            .where(Membership.user_id == user_id)
            .where(Membership.organization_id == org_id)
        ).first()
        return membership is not None
