"""Identity and organization selection endpoints.

Pattern: Async routes + Sync domain operations.
The active organization lives in a cookie; these endpoints are the only
writers of it.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from orgspace.core.auth import require_current_user
from orgspace.core.config import settings
from orgspace.core.database import get_db
from orgspace.core.tenant import clear_active_org, set_active_org
from orgspace.domain.exceptions import ForbiddenError
from orgspace.domain.organization_operations import OrganizationOperations
from orgspace.domain.tenant_operations import TenantOperations
from orgspace.models.database.membership import UserOrganizationRead
from orgspace.models.database.organization import (
    OrganizationCreate,
    OrganizationRead,
    OrganizationSelect,
)
from orgspace.models.database.user import User, UserRead
from orgspace.models.dto.tenant import OrgSelectionResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["organizations"])


@router.get("/me", response_model=UserRead, summary="Current user")
async def get_me(user: User = Depends(require_current_user)) -> UserRead:
    """The authenticated user's record (created on first request)."""
    return UserRead.model_validate(user)


@router.get("/orgs", response_model=List[UserOrganizationRead], summary="List my organizations")
async def list_my_organizations(
    user: User = Depends(require_current_user),
    db: Session = Depends(get_db),
) -> List[UserOrganizationRead]:
    return TenantOperations.list_for_user(db, user.id)


@router.post(
    "/orgs",
    response_model=OrganizationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create organization (onboarding)"
)
async def create_organization(
    data: OrganizationCreate,
    response: Response,
    user: User = Depends(require_current_user),
    db: Session = Depends(get_db),
) -> OrganizationRead:
    """
    Create an organization with the caller as OWNER and make it active.

    Name is trimmed and must be 2-60 characters (400 otherwise).
    """
    organization = OrganizationOperations.create_for_user(db, user.id, data.name)
    set_active_org(response, organization.id)
    return OrganizationRead.model_validate(organization)


@router.post("/orgs/select", response_model=OrgSelectionResult, summary="Select active organization")
async def select_organization(
    data: OrganizationSelect,
    response: Response,
    user: User = Depends(require_current_user),
    db: Session = Depends(get_db),
) -> OrgSelectionResult:
    """Set the active organization. Only organizations the caller belongs to (403 otherwise)."""
    if not TenantOperations.has_membership(db, user.id, data.organization_id):
        raise ForbiddenError("Not a member of this organization")

    set_active_org(response, data.organization_id)
    return OrgSelectionResult(
        redirect_to=settings.DASHBOARD_PATH,
        organization_id=data.organization_id,
    )


@router.get("/orgs/select/auto", response_model=OrgSelectionResult, summary="Auto-select organization")
async def auto_select_organization(
    response: Response,
    user: User = Depends(require_current_user),
    db: Session = Depends(get_db),
) -> OrgSelectionResult:
    """
    Pick the next step from the caller's memberships.

    - none: onboarding
    - several: selection page
    - exactly one: becomes active, go to dashboard
    """
    memberships = TenantOperations.list_for_user(db, user.id)

    if not memberships:
        return OrgSelectionResult(redirect_to=settings.ONBOARDING_PATH)

    if len(memberships) > 1:
        return OrgSelectionResult(redirect_to=settings.ORG_SELECT_PATH)

    organization_id = memberships[0].organization_id
    set_active_org(response, organization_id)
    return OrgSelectionResult(redirect_to=settings.DASHBOARD_PATH, organization_id=organization_id)


@router.api_route(
    "/orgs/recover",
    methods=["GET", "POST"],
    response_model=OrgSelectionResult,
    summary="Recover from a stale selection"
)
async def recover_active_organization(response: Response) -> OrgSelectionResult:
    """Clear the selection hint and send the client back to selection."""
    clear_active_org(response)
    return OrgSelectionResult(redirect_to=settings.ORG_SELECT_PATH)
