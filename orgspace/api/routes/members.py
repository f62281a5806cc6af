"""Members API endpoints. Listing is open to members; changes are OWNER-only."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from orgspace.api.deps import get_tenant_context, require_owner_context
from orgspace.core.database import get_db
from orgspace.domain.membership_operations import MembershipOperations
from orgspace.models.database.membership import (
    MemberAdd,
    MemberRead,
    MemberRoleUpdate,
    MembershipRead,
)
from orgspace.models.dto.tenant import TenantContext

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=List[MemberRead], summary="List members")
async def list_members(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> List[MemberRead]:
    return MembershipOperations.list(db, ctx.org_id)


@router.post(
    "",
    response_model=MembershipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add member"
)
async def add_member(
    data: MemberAdd,
    ctx: TenantContext = Depends(require_owner_context),
    db: Session = Depends(get_db),
) -> MembershipRead:
    """
    Add an existing user by email.

    404 USER_NOT_FOUND when no user has that email, 409 ALREADY_MEMBER
    when they already belong to the organization.
    """
    membership = MembershipOperations.add_by_identifier(db, ctx, data.email, data.role)
    return MembershipRead.model_validate(membership)


@router.patch("/{membership_id}", response_model=MembershipRead, summary="Change member role")
async def change_member_role(
    membership_id: UUID,
    data: MemberRoleUpdate,
    ctx: TenantContext = Depends(require_owner_context),
    db: Session = Depends(get_db),
) -> MembershipRead:
    """409 LAST_OWNER when demoting the only OWNER."""
    membership = MembershipOperations.change_role(db, ctx, membership_id, data.role)
    return MembershipRead.model_validate(membership)


@router.delete(
    "/{membership_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove member"
)
async def remove_member(
    membership_id: UUID,
    ctx: TenantContext = Depends(require_owner_context),
    db: Session = Depends(get_db),
) -> None:
    MembershipOperations.remove(db, ctx, membership_id)
