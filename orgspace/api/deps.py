"""API dependencies: tenant context resolution and role gates.

Routes depend on `get_tenant_context` (any member) or `RequireRole(...)`.
FastAPI resolves dependencies before validating body fields, so a caller
without the role gets FORBIDDEN for a well-formed JSON body whatever its
fields hold. A body that is not valid JSON is rejected with 422 while it is
being read, before any dependency runs.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlmodel import Session

from orgspace.core.auth import get_current_user
from orgspace.core.database import get_db, transaction
from orgspace.core.tenant import get_selected_org_id
from orgspace.domain.rbac import require_role
from orgspace.domain.tenant_operations import TenantOperations
from orgspace.models.database.membership import MemberRole
from orgspace.models.database.user import User
from orgspace.models.dto.tenant import TenantContext


async def get_tenant_context(
    request: Request,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TenantContext:
    """
    Resolve (user, active organization, role) for this request.

    Raises UnauthenticatedError / NoActiveOrgError / StaleOrgSelectionError;
    main.py turns them into responses with a redirect hint.
    """
    selected = get_selected_org_id(request)
    # Committed read: services then start from a session with no open transaction
    with transaction(db):
        return TenantOperations.resolve(db, user.id if user else None, selected)


class RequireRole:
    """Role gate. Returns the TenantContext when the caller's role is allowed."""

    def __init__(self, *roles: MemberRole):
        self.roles = roles

    async def __call__(
        self,
        ctx: TenantContext = Depends(get_tenant_context),
    ) -> TenantContext:
        require_role(ctx, self.roles)
        return ctx


require_admin_context = RequireRole(MemberRole.OWNER, MemberRole.ADMIN)
require_owner_context = RequireRole(MemberRole.OWNER)
