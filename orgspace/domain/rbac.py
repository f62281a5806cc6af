"""Role checks against the three-role model. Pure and synchronous."""

from typing import Iterable

from orgspace.domain.exceptions import ForbiddenError
from orgspace.models.database.membership import MemberRole
from orgspace.models.dto.tenant import TenantContext

ADMIN_ROLES = (MemberRole.OWNER, MemberRole.ADMIN)
OWNER_ROLES = (MemberRole.OWNER,)


def require_role(ctx: TenantContext, allowed: Iterable[MemberRole]) -> None:
    """Raise ForbiddenError unless ctx.role is in `allowed`."""
    if ctx.role not in tuple(allowed):
        raise ForbiddenError(f"Role {ctx.role.value} is not permitted for this action")


def require_admin(ctx: TenantContext) -> None:
    require_role(ctx, ADMIN_ROLES)


def require_owner(ctx: TenantContext) -> None:
    require_role(ctx, OWNER_ROLES)
