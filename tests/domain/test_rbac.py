"""Tests for role guards."""

import pytest
from uuid import uuid4

from orgspace.domain.exceptions import ErrorKind, ForbiddenError
from orgspace.domain.rbac import require_admin, require_owner, require_role
from orgspace.models.database import MemberRole, Plan
from orgspace.models.dto.tenant import OrgSummary, TenantContext


def ctx_with(role: MemberRole) -> TenantContext:
    return TenantContext(
        user_id=uuid4(),
        org_id=uuid4(),
        role=role,
        org=OrgSummary(name="Acme", plan=Plan.FREE),
    )


@pytest.mark.parametrize("role", [MemberRole.OWNER, MemberRole.ADMIN])
def test_require_admin_allows_owner_and_admin(role):
    require_admin(ctx_with(role))


def test_require_admin_rejects_member():
    with pytest.raises(ForbiddenError) as exc_info:
        require_admin(ctx_with(MemberRole.MEMBER))
    assert exc_info.value.kind == ErrorKind.FORBIDDEN


def test_require_owner_allows_owner():
    require_owner(ctx_with(MemberRole.OWNER))


@pytest.mark.parametrize("role", [MemberRole.ADMIN, MemberRole.MEMBER])
def test_require_owner_rejects_others(role):
    with pytest.raises(ForbiddenError):
        require_owner(ctx_with(role))


def test_require_role_accepts_any_iterable():
    require_role(ctx_with(MemberRole.MEMBER), {MemberRole.MEMBER})
    with pytest.raises(ForbiddenError):
        require_role(ctx_with(MemberRole.MEMBER), [])
