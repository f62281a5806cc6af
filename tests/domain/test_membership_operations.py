"""Tests for membership management and the last-owner invariant."""

import pytest
from uuid import uuid4

from sqlmodel import select

from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import (
    AlreadyMemberError,
    DomainValidationError,
    EntityNotFoundError,
    ErrorKind,
    ForbiddenError,
    LastOwnerError,
    UserNotFoundError,
)
from orgspace.domain.membership_operations import MembershipOperations
from orgspace.models.database import AuditAction, Membership, MemberRole


def owner_count(session, organization_id) -> int:
    return len(session.exec(
        select(Membership)
        .where(Membership.organization_id == organization_id)
        .where(Membership.role == MemberRole.OWNER)
    ).all())


def membership_audits(session, organization_id):
    return [
        entry for entry in AuditLogOperations.list_for_organization(session, organization_id)
        if entry.action.startswith("membership.")
    ]


def owner_membership(session, organization_id, user_id) -> Membership:
    return session.exec(
        select(Membership)
        .where(Membership.organization_id == organization_id)
        .where(Membership.user_id == user_id)
    ).one()


# ============================================================================
# list
# ============================================================================

def test_list_joins_user_fields(db_session, organization, owner, make_user, add_member):
    member = make_user(email="mia@example.com", name="Mia")
    add_member(organization, member, MemberRole.MEMBER)

    members = MembershipOperations.list(db_session, organization.id)

    by_user = {m.user_id: m for m in members}
    assert set(by_user) == {owner.id, member.id}
    assert by_user[member.id].email == "mia@example.com"
    assert by_user[member.id].name == "Mia"
    assert by_user[member.id].role == MemberRole.MEMBER
    assert by_user[owner.id].role == MemberRole.OWNER


def test_list_excludes_other_organizations(db_session, organization, make_user, make_org):
    stranger = make_user()
    make_org(stranger, name="Elsewhere")

    members = MembershipOperations.list(db_session, organization.id)

    assert stranger.id not in {m.user_id for m in members}


# ============================================================================
# add_by_identifier
# ============================================================================

def test_add_by_identifier_normalizes_email(db_session, owner_ctx, make_user):
    user = make_user(email="new.person@example.com")

    membership = MembershipOperations.add_by_identifier(
        db_session, owner_ctx, "  New.Person@Example.COM ", MemberRole.ADMIN
    )

    assert membership.user_id == user.id
    assert membership.organization_id == owner_ctx.org_id
    assert membership.role == MemberRole.ADMIN

    audits = membership_audits(db_session, owner_ctx.org_id)
    assert len(audits) == 1
    assert audits[0].action == AuditAction.MEMBERSHIP_ADD.value
    assert audits[0].actor_user_id == owner_ctx.user_id
    assert audits[0].meta == {
        "userId": str(user.id),
        "role": "ADMIN",
        "email": "new.person@example.com",
    }


def test_add_by_identifier_defaults_to_member(db_session, owner_ctx, make_user):
    make_user(email="plain@example.com")

    membership = MembershipOperations.add_by_identifier(db_session, owner_ctx, "plain@example.com")

    assert membership.role == MemberRole.MEMBER


def test_add_by_identifier_unknown_user(db_session, owner_ctx):
    with pytest.raises(UserNotFoundError) as exc_info:
        MembershipOperations.add_by_identifier(db_session, owner_ctx, "ghost@example.com")

    assert exc_info.value.kind == ErrorKind.USER_NOT_FOUND
    assert membership_audits(db_session, owner_ctx.org_id) == []


def test_add_by_identifier_twice_is_already_member(db_session, owner_ctx, make_user):
    make_user(email="dup@example.com")
    MembershipOperations.add_by_identifier(db_session, owner_ctx, "dup@example.com")

    with pytest.raises(AlreadyMemberError) as exc_info:
        MembershipOperations.add_by_identifier(db_session, owner_ctx, "DUP@example.com")

    assert exc_info.value.kind == ErrorKind.ALREADY_MEMBER
    assert len(membership_audits(db_session, owner_ctx.org_id)) == 1


def test_add_by_identifier_rejects_empty_identifier(db_session, owner_ctx):
    with pytest.raises(DomainValidationError):
        MembershipOperations.add_by_identifier(db_session, owner_ctx, "   ")


@pytest.mark.parametrize("role", [MemberRole.ADMIN, MemberRole.MEMBER])
def test_add_by_identifier_requires_owner(db_session, organization, make_user, add_member, make_ctx, role):
    caller = make_user()
    add_member(organization, caller, role)
    target = make_user(email="target@example.com")
    ctx = make_ctx(caller, organization)

    with pytest.raises(ForbiddenError):
        MembershipOperations.add_by_identifier(db_session, ctx, "target@example.com")

    member_ids = {m.user_id for m in MembershipOperations.list(db_session, organization.id)}
    assert target.id not in member_ids
    assert membership_audits(db_session, organization.id) == []


def test_add_by_identifier_guard_runs_before_validation(db_session, organization, make_user, add_member, make_ctx):
    """A MEMBER learns nothing about input validity."""
    caller = make_user()
    add_member(organization, caller, MemberRole.MEMBER)
    ctx = make_ctx(caller, organization)

    with pytest.raises(ForbiddenError):
        MembershipOperations.add_by_identifier(db_session, ctx, "")


# ============================================================================
# change_role
# ============================================================================

def test_demoting_only_owner_fails(db_session, owner_ctx, owner):
    membership = owner_membership(db_session, owner_ctx.org_id, owner.id)

    with pytest.raises(LastOwnerError) as exc_info:
        MembershipOperations.change_role(db_session, owner_ctx, membership.id, MemberRole.ADMIN)

    assert exc_info.value.kind == ErrorKind.LAST_OWNER
    assert owner_count(db_session, owner_ctx.org_id) == 1
    assert membership_audits(db_session, owner_ctx.org_id) == []


def test_demoting_one_of_two_owners_succeeds(db_session, organization, owner_ctx, make_user, add_member):
    co_owner = make_user()
    co_membership = add_member(organization, co_owner, MemberRole.OWNER)

    updated = MembershipOperations.change_role(db_session, owner_ctx, co_membership.id, MemberRole.ADMIN)

    assert updated.role == MemberRole.ADMIN
    assert owner_count(db_session, organization.id) == 1

    audits = membership_audits(db_session, organization.id)
    assert len(audits) == 1
    assert audits[0].action == AuditAction.MEMBERSHIP_ROLE_UPDATE.value
    assert audits[0].target_id == str(co_membership.id)
    assert audits[0].meta == {
        "userId": str(co_owner.id),
        "fromRole": "OWNER",
        "toRole": "ADMIN",
    }


def test_then_demoting_remaining_owner_fails(db_session, organization, owner, owner_ctx, make_user, add_member):
    co_membership = add_member(organization, make_user(), MemberRole.OWNER)
    MembershipOperations.change_role(db_session, owner_ctx, co_membership.id, MemberRole.ADMIN)

    own = owner_membership(db_session, organization.id, owner.id)
    with pytest.raises(LastOwnerError):
        MembershipOperations.change_role(db_session, owner_ctx, own.id, MemberRole.MEMBER)

    assert owner_count(db_session, organization.id) == 1


def test_change_role_to_same_role_is_noop(db_session, organization, owner_ctx, make_user, add_member):
    membership = add_member(organization, make_user(), MemberRole.MEMBER)

    result = MembershipOperations.change_role(db_session, owner_ctx, membership.id, MemberRole.MEMBER)

    assert result.role == MemberRole.MEMBER
    assert membership_audits(db_session, organization.id) == []


def test_change_role_promotes_member(db_session, organization, owner_ctx, make_user, add_member):
    membership = add_member(organization, make_user(), MemberRole.MEMBER)

    result = MembershipOperations.change_role(db_session, owner_ctx, membership.id, "OWNER")

    assert result.role == MemberRole.OWNER
    assert owner_count(db_session, organization.id) == 2


def test_change_role_rejects_unknown_role(db_session, organization, owner_ctx, make_user, add_member):
    membership = add_member(organization, make_user(), MemberRole.MEMBER)

    with pytest.raises(DomainValidationError):
        MembershipOperations.change_role(db_session, owner_ctx, membership.id, "SUPERUSER")


def test_change_role_in_other_org_is_not_found(db_session, owner_ctx, make_user, make_org):
    outsider = make_user()
    other_org = make_org(outsider, name="Other Org")
    foreign = owner_membership(db_session, other_org.id, outsider.id)

    with pytest.raises(EntityNotFoundError) as exc_info:
        MembershipOperations.change_role(db_session, owner_ctx, foreign.id, MemberRole.MEMBER)

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert owner_count(db_session, other_org.id) == 1


def test_change_role_unknown_membership_is_not_found(db_session, owner_ctx):
    with pytest.raises(EntityNotFoundError):
        MembershipOperations.change_role(db_session, owner_ctx, uuid4(), MemberRole.ADMIN)


def test_admin_cannot_change_roles(db_session, organization, owner, make_user, add_member, make_ctx):
    admin = make_user()
    add_member(organization, admin, MemberRole.ADMIN)
    ctx = make_ctx(admin, organization)
    own = owner_membership(db_session, organization.id, owner.id)

    with pytest.raises(ForbiddenError):
        MembershipOperations.change_role(db_session, ctx, own.id, MemberRole.MEMBER)

    assert owner_count(db_session, organization.id) == 1


# ============================================================================
# remove
# ============================================================================

def test_remove_member(db_session, organization, owner_ctx, make_user, add_member):
    member = make_user()
    membership = add_member(organization, member, MemberRole.MEMBER)

    MembershipOperations.remove(db_session, owner_ctx, membership.id)

    assert member.id not in {m.user_id for m in MembershipOperations.list(db_session, organization.id)}
    audits = membership_audits(db_session, organization.id)
    assert [a.action for a in audits] == [AuditAction.MEMBERSHIP_REMOVE.value]
    assert audits[0].meta == {"userId": str(member.id), "role": "MEMBER"}


def test_remove_only_owner_fails(db_session, owner_ctx, owner):
    own = owner_membership(db_session, owner_ctx.org_id, owner.id)

    with pytest.raises(LastOwnerError):
        MembershipOperations.remove(db_session, owner_ctx, own.id)

    assert owner_count(db_session, owner_ctx.org_id) == 1


def test_remove_owner_when_another_owner_exists(db_session, organization, owner_ctx, make_user, add_member):
    co_membership = add_member(organization, make_user(), MemberRole.OWNER)

    MembershipOperations.remove(db_session, owner_ctx, co_membership.id)

    assert owner_count(db_session, organization.id) == 1


def test_remove_foreign_membership_is_not_found(db_session, owner_ctx, make_user, make_org):
    outsider = make_user()
    other_org = make_org(outsider, name="Other Org")
    foreign = owner_membership(db_session, other_org.id, outsider.id)

    with pytest.raises(EntityNotFoundError):
        MembershipOperations.remove(db_session, owner_ctx, foreign.id)
