"""Tests for tenant-scoped projects with soft deletion."""

import pytest
from uuid import uuid4

from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    ErrorKind,
    ForbiddenError,
)
from orgspace.domain.project_operations import ProjectOperations
from orgspace.models.database import AuditAction, MemberRole
from orgspace.models.database.project import Project


@pytest.fixture
def admin_ctx(organization, make_user, add_member, make_ctx):
    admin = make_user(name="Ada Admin")
    add_member(organization, admin, MemberRole.ADMIN)
    return make_ctx(admin, organization)


@pytest.fixture
def member_ctx(organization, make_user, add_member, make_ctx):
    member = make_user(name="Max Member")
    add_member(organization, member, MemberRole.MEMBER)
    return make_ctx(member, organization)


@pytest.fixture
def other_ctx(make_user, make_org, make_ctx):
    other_owner = make_user()
    other_org = make_org(other_owner, name="Initech")
    return make_ctx(other_owner, other_org)


def project_audits(session, organization_id):
    return [
        entry for entry in AuditLogOperations.list_for_organization(session, organization_id)
        if entry.action.startswith("project.")
    ]


# ============================================================================
# create
# ============================================================================

def test_create_trims_and_audits(db_session, admin_ctx):
    project = ProjectOperations.create(db_session, admin_ctx, "  Launch  ", "  Ship v2  ")

    assert project.name == "Launch"
    assert project.description == "Ship v2"
    assert project.organization_id == admin_ctx.org_id
    assert project.deleted_at is None

    audits = project_audits(db_session, admin_ctx.org_id)
    assert len(audits) == 1
    assert audits[0].action == AuditAction.PROJECT_CREATE.value
    assert audits[0].target_type == "Project"
    assert audits[0].target_id == str(project.id)
    assert audits[0].actor_user_id == admin_ctx.user_id
    assert audits[0].meta == {"name": "Launch"}


def test_create_empty_description_becomes_none(db_session, owner_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Roadmap", "   ")
    assert project.description is None


@pytest.mark.parametrize("name,description", [
    ("", None),
    ("a", None),
    (" b ", None),
    ("x" * 121, None),
    ("Valid name", "d" * 1001),
])
def test_create_rejects_invalid_input(db_session, owner_ctx, name, description):
    with pytest.raises(DomainValidationError):
        ProjectOperations.create(db_session, owner_ctx, name, description)

    assert ProjectOperations.list(db_session, owner_ctx.org_id) == []


def test_create_accepts_boundary_lengths(db_session, owner_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "x" * 120, "d" * 1000)
    assert len(project.name) == 120
    assert len(project.description) == 1000


def test_member_cannot_create(db_session, member_ctx):
    with pytest.raises(ForbiddenError) as exc_info:
        ProjectOperations.create(db_session, member_ctx, "Sneaky")

    assert exc_info.value.kind == ErrorKind.FORBIDDEN
    assert ProjectOperations.list(db_session, member_ctx.org_id) == []
    assert project_audits(db_session, member_ctx.org_id) == []


def test_member_forbidden_even_with_invalid_input(db_session, member_ctx):
    with pytest.raises(ForbiddenError):
        ProjectOperations.create(db_session, member_ctx, "")


# ============================================================================
# list / get_active
# ============================================================================

def test_list_is_scoped_to_organization(db_session, owner_ctx, other_ctx):
    ours = ProjectOperations.create(db_session, owner_ctx, "Ours")
    ProjectOperations.create(db_session, other_ctx, "Theirs")

    projects = ProjectOperations.list(db_session, owner_ctx.org_id)

    assert [p.id for p in projects] == [ours.id]


def test_get_active_hides_foreign_project(db_session, owner_ctx, other_ctx):
    theirs = ProjectOperations.create(db_session, other_ctx, "Theirs")

    assert ProjectOperations.get_active(db_session, owner_ctx.org_id, theirs.id) is None
    assert ProjectOperations.get_active(db_session, other_ctx.org_id, theirs.id).id == theirs.id


# ============================================================================
# update
# ============================================================================

def test_update_replaces_fields_and_audits(db_session, owner_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Draft", "old")

    updated = ProjectOperations.update(db_session, owner_ctx, project.id, "Final", None)

    assert updated.name == "Final"
    assert updated.description is None
    actions = [a.action for a in project_audits(db_session, owner_ctx.org_id)]
    assert sorted(actions) == sorted([AuditAction.PROJECT_CREATE.value, AuditAction.PROJECT_UPDATE.value])


def test_update_foreign_project_is_not_found(db_session, owner_ctx, other_ctx):
    theirs = ProjectOperations.create(db_session, other_ctx, "Theirs")

    with pytest.raises(EntityNotFoundError) as exc_info:
        ProjectOperations.update(db_session, owner_ctx, theirs.id, "Hijacked")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert db_session.get(Project, theirs.id).name == "Theirs"


def test_update_unknown_project_is_not_found(db_session, owner_ctx):
    with pytest.raises(EntityNotFoundError):
        ProjectOperations.update(db_session, owner_ctx, uuid4(), "Nothing")


def test_member_cannot_update(db_session, owner_ctx, member_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Stable")

    with pytest.raises(ForbiddenError):
        ProjectOperations.update(db_session, member_ctx, project.id, "Changed")

    assert db_session.get(Project, project.id).name == "Stable"


# ============================================================================
# soft_delete
# ============================================================================

def test_soft_delete_hides_project_but_keeps_row(db_session, owner_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Temp")

    ProjectOperations.soft_delete(db_session, owner_ctx, project.id)

    assert ProjectOperations.list(db_session, owner_ctx.org_id) == []
    assert ProjectOperations.get_active(db_session, owner_ctx.org_id, project.id) is None
    row = db_session.get(Project, project.id)
    assert row is not None
    assert row.deleted_at is not None

    delete_audits = [
        a for a in project_audits(db_session, owner_ctx.org_id)
        if a.action == AuditAction.PROJECT_DELETE.value
    ]
    assert len(delete_audits) == 1
    assert delete_audits[0].meta == {"name": "Temp"}


def test_mutating_deleted_project_is_not_found(db_session, owner_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Gone")
    ProjectOperations.soft_delete(db_session, owner_ctx, project.id)

    with pytest.raises(EntityNotFoundError):
        ProjectOperations.update(db_session, owner_ctx, project.id, "Back")
    with pytest.raises(EntityNotFoundError):
        ProjectOperations.soft_delete(db_session, owner_ctx, project.id)


def test_member_cannot_delete(db_session, owner_ctx, member_ctx):
    project = ProjectOperations.create(db_session, owner_ctx, "Keep")

    with pytest.raises(ForbiddenError):
        ProjectOperations.soft_delete(db_session, member_ctx, project.id)

    assert ProjectOperations.get_active(db_session, owner_ctx.org_id, project.id) is not None


def test_delete_foreign_project_is_not_found(db_session, owner_ctx, other_ctx):
    theirs = ProjectOperations.create(db_session, other_ctx, "Theirs")

    with pytest.raises(EntityNotFoundError):
        ProjectOperations.soft_delete(db_session, owner_ctx, theirs.id)

    assert ProjectOperations.get_active(db_session, other_ctx.org_id, theirs.id) is not None
