"""
API tests for project CRUD.

Tests cover:
- Create/list/update/delete happy path
- Role gate (403 before body field validation, 422 for malformed JSON)
- Tenant isolation (foreign and deleted projects answer 404)
"""

import pytest
from uuid import uuid4

from orgspace.models.database import MemberRole


@pytest.fixture
def member(organization, make_user, add_member):
    user = make_user(name="Max Member")
    add_member(organization, user, MemberRole.MEMBER)
    return user


class TestProjectCrud:
    """Tests for /api/projects as OWNER."""

    def test_create_list_update_delete(self, login, owner, organization):
        client = login(owner, organization)

        created = client.post("/api/projects", json={"name": "Website", "description": "Relaunch"})
        assert created.status_code == 201
        project = created.json()
        assert project["organization_id"] == str(organization.id)

        listed = client.get("/api/projects")
        assert [p["id"] for p in listed.json()] == [project["id"]]

        updated = client.patch(f"/api/projects/{project['id']}", json={"name": "Website v2"})
        assert updated.status_code == 200
        assert updated.json()["name"] == "Website v2"
        assert updated.json()["description"] is None

        deleted = client.delete(f"/api/projects/{project['id']}")
        assert deleted.status_code == 204
        assert client.get("/api/projects").json() == []

        again = client.delete(f"/api/projects/{project['id']}")
        assert again.status_code == 404
        assert again.json()["code"] == "NOT_FOUND"

    def test_invalid_name_is_400(self, login, owner, organization):
        client = login(owner, organization)

        response = client.post("/api/projects", json={"name": "x"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_project_is_404(self, login, owner, organization):
        client = login(owner, organization)

        response = client.patch(f"/api/projects/{uuid4()}", json={"name": "Ghost"})

        assert response.status_code == 404


class TestProjectRoles:
    """MEMBER can read but not write."""

    def test_member_can_list(self, login, owner, organization, member):
        login(owner, organization).post("/api/projects", json={"name": "Shared"})

        client = login(member, organization)
        response = client.get("/api/projects")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Shared"]

    def test_member_create_is_forbidden(self, login, organization, member):
        client = login(member, organization)

        response = client.post("/api/projects", json={"name": "Nope"})

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_forbidden_before_body_validation(self, login, organization, member):
        client = login(member, organization)

        response = client.post("/api/projects", json={})

        assert response.status_code == 403

    def test_malformed_json_is_422_even_without_role(self, login, organization, member):
        client = login(member, organization)

        response = client.post(
            "/api/projects",
            content="{\"name\": ",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["detail"][0]["type"] == "json_invalid"


class TestProjectIsolation:
    """Projects of other organizations are invisible."""

    def test_foreign_project_is_404(self, login, owner, organization, make_user, make_org):
        outsider = make_user()
        other_org = make_org(outsider, name="Initech")
        theirs = login(outsider, other_org).post("/api/projects", json={"name": "Secret"}).json()

        client = login(owner, organization)

        assert client.get("/api/projects").json() == []
        assert client.patch(f"/api/projects/{theirs['id']}", json={"name": "Mine"}).status_code == 404
        assert client.delete(f"/api/projects/{theirs['id']}").status_code == 404

        still_there = login(outsider, other_org).get("/api/projects").json()
        assert [p["name"] for p in still_there] == ["Secret"]
