"""Tests for user provisioning from identity claims."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from orgspace.domain.exceptions import DomainValidationError
from orgspace.domain.user_operations import UserOperations
from orgspace.models.database.user import User
from orgspace.models.dto.tenant import Principal


def test_upsert_creates_user(db_session):
    principal = Principal(auth_uid="auth_abc", email=" Jane@Example.com ", name="Jane")

    user = UserOperations.upsert_from_principal(db_session, principal)

    assert user.id is not None
    assert user.auth_uid == "auth_abc"
    assert user.email == "jane@example.com"
    assert user.name == "Jane"


def test_upsert_refreshes_profile_fields(db_session):
    first = UserOperations.upsert_from_principal(
        db_session, Principal(auth_uid="auth_abc", email="jane@example.com", name="Jane")
    )
    second = UserOperations.upsert_from_principal(
        db_session,
        Principal(auth_uid="auth_abc", email="jane@new.example.com", name="Jane D", image_url="https://img/1"),
    )

    assert second.id == first.id
    assert second.email == "jane@new.example.com"
    assert second.name == "Jane D"
    assert second.image_url == "https://img/1"


@pytest.mark.parametrize("email", [None, "", "   "])
def test_upsert_requires_email(db_session, email):
    with pytest.raises(DomainValidationError):
        UserOperations.upsert_from_principal(db_session, Principal(auth_uid="auth_x", email=email))


def test_get_by_email_is_case_insensitive(db_session, make_user):
    user = make_user(email="Mixed.Case@Example.com")

    assert UserOperations.get_by_email(db_session, "mixed.case@example.com").id == user.id
    assert UserOperations.get_by_email(db_session, "  MIXED.CASE@EXAMPLE.COM ").id == user.id
    assert UserOperations.get_by_email(db_session, "other@example.com") is None
    assert UserOperations.get_by_email(db_session, "  ") is None


def test_upsert_rejects_email_owned_by_another_identity(db_session):
    UserOperations.upsert_from_principal(db_session, Principal(auth_uid="a", email="Dup@Example.com"))

    with pytest.raises(DomainValidationError):
        UserOperations.upsert_from_principal(db_session, Principal(auth_uid="b", email="dup@example.com"))

    users = db_session.exec(select(User)).all()
    assert [u.auth_uid for u in users] == ["a"]
    assert users[0].email == "dup@example.com"


def test_upsert_rejects_email_change_onto_another_user(db_session):
    UserOperations.upsert_from_principal(db_session, Principal(auth_uid="a", email="ann@example.com"))
    UserOperations.upsert_from_principal(db_session, Principal(auth_uid="b", email="bob@example.com"))

    with pytest.raises(DomainValidationError):
        UserOperations.upsert_from_principal(db_session, Principal(auth_uid="b", email="ANN@example.com"))

    assert UserOperations.get_by_auth_uid(db_session, "b").email == "bob@example.com"


def test_email_index_rejects_case_variant_duplicate(db_session, make_user):
    """Writes that bypass the upsert still cannot duplicate an email."""
    make_user(email="same@example.com")

    with pytest.raises(IntegrityError):
        make_user(email="SAME@example.com")
