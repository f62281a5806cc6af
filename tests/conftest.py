"""
Pytest configuration and fixtures for testing.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the
single connection alive) with SAVEPOINT support, so nested transaction()
blocks behave as they do on PostgreSQL.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from uuid import uuid4
from typing import Optional

from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from orgspace.core.database import build_engine, enable_sqlite_savepoints, transaction

# Import all models to ensure SQLAlchemy relationships are configured
from orgspace.models.database import (
    Membership,
    MemberRole,
    Organization,
    Plan,
    User,
)
from orgspace.domain.organization_operations import OrganizationOperations
from orgspace.domain.tenant_operations import TenantOperations
from orgspace.models.dto.tenant import TenantContext


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        SQLModel.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """
    File-backed SQLite engine from build_engine, for tests where several
    sessions on separate connections and threads contend for the same rows.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'orgspace.db'}")
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        SQLModel.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture(name="db_session", scope="function")
def db_session_fixture(engine):
    """
    Provides a clean database session for each test.

    Same session options as SessionLocal. Rolled back and closed after the test.
    """
    session = Session(engine, expire_on_commit=False, autoflush=False)
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_user(db_session):
    """Factory: committed User with a unique auth_uid."""

    def _make_user(email: Optional[str] = None, name: Optional[str] = None) -> User:
        uid = uuid4().hex[:12]
        user = User(
            auth_uid=f"auth_{uid}",
            email=email or f"user-{uid}@example.com",
            name=name,
        )
        with transaction(db_session):
            db_session.add(user)
        return user

    return _make_user


@pytest.fixture
def make_org(db_session):
    """Factory: organization created through onboarding (OWNER + usage row)."""

    def _make_org(owner: User, name: str = "Acme Corp", plan: Plan = Plan.FREE, now=None) -> Organization:
        return OrganizationOperations.create_for_user(db_session, owner.id, name, plan=plan, now=now)

    return _make_org


@pytest.fixture
def add_member(db_session):
    """Factory: insert a membership directly (no RBAC, no audit)."""

    def _add_member(organization: Organization, user: User, role: MemberRole = MemberRole.MEMBER) -> Membership:
        membership = Membership(user_id=user.id, organization_id=organization.id, role=role)
        with transaction(db_session):
            db_session.add(membership)
        return membership

    return _add_member


@pytest.fixture
def make_ctx(db_session):
    """Factory: resolved TenantContext for (user, organization)."""

    def _make_ctx(user: User, organization: Organization) -> TenantContext:
        with transaction(db_session):
            return TenantOperations.resolve(db_session, user.id, str(organization.id))

    return _make_ctx


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com", name="Olivia Owner")


@pytest.fixture
def organization(make_org, owner):
    return make_org(owner)


@pytest.fixture
def owner_ctx(make_ctx, owner, organization):
    return make_ctx(owner, organization)


@pytest.fixture
def race():
    """
    Runner: `race(engine, worker)` calls `worker(session, barrier)` in
    parallel threads, each with its own session, and returns each
    thread's result or raised exception.
    """

    def _race(engine, worker, parties: int = 2) -> list:
        barrier = threading.Barrier(parties, timeout=10)

        def run():
            with Session(engine, expire_on_commit=False, autoflush=False) as session:
                return worker(session, barrier)

        with ThreadPoolExecutor(max_workers=parties) as pool:
            futures = [pool.submit(run) for _ in range(parties)]
            return [f.exception(timeout=30) or f.result() for f in futures]

    return _race
