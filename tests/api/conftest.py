"""
API test fixtures for FastAPI TestClient.

Provides:
- Test app with the production exception handlers (no lifespan, no rate limiter)
- get_db override bound to the per-test in-memory engine
- Real HS256 bearer tokens signed with a test secret
- `login` helper that sets the Authorization header and active org cookie

Requests open their own sessions on the shared StaticPool connection, so
test code must not hold an open transaction on `db_session` while it
calls the API (seed with the factories, which commit).
"""

import pytest
from contextlib import asynccontextmanager
from typing import Generator, Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session

from main import domain_validation_handler, workspace_error_handler
from orgspace.api.router import api_router
from orgspace.core.config import settings
from orgspace.core.database import get_db
from orgspace.domain.exceptions import DomainValidationError, WorkspaceError
from orgspace.models.database import Organization, User

TEST_JWT_SECRET = "test-secret-for-api-tests"


@asynccontextmanager
async def test_lifespan(app: FastAPI):
    """No migration check, no logging reconfiguration."""
    yield


def create_test_app() -> FastAPI:
    """App with the production router and exception handlers."""
    app = FastAPI(title="Orgspace Test API", lifespan=test_lifespan)
    app.add_exception_handler(WorkspaceError, workspace_error_handler)
    app.add_exception_handler(DomainValidationError, domain_validation_handler)
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


def make_token(user: User, **claims) -> str:
    payload = {"sub": user.auth_uid, "email": user.email, "name": user.name}
    payload.update(claims)
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def client(engine, monkeypatch) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(settings, "AUTH_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "AUTH_JWT_ALGORITHM", "HS256")
    monkeypatch.setattr(settings, "AUTH_JWT_AUDIENCE", "")
    monkeypatch.setattr(settings, "AUTH_JWT_ISSUER", "")
    monkeypatch.setattr(settings, "ACTIVE_ORG_COOKIE_SECURE", False)
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    monkeypatch.setattr(settings, "AI_FORCE_FALLBACK", True)

    TestSession = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app = create_test_app()
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client):
    """Authenticate the client as `user`, optionally with an active organization."""

    def _login(user: User, organization: Optional[Organization] = None) -> TestClient:
        client.headers["Authorization"] = f"Bearer {make_token(user)}"
        client.cookies.clear()
        if organization is not None:
            client.cookies.set(settings.ACTIVE_ORG_COOKIE, str(organization.id))
        return client

    return _login
