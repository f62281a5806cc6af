"""DTOs for the resolved tenant context."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from orgspace.models.database.membership import MemberRole
from orgspace.models.database.organization import Plan


class OrgSummary(BaseModel):
    """Minimal organization data carried with the context (RBAC + usage limits)."""

    name: str
    plan: Plan

    model_config = {"frozen": True}


class TenantContext(BaseModel):
    """Validated (user, organization, role) triple for one request.

    Immutable: resolved once per request from the identity and the active
    organization selection, then passed to every service call.
    """

    user_id: UUID
    org_id: UUID
    role: MemberRole
    org: OrgSummary

    model_config = {"frozen": True}


class Principal(BaseModel):
    """Verified identity claims from the external identity provider."""

    auth_uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"frozen": True}


class OrgSelectionResult(BaseModel):
    """Outcome of a selection step: where the client should go next."""

    redirect_to: str
    organization_id: Optional[UUID] = None
