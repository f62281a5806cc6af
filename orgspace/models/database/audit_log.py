"""Audit log model - immutable trail of privileged mutations."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from orgspace.models.database.types import UTCDateTime, utcnow


class AuditAction(str, Enum):
    """Audit log action tags."""
    ORG_CREATE = "org.create"
    PROJECT_CREATE = "project.create"
    PROJECT_UPDATE = "project.update"
    PROJECT_DELETE = "project.delete"
    MEMBERSHIP_ADD = "membership.add"
    MEMBERSHIP_ROLE_UPDATE = "membership.role_update"
    MEMBERSHIP_REMOVE = "membership.remove"
    AI_PROJECT_REPORT_GENERATE = "ai.project_report.generate"


class AuditTargetType(str, Enum):
    """Kinds of records an audit entry can point at."""
    ORGANIZATION = "Organization"
    PROJECT = "Project"
    MEMBERSHIP = "Membership"


class AuditLog(SQLModel, table=True):
    """
    Append-only audit entry.

    action/target_type are stored as plain strings so new tags never need a
    migration. `meta` maps to the `metadata` column (the attribute name is
    reserved by SQLAlchemy).
    """
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    actor_user_id: UUID = Field(foreign_key="users.id", index=True)

    action: str = Field(max_length=100, index=True)
    target_type: str = Field(max_length=50, index=True)
    target_id: Optional[str] = Field(default=None, max_length=64, nullable=True, index=True)

    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )

    # Immutable timestamp (no updated_at - audit logs are append-only)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False, index=True)
