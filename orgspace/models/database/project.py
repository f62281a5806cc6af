"""Project model - tenant-scoped record with soft deletion."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Text
from sqlmodel import Field, SQLModel

from orgspace.models.database.mixins.timestamp import TimestampMixin
from orgspace.models.database.types import UTCDateTime


class ProjectBase(SQLModel):
    """Shared fields for Project model."""
    name: str = Field(max_length=120, description="Project name")
    description: str | None = Field(default=None, sa_type=Text, nullable=True, description="Optional description")


class Project(ProjectBase, TimestampMixin, table=True):
    """
    Project entity.

    Always read and written through an organization filter. deleted_at marks
    a soft delete: excluded from listings, kept for audit/history.
    """
    __tablename__ = "projects"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    deleted_at: datetime | None = Field(default=None, sa_type=UTCDateTime, nullable=True, index=True)


class ProjectCreate(SQLModel):
    """Create payload. Trimmed and length-checked by the domain layer."""
    name: str
    description: str | None = None


class ProjectUpdate(SQLModel):
    """Update payload (full replacement of name/description)."""
    name: str
    description: str | None = None


class ProjectRead(ProjectBase):
    """Data returned when reading a Project."""
    id: UUID
    organization_id: UUID
    created_at: datetime
    updated_at: datetime
