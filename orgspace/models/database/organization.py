"""Organization model - the tenant boundary."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel, Relationship

from orgspace.models.database.mixins.timestamp import TimestampMixin

if TYPE_CHECKING:
    from orgspace.models.database.membership import Membership
    from orgspace.models.database.usage import Usage


class Plan(str, Enum):
    """Billing plan; determines the monthly AI request limit."""
    FREE = "FREE"
    PRO = "PRO"


class OrganizationBase(SQLModel):
    """Shared fields for Organization model."""
    name: str = Field(max_length=255, index=True, description="Workspace display name")
    plan: Plan = Field(default=Plan.FREE, description="Billing plan")


class Organization(OrganizationBase, TimestampMixin, table=True):
    """Organization entity. Owns its Usage row and Memberships."""
    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Relationships
    memberships: list["Membership"] = Relationship(
        back_populates="organization",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    usage: Optional["Usage"] = Relationship(
        back_populates="organization",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},  # One-to-one
    )


class OrganizationCreate(SQLModel):
    """Onboarding payload. Name is validated by the domain layer."""
    name: str


class OrganizationRead(OrganizationBase):
    """Data returned when reading an Organization."""
    id: UUID
    created_at: datetime
    updated_at: datetime


class OrganizationSelect(SQLModel):
    """Payload for choosing the active organization."""
    organization_id: UUID
