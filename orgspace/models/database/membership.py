"""Membership model - (user, organization) join with a role."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel, Relationship

from orgspace.models.database.mixins.timestamp import TimestampMixin
from orgspace.models.database.organization import Plan

if TYPE_CHECKING:
    from orgspace.models.database.organization import Organization
    from orgspace.models.database.user import User


class MemberRole(str, Enum):
    """Organization roles, most to least privileged."""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class Membership(TimestampMixin, table=True):
    """
    Membership entity.

    Unique per (user, organization). Every organization keeps at least one
    OWNER; the domain layer blocks changes that would remove the last one.
    """
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_membership_user_org"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    role: MemberRole = Field(default=MemberRole.MEMBER, index=True)

    # Relationships
    user: Optional["User"] = Relationship(back_populates="memberships")
    organization: Optional["Organization"] = Relationship(back_populates="memberships")


# DTOs

class MemberAdd(SQLModel):
    """Payload for adding an existing user to the organization."""
    email: str
    role: MemberRole = MemberRole.MEMBER


class MemberRoleUpdate(SQLModel):
    """Payload for changing a member's role."""
    role: MemberRole


class MembershipRead(SQLModel):
    """Membership row without user details."""
    id: UUID
    user_id: UUID
    organization_id: UUID
    role: MemberRole
    created_at: datetime


class MemberRead(SQLModel):
    """Membership joined with the member's display fields."""
    id: UUID
    user_id: UUID
    role: MemberRole
    created_at: datetime
    name: str | None = None
    email: str
    image_url: str | None = None


class UserOrganizationRead(SQLModel):
    """One of the current user's organizations (selection screen)."""
    organization_id: UUID
    name: str
    plan: Plan
    role: MemberRole
