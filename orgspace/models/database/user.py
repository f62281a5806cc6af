"""User model - a person resolved from the external identity provider."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel, Relationship

from orgspace.models.database.mixins.timestamp import TimestampMixin

if TYPE_CHECKING:
    from orgspace.models.database.membership import Membership


class UserBase(SQLModel):
    """Shared fields for User model."""
    auth_uid: str = Field(unique=True, index=True, max_length=255, description="External identity key (JWT 'sub' claim)")
    email: str = Field(max_length=320, description="Email address, stored lower-cased")
    name: str | None = Field(default=None, max_length=255, nullable=True, description="Display name")
    image_url: str | None = Field(default=None, max_length=1024, nullable=True, description="Avatar URL")


class User(UserBase, TimestampMixin, table=True):
    """
    User entity. Created on first identity resolution, never deleted by the core.

    Email is unique ignoring case (`ux_users_email_lower`).
    """
    __tablename__ = "users"
    __table_args__ = (
        Index("ux_users_email_lower", text("lower(email)"), unique=True),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Relationships
    memberships: list["Membership"] = Relationship(back_populates="user")


class UserRead(UserBase):
    """Data returned when reading a User."""
    id: UUID
    created_at: datetime
    updated_at: datetime
