"""AIRequest model - append-only record of one metered generation call."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from orgspace.models.database.types import UTCDateTime, utcnow


class AIRequest(SQLModel, table=True):
    """Metered generation call. Never updated or deleted."""
    __tablename__ = "ai_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    feature: str = Field(max_length=100, index=True, description="Feature tag, e.g. 'project_report'")
    model: str = Field(max_length=255)
    tokens_in: int = Field(default=0, ge=0)
    tokens_out: int = Field(default=0, ge=0)

    # Immutable timestamp (no updated_at - append-only)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False, index=True)


class AIRequestRead(SQLModel):
    """Data returned when reading an AIRequest."""
    id: UUID
    model: str
    tokens_in: int
    tokens_out: int
    created_at: datetime
