"""Usage model - monthly AI quota counters, one row per organization."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel, Relationship

from orgspace.models.database.mixins.timestamp import TimestampMixin
from orgspace.models.database.organization import Plan
from orgspace.models.database.types import UTCDateTime

if TYPE_CHECKING:
    from orgspace.models.database.organization import Organization


class Usage(TimestampMixin, table=True):
    """
    Usage counters for the current billing window.

    The window is the half-open UTC calendar month [period_start, period_end).
    Counters are only valid while period_start <= now < period_end; stale rows
    are rolled forward (and reset) by UsageOperations before use.
    """
    __tablename__ = "usage"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", unique=True, index=True)
    period_start: datetime = Field(sa_type=UTCDateTime, nullable=False)
    period_end: datetime = Field(sa_type=UTCDateTime, nullable=False)
    ai_requests_count: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)

    # Relationships
    organization: Optional["Organization"] = Relationship(back_populates="usage")


# DTOs

class UsageSummary(SQLModel):
    """Counters for the current window measured against the plan limit."""
    plan: Plan
    period_start: datetime
    period_end: datetime
    used: int
    limit: int
    remaining: int
    is_over_limit: bool
    tokens_used: int


class UsageSimulate(SQLModel):
    """Payload for recording a simulated metered request."""
    tokens_used: int = Field(default=0, ge=0, le=1_000_000)
