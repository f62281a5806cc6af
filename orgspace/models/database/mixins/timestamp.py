"""Timestamp mixin for created_at and updated_at fields."""

from datetime import datetime
from sqlmodel import Field, SQLModel

from orgspace.models.database.types import UTCDateTime, utcnow


class TimestampMixin(SQLModel):
    """Adds created_at and updated_at timestamps."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=UTCDateTime,
        description="When this record was created"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=UTCDateTime,
        sa_column_kwargs={"onupdate": utcnow},
        description="When this record was last updated"
    )
