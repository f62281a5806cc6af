"""DTOs for AI project report generation and history."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────
# Request DTOs
# ─────────────────────────────────────────────────────────────


class ProjectReportRequest(BaseModel):
    """Request to generate a status report for a project."""

    project_id: UUID = Field(description="Project to report on")


# ─────────────────────────────────────────────────────────────
# Response DTOs
# ─────────────────────────────────────────────────────────────


class UsageSnapshot(BaseModel):
    """Usage counters right after the metered request was recorded."""

    ai_requests_count: int
    tokens_used: int
    period_start: datetime
    period_end: datetime


class ProjectReportResult(BaseModel):
    """Outcome of one successful report generation."""

    project_id: UUID
    project_name: str
    output: str
    model: str
    ai_request_id: UUID
    tokens_in: int
    tokens_out: int
    usage: UsageSnapshot


class ReportHistoryItem(BaseModel):
    """One past report, decoded from its audit log entry."""

    id: UUID
    project_id: str
    project_name: str
    model: str
    output: str
    created_at: datetime
    actor_name: str
