"""AI project report endpoints.

Generation is metered: each success consumes one AI request from the
organization's monthly quota.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from orgspace.api.deps import get_tenant_context, require_admin_context
from orgspace.core.database import get_db
from orgspace.domain.project_report_operations import (
    DEFAULT_HISTORY_LIMIT,
    ProjectReportOperations,
)
from orgspace.models.dto.project_report import (
    ProjectReportRequest,
    ProjectReportResult,
    ReportHistoryItem,
)
from orgspace.models.dto.tenant import TenantContext

router = APIRouter(prefix="/ai/project-report", tags=["ai"])


@router.post("", response_model=ProjectReportResult, summary="Generate project report")
async def generate_project_report(
    data: ProjectReportRequest,
    ctx: TenantContext = Depends(require_admin_context),
    db: Session = Depends(get_db),
) -> ProjectReportResult:
    """
    Generate a status report for a project. ADMIN/OWNER only.

    429 USAGE_LIMIT_EXCEEDED at quota, 404 for unknown projects,
    502 AI_PROVIDER_ERROR when the provider fails (nothing is metered).
    """
    return await ProjectReportOperations.generate(db, ctx, data.project_id)


@router.get("/history", response_model=List[ReportHistoryItem], summary="Report history")
async def list_project_report_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=100, description="Max entries to return"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> List[ReportHistoryItem]:
    return ProjectReportOperations.list_history(db, ctx.org_id, limit)
