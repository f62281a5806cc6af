"""Usage endpoints: current quota window and simulated metered requests."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from orgspace.api.deps import get_tenant_context, require_admin_context
from orgspace.core.database import get_db
from orgspace.domain.usage_operations import UsageOperations
from orgspace.models.database.usage import UsageSimulate, UsageSummary
from orgspace.models.dto.tenant import TenantContext

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=UsageSummary, summary="Current usage")
async def get_usage(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> UsageSummary:
    """Usage for the current UTC month (rolls the window over when stale)."""
    return UsageOperations.get_summary(db, ctx.org_id, ctx.org.plan)


@router.post("/simulate", response_model=UsageSummary, summary="Record a simulated AI request")
async def simulate_usage(
    data: UsageSimulate,
    ctx: TenantContext = Depends(require_admin_context),
    db: Session = Depends(get_db),
) -> UsageSummary:
    """
    Record one metered request with `tokens_used` tokens. ADMIN/OWNER only.

    429 when the monthly limit is already reached; nothing is recorded then.
    """
    return UsageOperations.consume(db, ctx.org_id, ctx.org.plan, tokens=data.tokens_used)
