"""Domain operations for AI project status reports.

Generation pipeline:
    1. ADMIN/OWNER guard
    2. usage pre-check (fast rejection, no side effects)
    3. load the project (scoped to the org, not deleted)
    4. provider call, outside any transaction this module opens
    5. one transaction: re-lock usage, authoritative limit check, AIRequest
       row, usage increment, audit entry
    6. result with a usage snapshot

Step 5 re-checks the limit because step 4 may take seconds and other
requests can consume the last slot meanwhile.

Report history is read back from the audit log; there is no report table.
"""

import logging
import math
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlmodel import Session, select

from orgspace.core.database import transaction
from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import EntityNotFoundError
from orgspace.domain.project_operations import ProjectOperations
from orgspace.domain.project_report_prompts import (
    SYSTEM_INSTRUCTION,
    build_fallback_report,
    build_project_report_prompt,
)
from orgspace.domain.rbac import require_admin
from orgspace.domain.usage_operations import UsageOperations
from orgspace.models.database.ai_request import AIRequest
from orgspace.models.database.audit_log import AuditAction, AuditLog, AuditTargetType
from orgspace.models.database.user import User
from orgspace.models.dto.project_report import (
    ProjectReportResult,
    ReportHistoryItem,
    UsageSnapshot,
)
from orgspace.models.dto.tenant import TenantContext
from orgspace.services.llm.clients.base import BaseLLMClient
from orgspace.services.llm.provider import generate_ai_text

logger = logging.getLogger(__name__)

PROJECT_REPORT_FEATURE = "project_report"
DEFAULT_HISTORY_LIMIT = 10

UNKNOWN_PROJECT = "Unknown project"
UNKNOWN_MODEL = "unknown"
UNKNOWN_USER = "Unknown user"


def estimate_tokens(text: str) -> int:
    """Rough token count (~4 characters per token), at least 1."""
    return max(1, math.ceil(len(text or "") / 4))


def _decode_history_entry(entry: AuditLog, actor: Optional[User]) -> Optional[ReportHistoryItem]:
    """Audit row -> history item, or None when the metadata has no text output."""
    meta: Any = entry.meta
    if not isinstance(meta, dict):
        return None
    output = meta.get("output")
    if not isinstance(output, str):
        return None

    project_id = meta.get("projectId")
    project_name = meta.get("projectName")
    model = meta.get("model")
    actor_name = None
    if actor is not None:
        actor_name = actor.name or actor.email

    return ReportHistoryItem(
        id=entry.id,
        project_id=project_id if isinstance(project_id, str) else (entry.target_id or ""),
        project_name=project_name if isinstance(project_name, str) else UNKNOWN_PROJECT,
        model=model if isinstance(model, str) else UNKNOWN_MODEL,
        output=output,
        created_at=entry.created_at,
        actor_name=actor_name or UNKNOWN_USER,
    )


class ProjectReportOperations:
    """AI project report generation and history."""

    @staticmethod
    async def generate(
        session: Session,
        ctx: TenantContext,
        project_id: UUID,
        provider: Optional[BaseLLMClient] = None,
        now: Optional[datetime] = None,
    ) -> ProjectReportResult:
        """
        Generate a status report for one project and meter it.

        Args:
            session: Unit of work. Should have no open transaction so the
                usage row is not locked across the provider call.
            ctx: Resolved tenant context
            project_id: Project to report on
            provider: Explicit LLM client (defaults to configured provider/fallback)
            now: Clock override for usage windows

        Raises:
            ForbiddenError: caller is MEMBER
            UsageLimitExceededError: quota exhausted (pre-check or final check)
            EntityNotFoundError: project missing, deleted or foreign
            AIProviderError: provider failed; nothing is recorded
        """
        require_admin(ctx)

        UsageOperations.assert_within_limit(session, ctx.org_id, ctx.org.plan, now)

        with transaction(session):
            project = ProjectOperations.get_active(session, ctx.org_id, project_id)
            if project is None:
                raise EntityNotFoundError("Project", project_id)

        prompt = build_project_report_prompt(
            project.name, project.description, project.created_at, project.updated_at
        )
        fallback = build_fallback_report(project.name, project.description, project.updated_at)

        generation = await generate_ai_text(
            prompt=prompt,
            system_instruction=SYSTEM_INSTRUCTION,
            fallback_text=fallback,
            client=provider,
        )

        output = generation.text
        tokens_in = generation.tokens_in
        if tokens_in is None:
            tokens_in = estimate_tokens(f"{project.name}\n{project.description or ''}")
        tokens_out = generation.tokens_out
        if tokens_out is None:
            tokens_out = estimate_tokens(output)

        with transaction(session):
            # Locks usage, rolls over, re-checks the limit, then increments
            summary = UsageOperations.consume(
                session,
                ctx.org_id,
                plan=ctx.org.plan,
                tokens=tokens_in + tokens_out,
                now=now,
            )

            ai_request = AIRequest(
                organization_id=ctx.org_id,
                user_id=ctx.user_id,
                feature=PROJECT_REPORT_FEATURE,
                model=generation.model,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
            )
            session.add(ai_request)
            session.flush()

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.AI_PROJECT_REPORT_GENERATE,
                target_type=AuditTargetType.PROJECT,
                target_id=project.id,
                meta={
                    "projectId": str(project.id),
                    "projectName": project.name,
                    "model": generation.model,
                    "aiRequestId": str(ai_request.id),
                    "tokensIn": tokens_in,
                    "tokensOut": tokens_out,
                    "output": output,
                },
            )

        logger.info(
            "Project report generated: org=%s project=%s model=%s tokens=%d/%d",
            ctx.org_id, project.id, generation.model, tokens_in, tokens_out,
        )

        return ProjectReportResult(
            project_id=project.id,
            project_name=project.name,
            output=output,
            model=generation.model,
            ai_request_id=ai_request.id,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            usage=UsageSnapshot(
                ai_requests_count=summary.used,
                tokens_used=summary.tokens_used,
                period_start=summary.period_start,
                period_end=summary.period_end,
            ),
        )

    @staticmethod
    def list_history(
        session: Session,
        organization_id: UUID,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> List[ReportHistoryItem]:
        """
        Most recent report generations for an organization, newest first.

        Takes the `limit` most recent audit rows, then drops rows whose
        metadata carries no string output (so fewer than `limit` may return).
        """
        rows = session.exec(
            select(AuditLog, User)
            .join(User, User.id == AuditLog.actor_user_id, isouter=True)
            .where(AuditLog.organization_id == organization_id)
            .where(AuditLog.action == AuditAction.AI_PROJECT_REPORT_GENERATE.value)
            .where(AuditLog.target_type == AuditTargetType.PROJECT.value)
            .order_by(AuditLog.created_at.desc())
            .limit(max(0, limit))
        ).all()

        items = []
        for entry, actor in rows:
            item = _decode_history_entry(entry, actor)
            if item is None:
                logger.debug("Skipping report audit entry %s with malformed metadata", entry.id)
                continue
            items.append(item)
        return items
