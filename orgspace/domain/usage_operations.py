"""Domain operations for AI usage metering.

Monthly quota of metered AI requests (plus token totals) per organization.
The window is the half-open UTC calendar month [period_start, period_end);
every read or increment first rolls a stale window forward and resets the
counters, inside the same transaction that needed fresh data.

The usage row is read with SELECT ... FOR UPDATE so rollover, the limit
check and the increment serialize per organization.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from sqlmodel import Session, select

from orgspace.core.database import transaction
from orgspace.domain.exceptions import UsageLimitExceededError
from orgspace.models.database.organization import Organization, Plan
from orgspace.models.database.types import as_utc, utcnow
from orgspace.models.database.usage import Usage, UsageSummary

logger = logging.getLogger(__name__)

PLAN_AI_REQUEST_LIMITS: dict[Plan, int] = {
    Plan.FREE: 25,
    Plan.PRO: 1000,
}


def month_period(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First instant of the UTC month containing `now`, and of the next month."""
    now = as_utc(now or utcnow())
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


def get_limit_for_plan(plan: Plan) -> int:
    return PLAN_AI_REQUEST_LIMITS[plan]


def is_period_stale(usage: Usage, now: datetime) -> bool:
    return as_utc(now) >= as_utc(usage.period_end)


class UsageOperations:
    """
    Usage metering. Static methods, sync session-based.

    Public methods wrap their work in `transaction(session)`: standalone
    callers get their own commit, callers already inside a transaction get
    a savepoint and keep control of the commit.
    """

    @staticmethod
    def create_for_organization(
        session: Session,
        organization_id: UUID,
        now: Optional[datetime] = None,
    ) -> Usage:
        """Create the usage row for a new organization (current month, zero counters)."""
        start, end = month_period(now)
        usage = Usage(
            organization_id=organization_id,
            period_start=start,
            period_end=end,
            ai_requests_count=0,
            tokens_used=0,
        )
        session.add(usage)
        session.flush()
        return usage

    @staticmethod
    def lock_current(
        session: Session,
        organization_id: UUID,
        now: Optional[datetime] = None,
    ) -> Usage:
        """
        Lock the organization's usage row and roll it forward if stale.

        Must run inside a transaction. A missing row is a storage
        inconsistency (created with the organization) and raises RuntimeError.
        """
        now = as_utc(now or utcnow())
        usage = session.exec(
            select(Usage)
            .where(Usage.organization_id == organization_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).one_or_none()
        if usage is None:
            raise RuntimeError(f"Usage row missing for organization {organization_id}")

        if is_period_stale(usage, now):
            start, end = month_period(now)
            logger.info(
                "Usage window rolled over for org %s: %s -> %s",
                organization_id, usage.period_start.isoformat(), start.isoformat(),
            )
            usage.period_start = start
            usage.period_end = end
            usage.ai_requests_count = 0
            usage.tokens_used = 0
            session.add(usage)
            session.flush()

        return usage

    @staticmethod
    def summarize(usage: Usage, plan: Plan) -> UsageSummary:
        """Measure a (fresh) usage row against the plan limit."""
        limit = get_limit_for_plan(plan)
        used = usage.ai_requests_count
        return UsageSummary(
            plan=plan,
            period_start=as_utc(usage.period_start),
            period_end=as_utc(usage.period_end),
            used=used,
            limit=limit,
            remaining=max(0, limit - used),
            is_over_limit=used >= limit,
            tokens_used=usage.tokens_used,
        )

    @staticmethod
    def get_summary(
        session: Session,
        organization_id: UUID,
        plan: Optional[Plan] = None,
        now: Optional[datetime] = None,
    ) -> UsageSummary:
        """
        Current-window summary. Rollover and read are one atomic unit.

        `plan` comes from the tenant context when available; otherwise it is
        loaded from the organization.
        """
        with transaction(session):
            if plan is None:
                plan = UsageOperations._load_plan(session, organization_id)
            usage = UsageOperations.lock_current(session, organization_id, now)
            return UsageOperations.summarize(usage, plan)

    @staticmethod
    def assert_within_limit(
        session: Session,
        organization_id: UUID,
        plan: Optional[Plan] = None,
        now: Optional[datetime] = None,
    ) -> UsageSummary:
        """Pre-check before a metered action. Raises UsageLimitExceededError at the limit."""
        summary = UsageOperations.get_summary(session, organization_id, plan, now)
        if summary.used >= summary.limit:
            raise UsageLimitExceededError(summary)
        return summary

    @staticmethod
    def increment(
        session: Session,
        organization_id: UUID,
        tokens: int = 0,
        now: Optional[datetime] = None,
    ) -> Usage:
        """
        Record one metered request plus `tokens` (negative values count as 0).

        Applies rollover first. Does not check the limit; pair with
        assert_within_limit, or use consume() for an atomic check+increment.
        """
        with transaction(session):
            usage = UsageOperations.lock_current(session, organization_id, now)
            UsageOperations._apply_increment(session, usage, tokens)
            return usage

    @staticmethod
    def consume(
        session: Session,
        organization_id: UUID,
        plan: Optional[Plan] = None,
        tokens: int = 0,
        now: Optional[datetime] = None,
    ) -> UsageSummary:
        """
        Check the limit and record one request under a single row lock.

        Concurrent callers cannot both take the last slot. On failure nothing
        is incremented.
        """
        with transaction(session):
            if plan is None:
                plan = UsageOperations._load_plan(session, organization_id)
            usage = UsageOperations.lock_current(session, organization_id, now)
            if usage.ai_requests_count >= get_limit_for_plan(plan):
                raise UsageLimitExceededError(UsageOperations.summarize(usage, plan))
            UsageOperations._apply_increment(session, usage, tokens)
            return UsageOperations.summarize(usage, plan)

    @staticmethod
    def _apply_increment(session: Session, usage: Usage, tokens: int) -> None:
        # Row is locked by lock_current, so a read-modify-write is safe here.
        usage.ai_requests_count += 1
        usage.tokens_used += max(0, tokens)
        session.add(usage)
        session.flush()

    @staticmethod
    def _load_plan(session: Session, organization_id: UUID) -> Plan:
        organization = session.get(Organization, organization_id)
        if organization is None:
            raise RuntimeError(f"Organization {organization_id} missing for usage lookup")
        return organization.plan
