"""Domain operations for the audit log (append-only)."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlmodel import Session, select

from orgspace.models.database.audit_log import AuditAction, AuditLog, AuditTargetType


class AuditLogOperations:
    """Append and query audit entries. No commits; callers own the transaction."""

    @staticmethod
    def record(
        session: Session,
        organization_id: UUID,
        actor_user_id: UUID,
        action: AuditAction,
        target_type: AuditTargetType,
        target_id: Optional[UUID | str] = None,
        meta: Optional[dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> AuditLog:
        """Create audit log entry."""
        entry = AuditLog(
            organization_id=organization_id,
            actor_user_id=actor_user_id,
            action=action.value,
            target_type=target_type.value,
            target_id=str(target_id) if target_id is not None else None,
            meta=meta or {},
        )
        if created_at is not None:
            entry.created_at = created_at
        session.add(entry)
        session.flush()
        return entry

    @staticmethod
    def list_for_organization(
        session: Session,
        organization_id: UUID,
        action: Optional[AuditAction] = None,
        target_type: Optional[AuditTargetType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[AuditLog]:
        """Audit entries for one organization, newest first."""
        stmt = select(AuditLog).where(AuditLog.organization_id == organization_id)
        if action is not None:
            stmt = stmt.where(AuditLog.action == action.value)
        if target_type is not None:
            stmt = stmt.where(AuditLog.target_type == target_type.value)
        stmt = stmt.order_by(AuditLog.created_at.desc()).limit(limit).offset(offset)
        return list(session.exec(stmt).all())
