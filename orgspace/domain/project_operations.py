"""Domain operations for Project entity.

Every query carries the organization filter. Missing, soft-deleted and
foreign projects all surface as the same EntityNotFoundError.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import Session, select

from orgspace.core.database import transaction
from orgspace.domain.audit_log_operations import AuditLogOperations
from orgspace.domain.exceptions import DomainValidationError, EntityNotFoundError
from orgspace.domain.rbac import require_admin
from orgspace.models.database.audit_log import AuditAction, AuditTargetType
from orgspace.models.database.project import Project
from orgspace.models.database.types import utcnow
from orgspace.models.dto.tenant import TenantContext

logger = logging.getLogger(__name__)

PROJECT_NAME_MIN_LENGTH = 2
PROJECT_NAME_MAX_LENGTH = 120
PROJECT_DESCRIPTION_MAX_LENGTH = 1000


def normalize_project_input(name: str, description: Optional[str]) -> Tuple[str, Optional[str]]:
    """Trim and validate; an empty description becomes None."""
    clean_name = (name or "").strip()
    if len(clean_name) < PROJECT_NAME_MIN_LENGTH:
        raise DomainValidationError(f"Project name must be at least {PROJECT_NAME_MIN_LENGTH} characters")
    if len(clean_name) > PROJECT_NAME_MAX_LENGTH:
        raise DomainValidationError(f"Project name must be at most {PROJECT_NAME_MAX_LENGTH} characters")

    clean_description = (description or "").strip() or None
    if clean_description and len(clean_description) > PROJECT_DESCRIPTION_MAX_LENGTH:
        raise DomainValidationError(
            f"Project description must be at most {PROJECT_DESCRIPTION_MAX_LENGTH} characters"
        )
    return clean_name, clean_description


class ProjectOperations:
    """Tenant-scoped projects. Mutations require ADMIN or OWNER."""

    @staticmethod
    def list(session: Session, organization_id: UUID) -> List[Project]:
        """Non-deleted projects, newest first."""
        stmt = (
            select(Project)
            .where(Project.organization_id == organization_id)
            .where(Project.deleted_at.is_(None))
            .order_by(Project.created_at.desc())
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_active(session: Session, organization_id: UUID, project_id: UUID) -> Optional[Project]:
        """Project in this organization that is not soft-deleted, else None."""
        stmt = (
            select(Project)
            .where(Project.id == project_id)
            .where(Project.organization_id == organization_id)
            .where(Project.deleted_at.is_(None))
        )
        return session.exec(stmt).first()

    @staticmethod
    def create(
        session: Session,
        ctx: TenantContext,
        name: str,
        description: Optional[str] = None,
    ) -> Project:
        """Create a project in ctx's organization (audited)."""
        require_admin(ctx)
        clean_name, clean_description = normalize_project_input(name, description)

        with transaction(session):
            project = Project(
                organization_id=ctx.org_id,
                name=clean_name,
                description=clean_description,
            )
            session.add(project)
            session.flush()

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.PROJECT_CREATE,
                target_type=AuditTargetType.PROJECT,
                target_id=project.id,
                meta={"name": clean_name},
            )

        logger.info("Created project %s in org %s", project.id, ctx.org_id)
        return project

    @staticmethod
    def update(
        session: Session,
        ctx: TenantContext,
        project_id: UUID,
        name: str,
        description: Optional[str] = None,
    ) -> Project:
        """Replace name/description of an active project (audited)."""
        require_admin(ctx)
        clean_name, clean_description = normalize_project_input(name, description)

        with transaction(session):
            project = ProjectOperations._get_active_or_raise(session, ctx.org_id, project_id)
            project.name = clean_name
            project.description = clean_description
            project.updated_at = utcnow()
            session.add(project)
            session.flush()

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.PROJECT_UPDATE,
                target_type=AuditTargetType.PROJECT,
                target_id=project.id,
                meta={"name": clean_name},
            )

        return project

    @staticmethod
    def soft_delete(session: Session, ctx: TenantContext, project_id: UUID) -> Project:
        """Mark an active project deleted (audited). Row is kept for history."""
        require_admin(ctx)

        with transaction(session):
            project = ProjectOperations._get_active_or_raise(session, ctx.org_id, project_id)
            now = utcnow()
            project.deleted_at = now
            project.updated_at = now
            session.add(project)
            session.flush()

            AuditLogOperations.record(
                session,
                organization_id=ctx.org_id,
                actor_user_id=ctx.user_id,
                action=AuditAction.PROJECT_DELETE,
                target_type=AuditTargetType.PROJECT,
                target_id=project.id,
                meta={"name": project.name},
            )

        logger.info("Soft-deleted project %s in org %s", project.id, ctx.org_id)
        return project

    @staticmethod
    def _get_active_or_raise(session: Session, organization_id: UUID, project_id: UUID) -> Project:
        project = ProjectOperations.get_active(session, organization_id, project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project
