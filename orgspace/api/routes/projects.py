"""Projects API endpoints.

Pattern: Async routes + Sync domain operations.
Every query is scoped to the active organization; missing, deleted and
foreign projects all answer 404.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from orgspace.api.deps import get_tenant_context, require_admin_context
from orgspace.core.database import get_db
from orgspace.domain.project_operations import ProjectOperations
from orgspace.models.database.project import ProjectCreate, ProjectRead, ProjectUpdate
from orgspace.models.dto.tenant import TenantContext

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectRead], summary="List projects")
async def list_projects(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> List[ProjectRead]:
    """Active projects of the current organization, newest first."""
    projects = ProjectOperations.list(db, ctx.org_id)
    return [ProjectRead.model_validate(project) for project in projects]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project"
)
async def create_project(
    data: ProjectCreate,
    ctx: TenantContext = Depends(require_admin_context),
    db: Session = Depends(get_db),
) -> ProjectRead:
    """Create project. ADMIN/OWNER only. Name 2-120 chars, description up to 1000."""
    project = ProjectOperations.create(db, ctx, data.name, data.description)
    return ProjectRead.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update project")
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    ctx: TenantContext = Depends(require_admin_context),
    db: Session = Depends(get_db),
) -> ProjectRead:
    project = ProjectOperations.update(db, ctx, project_id, data.name, data.description)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project"
)
async def delete_project(
    project_id: UUID,
    ctx: TenantContext = Depends(require_admin_context),
    db: Session = Depends(get_db),
) -> None:
    """Soft delete. The project disappears from listings but stays in history."""
    ProjectOperations.soft_delete(db, ctx, project_id)
