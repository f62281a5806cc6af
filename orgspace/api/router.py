"""Main API router aggregation."""

from fastapi import APIRouter

from orgspace.api.routes import health, organizations, usage, projects, members, project_reports

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(organizations.router)
api_router.include_router(usage.router)
api_router.include_router(projects.router)
api_router.include_router(members.router)
api_router.include_router(project_reports.router)
