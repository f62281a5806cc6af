"""Active organization selection store (HTTP cookie).

The cookie is only a hint. It is validated against memberships on every
request by TenantOperations.resolve and never trusted on its own.
"""

from typing import Optional
from uuid import UUID

from fastapi import Request, Response

from orgspace.core.config import settings

ACTIVE_ORG_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def get_selected_org_id(request: Request) -> Optional[str]:
    """Raw selection hint for this request (read once, passed on unchanged)."""
    return request.cookies.get(settings.ACTIVE_ORG_COOKIE)


def set_active_org(response: Response, organization_id: UUID) -> None:
    response.set_cookie(
        key=settings.ACTIVE_ORG_COOKIE,
        value=str(organization_id),
        max_age=ACTIVE_ORG_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.ACTIVE_ORG_COOKIE_SECURE or settings.is_production,
        path="/",
    )


def clear_active_org(response: Response) -> None:
    response.delete_cookie(key=settings.ACTIVE_ORG_COOKIE, path="/")
