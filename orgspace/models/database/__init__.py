"""Database models - import all models to ensure proper registration."""

from orgspace.models.database.user import User
from orgspace.models.database.organization import Organization, Plan
from orgspace.models.database.membership import Membership, MemberRole
from orgspace.models.database.project import Project
from orgspace.models.database.usage import Usage
from orgspace.models.database.ai_request import AIRequest
from orgspace.models.database.audit_log import AuditLog, AuditAction, AuditTargetType

__all__ = [
    "User",
    "Organization",
    "Plan",
    "Membership",
    "MemberRole",
    "Project",
    "Usage",
    "AIRequest",
    "AuditLog",
    "AuditAction",
    "AuditTargetType",
]
