"""Domain-layer exceptions.

These keep the domain layer free of HTTP awareness. Every user-facing
condition is a WorkspaceError carrying an ErrorKind; callers branch on
`exc.kind`, never on message text. The global exception handler in
main.py maps kinds to HTTP status codes.

Anything that is not a WorkspaceError or DomainValidationError (storage
failures, missing invariant rows) is a fault and propagates unmodified.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from orgspace.models.database.usage import UsageSummary


class ErrorKind(str, Enum):
    """Closed set of expected, user-facing failure kinds."""
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NO_ACTIVE_ORG = "NO_ACTIVE_ORG"
    STALE_ORG_SELECTION = "STALE_ORG_SELECTION"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    LAST_OWNER = "LAST_OWNER"
    USAGE_LIMIT_EXCEEDED = "USAGE_LIMIT_EXCEEDED"
    AI_PROVIDER_ERROR = "AI_PROVIDER_ERROR"


class WorkspaceError(Exception):
    """Base class for tagged, user-facing domain errors."""

    kind: ErrorKind

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.kind.value)


class UnauthenticatedError(WorkspaceError):
    """No resolvable identity. Recover via sign-in."""
    kind = ErrorKind.UNAUTHENTICATED


class NoActiveOrgError(WorkspaceError):
    """No organization selected. Recover via onboarding/selection."""
    kind = ErrorKind.NO_ACTIVE_ORG


class StaleOrgSelectionError(WorkspaceError):
    """Selected organization has no membership for this user (stale or forged)."""
    kind = ErrorKind.STALE_ORG_SELECTION


class ForbiddenError(WorkspaceError):
    """Role insufficient for the operation. Maps to HTTP 403."""
    kind = ErrorKind.FORBIDDEN


class EntityNotFoundError(WorkspaceError):
    """Entity missing, soft-deleted, or owned by another tenant. Maps to HTTP 404.

    The three cases look the same to callers.
    """
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        msg = f"{entity} {entity_id} not found" if entity_id else f"{entity} not found"
        super().__init__(msg)


class UserNotFoundError(WorkspaceError):
    """No existing user matches the identifier (users are never created implicitly)."""
    kind = ErrorKind.USER_NOT_FOUND


class AlreadyMemberError(WorkspaceError):
    """Membership for (user, organization) already exists."""
    kind = ErrorKind.ALREADY_MEMBER


class LastOwnerError(WorkspaceError):
    """Change would leave the organization without an OWNER."""
    kind = ErrorKind.LAST_OWNER


class UsageLimitExceededError(WorkspaceError):
    """Monthly AI request quota exhausted. Recoverable (next period or upgrade)."""
    kind = ErrorKind.USAGE_LIMIT_EXCEEDED

    def __init__(self, summary: Optional["UsageSummary"] = None):
        self.summary = summary
        super().__init__()


class AIProviderError(WorkspaceError):
    """External text generation failed. Wraps the underlying cause."""
    kind = ErrorKind.AI_PROVIDER_ERROR

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        msg = f"{ErrorKind.AI_PROVIDER_ERROR.value}:{cause}" if cause else None
        super().__init__(msg)


class DomainValidationError(Exception):
    """Input shape / business-rule validation failure. Maps to HTTP 400."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
