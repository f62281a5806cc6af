# Data Transfer Objects (DTOs)
# Request/response models that are not database tables

from orgspace.models.dto.tenant import OrgSelectionResult, OrgSummary, Principal, TenantContext
from orgspace.models.dto.project_report import (
    ProjectReportRequest,
    ProjectReportResult,
    ReportHistoryItem,
    UsageSnapshot,
)

__all__ = [
    "OrgSelectionResult",
    "OrgSummary",
    "Principal",
    "TenantContext",
    "ProjectReportRequest",
    "ProjectReportResult",
    "ReportHistoryItem",
    "UsageSnapshot",
]
