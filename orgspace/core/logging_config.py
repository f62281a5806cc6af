"""Custom logging configuration to reduce noise from health probes."""

import logging
from typing import Optional, Set

from orgspace.core.config import settings


class SuppressHealthCheckFilter(logging.Filter):
    """Filter that suppresses successful access logs for probe endpoints."""

    SUPPRESSED_PATTERNS: Set[str] = {
        "GET /health",
        "GET /api/health",
        "GET /api/healthz",
        "OPTIONS /api/",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False to suppress, True to keep."""
        status_code = self._extract_status_code(record)
        if status_code is not None and status_code != 200:
            return True

        message = record.getMessage()
        if status_code is None and " 200" not in message:
            return True

        for pattern in self.SUPPRESSED_PATTERNS:
            if pattern in message:
                return False

        return True

    @staticmethod
    def _extract_status_code(record: logging.LogRecord) -> Optional[int]:
        """Extract numeric status code from uvicorn access log record."""
        args = getattr(record, "args", None)
        if not args:
            return None

        try:
            return int(args[-1])
        except (TypeError, ValueError):
            return None


def configure_logging():
    """Configure application logging with probe suppression."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    access_logger = logging.getLogger("uvicorn.access")
    filter_instance = SuppressHealthCheckFilter()
    for handler in access_logger.handlers:
        handler.addFilter(filter_instance)

    # External library INFO/DEBUG is noise (keep WARNING+)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    # Domain + provider logging follows LOG_LEVEL
    logging.getLogger("orgspace.domain").setLevel(settings.LOG_LEVEL.upper())
    logging.getLogger("orgspace.services.llm").setLevel(settings.LOG_LEVEL.upper())

    logger.info(
        "Logging configured: %d probe patterns suppressed",
        len(SuppressHealthCheckFilter.SUPPRESSED_PATTERNS),
    )
