import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from orgspace.core.config import settings
from orgspace.core.database import get_db
from orgspace.middleware.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
@limiter.exempt
async def health_check(db: Session = Depends(get_db)):
    """
    Readiness check: application version plus a database round trip.

    Answers 200 even when the database is down; `status` turns "degraded"
    and `checks.database` carries the error class.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error("Health check database probe failed: %s", e)
        db_status = f"error: {type(e).__name__}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": db_status,
            "dialect": db.get_bind().dialect.name,
        },
    }


@router.get("/healthz")
@limiter.exempt
async def healthz():
    """Liveness probe (no database load)."""
    return {"status": "healthy"}
