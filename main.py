from contextlib import asynccontextmanager
import logging
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from orgspace.api.router import api_router
from orgspace.core.config import settings
from orgspace.core.database import verify_migrations
from orgspace.domain.exceptions import (
    DomainValidationError,
    ErrorKind,
    UsageLimitExceededError,
    WorkspaceError,
)
from orgspace.core.logging_config import configure_logging
from orgspace.middleware.rate_limit import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)

# Error kind -> HTTP status
ERROR_STATUS = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NO_ACTIVE_ORG: 409,
    ErrorKind.STALE_ORG_SELECTION: 409,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.ALREADY_MEMBER: 409,
    ErrorKind.LAST_OWNER: 409,
    ErrorKind.USAGE_LIMIT_EXCEEDED: 429,
    ErrorKind.AI_PROVIDER_ERROR: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler."""
    # Configure logging (reduce noise from probe endpoints)
    configure_logging()

    logger.info("FastAPI application starting up...")
    verify_migrations()

    if settings.AI_FORCE_FALLBACK:
        logger.info("AI fallback forced: reports use local template text")
    else:
        logger.info("AI provider: %s", settings.AI_PROVIDER)

    yield  # Application runs

    logger.info("FastAPI application shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Set up rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


def redirect_hint(kind: ErrorKind, request: Request) -> str | None:
    """Where the client should go to recover from a tenant-context gap."""
    if kind == ErrorKind.UNAUTHENTICATED:
        return_path = request.url.path
        if request.url.query:
            return_path = f"{return_path}?{request.url.query}"
        return f"{settings.SIGN_IN_PATH}?{urlencode({'redirect_url': return_path})}"
    if kind == ErrorKind.NO_ACTIVE_ORG:
        return f"{settings.API_PREFIX}/orgs/select/auto"
    if kind == ErrorKind.STALE_ORG_SELECTION:
        return f"{settings.API_PREFIX}/orgs/recover"
    return None


# Domain exception → HTTP response mapping
@app.exception_handler(WorkspaceError)
async def workspace_error_handler(request: Request, exc: WorkspaceError):
    content = {"code": exc.kind.value, "detail": str(exc)}

    redirect_to = redirect_hint(exc.kind, request)
    if redirect_to:
        content["redirect_to"] = redirect_to

    if isinstance(exc, UsageLimitExceededError) and exc.summary is not None:
        content["usage"] = exc.summary.model_dump(mode="json")

    if exc.kind == ErrorKind.AI_PROVIDER_ERROR:
        # Provider details stay in the logs
        content["detail"] = "AI provider request failed"

    return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=content)


@app.exception_handler(DomainValidationError)
async def domain_validation_handler(request: Request, exc: DomainValidationError):
    return JSONResponse(status_code=400, content={"code": "VALIDATION_ERROR", "detail": exc.detail})


# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Orgspace API",
        "version": settings.VERSION,
        "docs": "/docs"
    }


@app.get("/health")
@limiter.exempt
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
