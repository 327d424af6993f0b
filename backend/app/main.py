"""
Userdesk FastAPI Application
Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import init_db, close_db
from app.exceptions import UserdeskError, UnauthenticatedError
from app.api.rate_limit import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    # Startup
    from app.logging_config import setup_logging
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    logger.info("🚀 Starting Userdesk Backend...")

    # Initialize database (creates tables if they don't exist)
    # In production, use Alembic migrations instead
    if settings.debug:
        await init_db()
        logger.info("✅ Database initialized (debug mode)")

    if settings.seed_default_users:
        from app.data.seed import seed_default_users
        await seed_default_users()

    logger.info("✅ Userdesk Backend ready!")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Userdesk Backend...")
    await close_db()
    logger.info("✅ Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
    ## User Administration API

    Userdesk lets an administrator manage the user accounts of an application.

    ### Features
    - **Registration & Login**: bcrypt-hashed passwords, one-hour bearer tokens
    - **User Listing**: search by name or email, filter by role and status, sort and paginate
    - **User Management**: edit, activate/deactivate, change role, reset password, delete
    """,
    version="0.1.0",
    docs_url=f"{settings.api_prefix}/docs",
    redoc_url=f"{settings.api_prefix}/redoc",
    openapi_url=f"{settings.api_prefix}/openapi.json",
    lifespan=lifespan,
)

# Configure rate limiting
app.state.limiter = limiter

# Configure CORS for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(UserdeskError)
async def userdesk_error_handler(request: Request, exc: UserdeskError):
    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"message": f"Rate limit exceeded: {exc.detail}"})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # Drop the body/query/path prefix from the location
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": error.get("msg", "Invalid value")})
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Server error"})


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": f"{settings.app_name} API",
        "version": "0.1.0",
        "docs": app.docs_url,
        "status": "running"
    }


@app.get(f"{settings.api_prefix}/health", tags=["Health"])
async def health_check():
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "service": "userdesk-backend",
        "version": "0.1.0"
    }


@app.get(f"{settings.api_prefix}/health/db", tags=["Health"])
async def database_health():
    """Database connectivity check."""
    from sqlalchemy import text
    from app.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.fetchone()

        return {
            "status": "healthy",
            "database": "connected",
        }
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e)
        }


from app.api import auth, users


# =============================================
# API Routers
# =============================================

app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Auth"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["Users"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
