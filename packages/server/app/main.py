"""
Org Admin API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1 import router as api_v1_router
from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import MembershipError
from app.core.log_config import configure_logging
from app.core.middleware import SecurityHeadersMiddleware

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Org Admin",
        description="Organization membership administration for multi-tenant workspaces.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware: outermost first
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.exception_handler(MembershipError)
    async def membership_error_handler(request: Request, exc: MembershipError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        log.info("request.invalid", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request body",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(session: AsyncSession = Depends(get_session)):
        """Readiness check endpoint for startup probes; verifies the database."""
        try:
            await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log.warning("readiness.database_unavailable", error=str(exc))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Org Admin starting", environment=settings.environment)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Org Admin shutting down")

    return app


app = create_app()
