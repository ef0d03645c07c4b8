"""
PlanTrack API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse

from plantrack.core.auth import close_redis
from plantrack.core.config import get_settings
from plantrack.core.database import get_session_context
from plantrack.core.errors import error_body, register_exception_handlers
from plantrack.core.logging import configure_logging
from plantrack.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from plantrack.api.v1 import router as api_router
from plantrack.api.v1.auth import router as auth_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="PlanTrack",
        description="Multi-tenant inspection tracking: organizations, projects, notes.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    # Auth routes (not org-scoped)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the store must answer a trivial query."""
        try:
            async with get_session_context() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log.error("ready.store_unavailable", exc_info=exc)
            return JSONResponse(
                status_code=503,
                content=error_body(503, "NOT_READY", "Store unavailable"),
            )
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("PlanTrack starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("PlanTrack shutting down")
        await close_redis()

    return app


app = create_app()
