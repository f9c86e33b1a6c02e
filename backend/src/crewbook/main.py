"""Crewbook Backend - Main FastAPI Application

Multi-tenant HR platform: organisations, members and member documents.

This module creates and configures the main FastAPI application, including:
- All API routers (auth, users, organisations, members, documents, audit)
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import __version__
from .config import settings
from .errors import format_validation_errors

# Observability
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router

# Authentication
from .auth.router import router as auth_router
from .users.router import router as users_router

# Tenancy
from .organisations.router import router as organisations_router
from .members.router import router as members_router
from .members.router import organisation_members_router
from .documents.router import router as documents_router
from .audit.router import router as audit_router

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler (startup/shutdown logging)."""
    logger.info("Crewbook API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Crewbook API shutting down...")


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, handlers and routers."""
    docs_enabled = not settings.is_production

    app = FastAPI(
        title="Crewbook API",
        description="Multi-tenant HR platform: organisations, members and documents",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    # Request ID Middleware (must be first for proper correlation)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Field-level validation errors grouped by field name."""
        details = format_validation_errors(exc.errors())
        logger.warning(
            f"Validation error on {request.method} {request.url.path}",
            extra={"errors": details}
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": details,
            },
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(
        request: Request,
        exc: IntegrityError
    ) -> JSONResponse:
        """Constraint violations that got past the service checks."""
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "conflict",
                "message": "The request conflicts with existing data.",
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(
        request: Request,
        exc: SQLAlchemyError
    ) -> JSONResponse:
        """Handle database errors.

        Logs the full error but returns a generic message to prevent
        information leakage.
        """
        logger.error(
            f"Database error on {request.method} {request.url.path}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "database_error",
                "message": "A database error occurred. Please try again later.",
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle uncaught exceptions.

        Full details are logged but not exposed to the client.
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    # Observability (health, metrics, ready)
    app.include_router(observability_router)

    # Authentication & accounts
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")

    # Organisations, members, documents
    app.include_router(organisations_router, prefix="/api")
    app.include_router(members_router, prefix="/api")
    app.include_router(organisation_members_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")

    # Audit & Compliance
    app.include_router(audit_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root():
        """API information."""
        return {
            "name": "Crewbook API",
            "version": __version__,
            "docs": "/docs" if docs_enabled else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crewbook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
