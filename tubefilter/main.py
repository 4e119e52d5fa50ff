"""
Main FastAPI application entry point.
Configures logging, exception handlers, shared components, and routers.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tubefilter.api.routers import (
    health_router,
    history_router,
    preferences_router,
    recommendations_router,
    videos_router,
)
from tubefilter.config import Settings, get_settings
from tubefilter.config.logging import configure_logging
from tubefilter.core.exceptions import AppException, ValidationError
from tubefilter.core.telemetry import setup_telemetry
from tubefilter.models.interfaces import Repository
from tubefilter.repositories.memory import InMemoryRepository
from tubefilter.services.catalog import CatalogGateway

REQUEST_LOCATIONS = ("body", "query", "path", "header")


# =============================================================================
# Lifespan (Startup/Shutdown)
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    logger = logging.getLogger(__name__)
    settings: Settings = app.state.settings

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Catalog: {settings.CATALOG_API_BASE_URL}")
    if not settings.CATALOG_API_KEY:
        logger.warning("CATALOG_API_KEY is not set; catalog calls will be rejected")

    yield

    logger.info("Shutting down application")
    await app.state.catalog.close()


# =============================================================================
# Exception Handlers
# =============================================================================


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


def _describe_errors(errors: List[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in REQUEST_LOCATIONS
        )
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render schema violations as 400 with a readable message."""
    errors = exc.errors()
    error = ValidationError(
        _describe_errors(errors),
        details={
            "errors": [
                {
                    "loc": [str(part) for part in e.get("loc", ())],
                    "msg": e.get("msg"),
                    "type": e.get("type"),
                }
                for e in errors
            ]
        },
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions - return generic error."""
    logger = logging.getLogger(__name__)
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    catalog: Optional[CatalogGateway] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The repository and catalog gateway are built here, once per process,
    and handed to handlers through app.state.
    """
    settings = settings or get_settings()

    configure_logging(debug=settings.DEBUG, level=settings.LOG_LEVEL)

    repository = repository or InMemoryRepository()
    catalog = catalog or CatalogGateway(repository, settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        Video browsing API without short-form clutter.

        ## Features
        - Shorts detection by duration and hashtags, cached per video
        - Uniform content filter (shorts, vertical, minimum length)
        - Channel-affinity recommendations from watch history and likes
        - Watch history and like/save interactions
        - Observability: JSON logs, Prometheus, OpenTelemetry
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.repository = repository
    app.state.catalog = catalog

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(videos_router)
    app.include_router(recommendations_router)
    app.include_router(history_router)
    app.include_router(preferences_router)

    setup_telemetry(app, settings)

    return app


app = create_app()


# =============================================================================
# Development Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tubefilter.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
