"""Main application entry point for the Pulse Reporting API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

import pulse_api.models  # noqa: F401  registers tables on Base.metadata
from pulse_api.api.engagement import engagement_router
from pulse_api.api.hierarchy import hierarchy_router
from pulse_api.api.organogram import organogram_router
from pulse_api.api.reporting import reporting_router
from pulse_api.config.settings import get_settings
from pulse_api.database.database import DatabaseConfig, dispose_engine, get_engine, init_db
from pulse_api.utils.errors import APIError


# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    logger.info("Starting Pulse Reporting API...")

    config = DatabaseConfig.from_env()
    logger.info(f"Connecting to database at {config.display_target}")
    get_engine(config)

    if config.init_tables:
        logger.info("Creating write tables")
        init_db(config)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down Pulse Reporting API...")
    dispose_engine()
    logger.info("Application shutdown complete")


# =============================================================================
# Exception Handlers
# =============================================================================

async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle API errors and return structured responses."""
    response = exc.to_response()
    if response.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=response.status_code,
        content=response.to_dict(),
    )


def _validation_response(errors: list) -> JSONResponse:
    field_errors = []
    for error in errors:
        loc = ".".join(str(x) for x in error["loc"])
        field_errors.append({
            "field": loc,
            "message": error["msg"],
            "code": error["type"],
        })

    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "message": "Request validation failed",
                "code": "validation_error",
                "field_errors": field_errors,
            }
        },
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Reporting API for the field sales organisation: territory "
            "hierarchy roll-ups, dashboards, commitments and messages."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    app.include_router(hierarchy_router)
    app.include_router(organogram_router)
    app.include_router(engagement_router)
    app.include_router(reporting_router)

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed request bodies as 400 like every other validation failure."""
        return _validation_response(exc.errors())

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_handler(
        request: Request,
        exc: PydanticValidationError,
    ) -> JSONResponse:
        """Convert Pydantic validation errors to structured response."""
        return _validation_response(exc.errors())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unexpected error occurred")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": "An unexpected error occurred",
                    "code": "internal_error",
                }
            },
        )

    # Health check endpoint
    @app.get("/healthz", tags=["Health"], response_class=PlainTextResponse)
    async def health_check() -> str:
        """Liveness check."""
        return "ok"

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pulse_api.main:app",
        host="0.0.0.0",
        port=get_settings().port,
        reload=get_settings().debug,
        log_level="info",
    )
