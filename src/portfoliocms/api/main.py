"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from portfoliocms.application import ClassifiedError
from portfoliocms.infrastructure import (
    configure_logging,
    get_settings,
    postgres_lifespan,
)
from portfoliocms.infrastructure.documents import ALL_SCHEMAS


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    async with postgres_lifespan() as postgres:
        postgres.setup_schema((schema.collection, schema.unique_fields) for schema in ALL_SCHEMAS)
        logger.info("PostgreSQL connection established and schema ready")

        yield

        # Cleanup on shutdown
        logger.info("Shutting down...")
    logger.info("Shutdown complete")


async def classified_error_handler(request: Request, exc: ClassifiedError) -> JSONResponse:
    response = exc.response
    return JSONResponse(
        status_code=response.status,
        content={"message": response.message, "code": response.code, "status": response.status},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Content management for portfolio projects, skills, experience and certificates",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClassifiedError, classified_error_handler)

    from portfoliocms.api.routes import router

    app.include_router(router)

    return app


# Create app instance
app = create_app()
