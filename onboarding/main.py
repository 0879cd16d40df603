"""FastAPI application entry point."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from onboarding.api.v1.endpoints import health
from onboarding.api.v1.router import api_router
from onboarding.core.config import settings
from onboarding.core.database import close_database, init_database
from onboarding.core.exceptions import (
    AppError,
    APIClientError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from onboarding.utils.logging import get_logger
from onboarding.utils.responses import create_error_detail

LOGGER = get_logger(__name__, level=settings.log_level)


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "storage_backend": settings.storage_backend,
        },
    )

    if settings.storage_backend == "memory":
        LOGGER.info("In-memory document store selected, skipping database initialization")
    else:
        LOGGER.info("Starting database initialization...")
        try:
            await asyncio.wait_for(
                init_database(auto_migrate=settings.db.auto_migrate),
                timeout=settings.db_init_timeout,
            )
            LOGGER.info("Database initialized successfully")
        except asyncio.TimeoutError:
            LOGGER.error(f"Database initialization timed out after {settings.db_init_timeout}s")
        except Exception as e:
            LOGGER.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    LOGGER.info("Shutting down application")

    if settings.storage_backend != "memory":
        try:
            await close_database()
        except Exception as e:
            LOGGER.error(
                "Error closing database",
                exc_info=True,
                extra={"error": str(e)}
            )


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Multi-step onboarding forms with draft, submit and review lifecycle",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


# CORS middleware - added last to ensure it wraps all other middleware/responses
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


_ERROR_STATUS = (
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (ConflictError, status.HTTP_409_CONFLICT, "Conflict"),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Failed"),
    (APIClientError, status.HTTP_502_BAD_GATEWAY, "Upstream Request Failed"),
    (DatabaseError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Database Error"),
)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Render application errors as problem details under ``detail``."""
    status_code, title = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"
    for error_type, mapped_status, mapped_title in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code, title = mapped_status, mapped_title
            break

    if status_code >= 500:
        LOGGER.error(f"{title}: {exc.message}", exc_info=exc.original_error or exc)
    else:
        LOGGER.info(f"{title}: {exc.message}", extra={"path": request.url.path})

    error_detail = create_error_detail(
        title=title,
        status=status_code,
        detail=exc.message,
        request=request,
        errors=getattr(exc, "errors", None),
    )
    return JSONResponse(status_code=status_code, content={"detail": error_detail.model_dump(mode="json")})


app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    description="Get basic information about the API",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    """Root endpoint.

    Returns:
        RootResponse: Basic API information
    """
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "onboarding.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
