"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from issue_tracker.api.deps import DbSession
from issue_tracker.api.utils import error_response
from issue_tracker.api.v1 import api_router
from issue_tracker.core.config import get_settings
from issue_tracker.database import async_session_factory, check_db, init_db
from issue_tracker.schemas.common import HealthResponse
from issue_tracker.services.exceptions import (
    AllocationExhaustedError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnsupportedOperationError,
    UnsupportedOperatorError,
    UnsupportedPropertyTypeError,
    ValidationError,
)
from issue_tracker.services.property_service import PropertyDefinitionService

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    await init_db()
    async with async_session_factory() as session:
        created = await PropertyDefinitionService(session).ensure_system_properties()
    logger.info(f"{settings.app_name} started ({len(created)} system properties seeded)")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Issue tracker with dynamically typed issue properties",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware - configurable via settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for service layer exceptions
@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    """Convert NotFoundError to 404 response."""
    return error_response(status.HTTP_404_NOT_FOUND, exc.messages)


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError):
    """Convert ConflictError to 409 response."""
    return error_response(status.HTTP_409_CONFLICT, exc.messages)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Convert ValidationError (format and business rule) to 400 response."""
    return error_response(status.HTTP_400_BAD_REQUEST, exc.messages)


@app.exception_handler(UnsupportedPropertyTypeError)
@app.exception_handler(UnsupportedOperationError)
@app.exception_handler(UnsupportedOperatorError)
async def unsupported_exception_handler(request: Request, exc: ServiceError):
    """Convert unsupported type/operation/operator errors to 400 response."""
    return error_response(status.HTTP_400_BAD_REQUEST, exc.messages)


@app.exception_handler(AllocationExhaustedError)
async def allocation_exception_handler(request: Request, exc: AllocationExhaustedError):
    """Convert AllocationExhaustedError to 503 response; the caller may retry."""
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.messages)


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    """Convert StorageError to 500 response."""
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.messages)


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Convert generic ServiceError to 500 response."""
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.messages)


@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check(db: DbSession, response: Response):
    """Health check endpoint. Answers 503 while the database is unreachable."""
    if await check_db(db):
        return HealthResponse(status="healthy", app=settings.app_name, version=settings.app_version)
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="unhealthy",
        database="unavailable",
        app=settings.app_name,
        version=settings.app_version,
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "api": settings.api_v1_prefix,
    }


# Include API v1 router
app.include_router(api_router, prefix=settings.api_v1_prefix)
