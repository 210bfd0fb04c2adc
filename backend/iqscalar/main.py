"""
Main FastAPI application.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import urlparse

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from iqscalar.api.v1.api import api_router
from iqscalar.core.config import settings
from iqscalar.core.error_responses import ErrorMessages
from iqscalar.core.fallback_questions import (
    FALLBACK_PRACTICE_QUESTIONS,
    FALLBACK_TEST_QUESTIONS,
)
from iqscalar.core.logging_config import setup_logging
from iqscalar.core.question_bank import load_question_bank
from iqscalar.middleware import RequestLoggingMiddleware
from iqscalar.services import AssessmentService
from iqscalar.storage import InMemoryStorage, KeyValueStorage, RedisStorage, StorageError

setup_logging()

logger = logging.getLogger(__name__)


def _sanitize_redis_url(url: str) -> str:
    """
    Remove password from Redis URL for safe logging.

    Args:
        url: Redis connection URL (e.g., redis://:password@host:port/db)

    Returns:
        URL with password redacted
    """
    parsed = urlparse(url)
    if parsed.password:
        netloc = parsed.hostname or "localhost"
        if parsed.port:
            netloc = f"{netloc}:{parsed.port}"
        return f"{parsed.scheme}://{netloc}{parsed.path}"
    return url


def create_storage() -> KeyValueStorage:
    """
    Create the assessment storage backend based on configuration.

    If Redis is configured but unavailable, falls back to in-memory storage.

    Returns:
        KeyValueStorage: The configured storage backend
    """
    if settings.STORAGE_BACKEND == "redis":
        redis_url = _sanitize_redis_url(settings.STORAGE_REDIS_URL)
        try:
            storage = RedisStorage(redis_url=settings.STORAGE_REDIS_URL)
            if storage.is_connected():
                logger.info(f"Assessment storage using Redis at {redis_url}")
                return storage
            logger.warning(
                f"Redis not available at {redis_url}, falling back to in-memory storage. "
                "State will NOT be shared across workers."
            )
            storage.close()
        except Exception as e:
            logger.warning(
                f"Failed to initialize Redis storage: {e}. "
                "Falling back to in-memory storage."
            )
        return InMemoryStorage()

    logger.info("Assessment storage using in-memory storage")
    return InMemoryStorage()


def create_assessment_service() -> AssessmentService:
    """Load both question banks and build the process-wide service."""
    bank = load_question_bank(
        settings.QUESTION_BANK_SOURCE,
        fallback=FALLBACK_TEST_QUESTIONS,
        id_prefix="iq",
    )
    practice_bank = load_question_bank(
        settings.PRACTICE_BANK_SOURCE,
        fallback=FALLBACK_PRACTICE_QUESTIONS,
        id_prefix="practice",
    )
    return AssessmentService(bank, create_storage(), practice_bank=practice_bank)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan event handler.

    - On startup: loads the question banks and storage into an AssessmentService
      (unless one was already attached, e.g. by tests)
    - On shutdown: closes the storage backend
    """
    if getattr(app.state, "assessment_service", None) is None:
        app.state.assessment_service = create_assessment_service()
        logger.info("Assessment service initialized")

    yield

    service: AssessmentService = app.state.assessment_service
    service.storage.close()
    logger.info("Application shutting down - storage closed")


tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring application status",
    },
    {
        "name": "test",
        "description": "Non-repeating, category-balanced full tests: start, submit, progress",
    },
    {
        "name": "practice",
        "description": "Repeatable practice attempts, optionally restricted to one category",
    },
    {
        "name": "daily",
        "description": "One shared question per day, with answer streaks",
    },
    {
        "name": "user",
        "description": "Per-user history, statistics, achievements and data deletion",
    },
]


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        description=(
            "**IQScalar API** - cognitive assessment engine.\n\n"
            "This API provides:\n"
            "* Full tests that never repeat a question until the bank is exhausted\n"
            "* Practice attempts by category\n"
            "* A deterministic daily quiz with streak tracking\n"
            "* Test history, statistics and achievements\n\n"
            "## Identity\n\n"
            "Callers identify themselves with an opaque `X-User-ID` header. "
            "Requests without one share the `anonymous` profile."
        ),
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        openapi_tags=tags_metadata,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-ID", "X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handle HTTP exceptions with a consistent body.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """
        Handle request validation errors.
        """
        errors = [
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": str(error.get("type", "")),
            }
            for error in exc.errors()
        ]

        logger.info(
            f"Request validation failed: {errors}",
            extra={"method": request.method, "path": str(request.url.path)},
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": errors},
        )

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError):
        """
        Handle storage backend failures.

        The request is aborted before any partial write, so the caller can
        retry once the backend is reachable again.
        """
        error_id = str(uuid.uuid4())

        logger.error(
            f"Storage unavailable [error_id={error_id}]: {exc}",
            extra={
                "error_id": error_id,
                "method": request.method,
                "path": str(request.url.path),
            },
        )

        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": ErrorMessages.STORAGE_UNAVAILABLE,
                "error_id": error_id,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.

        Generates a unique error_id (UUID) for each exception so a specific
        failure can be traced in the logs. The error_id is included in the
        response body and logged with the full exception.
        """
        error_id = str(uuid.uuid4())

        logger.exception(
            f"Unhandled exception [error_id={error_id}]: {exc}",
            extra={
                "error_id": error_id,
                "method": request.method,
                "path": str(request.url.path),
            },
        )

        # Return error response with tracking ID (don't leak internal details)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "error_id": error_id,
            },
        )

    @app.get("/")
    async def root():
        """
        Root endpoint.
        """
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
        }

    return app


app = create_application()
