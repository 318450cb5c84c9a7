"""Content Interactions API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config import Settings, get_settings
from src.core.context import get_request_id
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.health import router as health_router
from src.interactions.locks import KeyedLock, LocalKeyedLock, RedisKeyedLock
from src.interactions.router import router as interactions_router
from src.interactions.service import InteractionService
from src.store import DocumentStore, InMemoryDocumentStore, RetryingDocumentStore


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    redis_client: Any = None
    interaction_service: InteractionService | None = None


app_state = AppState()


async def build_store(settings: Settings) -> DocumentStore:
    """Create the configured document store, wrapped with transient retries."""
    if settings.interactions_store_backend == "memory":
        backend: DocumentStore = InMemoryDocumentStore()
    else:
        # Cassandra driver is only loaded when that backend is selected
        from src.core.database import init_async_cassandra  # noqa: PLC0415
        from src.store.cassandra import CassandraDocumentStore  # noqa: PLC0415

        app_state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")
        backend = CassandraDocumentStore(
            session=app_state.cassandra_session,
            keyspace=settings.cassandra_keyspace,
        )

    return RetryingDocumentStore(
        backend,
        attempts=settings.store_retry_attempts,
        backoff_seconds=settings.store_retry_backoff_seconds,
    )


def build_locks(settings: Settings, redis_client: Any) -> KeyedLock:
    """Distributed locks when Redis is connected, in-process locks otherwise."""
    if redis_client is None:
        return LocalKeyedLock()
    return RedisKeyedLock(
        redis_client,
        timeout=settings.interactions_lock_timeout_seconds,
        blocking_timeout=settings.interactions_lock_blocking_timeout_seconds,
        attempts=settings.store_retry_attempts,
        backoff_seconds=settings.store_retry_backoff_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        store_backend=settings.interactions_store_backend,
    )

    # Initialize Redis (non-critical - app works without it)
    if settings.redis_enabled:
        try:
            app_state.redis_client = await init_redis()
            logger.info("redis_initialized")
        except Exception as e:
            logger.warning(
                "redis_init_skipped",
                error=str(e),
                message="Running without Redis - using in-process locks",
            )

    try:
        store = await build_store(settings)
        app_state.interaction_service = InteractionService(
            store=store,
            locks=build_locks(settings, app_state.redis_client),
            privileged_roles=settings.interactions_privileged_roles,
            max_content_length=settings.interactions_max_content_length,
            max_display_depth=settings.interactions_max_display_depth,
        )
        # Also set on app.state for dependency injection via request.app.state
        app.state.interaction_service = app_state.interaction_service
        logger.info("interaction_service_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    app.state.interaction_service = None
    app_state.interaction_service = None
    app_state.redis_client = None
    await shutdown_redis()
    if app_state.cassandra_session is not None:
        from src.core.database import shutdown_async_cassandra  # noqa: PLC0415

        await shutdown_async_cassandra()
        app_state.cassandra_session = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # SECURITY: Always set debug=False to prevent Starlette's ServerErrorMiddleware
    # from exposing stack traces in responses.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Comments and reactions for published content",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    # Global exception handlers (security: never expose stack traces)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                or exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": request_id,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": request_id,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        SECURITY: Never expose stack traces or internal error details to users.
        """
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": request_id,
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(interactions_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Content Interactions API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
