"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    LedgerlyError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    ExpiredError,
    LimitExceededError,
    PaymentRequiredError,
    ValidationError,
    StorageUnavailableError,
)
from .models import ErrorResponse
from .routes import health, users, usage
from modules.chat_binding.routes import router as chat_binding_router
from modules.groups.routes import router as groups_router

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "Authentication required"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse, "description": "Storage unavailable"},
}

# First match wins, so subclasses must come before their bases.
STATUS_BY_ERROR: list[tuple[type[LedgerlyError], int]] = [
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExpiredError, status.HTTP_410_GONE),
    (LimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (PaymentRequiredError, status.HTTP_402_PAYMENT_REQUIRED),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(error: LedgerlyError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def ledgerly_error_handler(request: Request, exc: LedgerlyError) -> JSONResponse:
    """
    Render a LedgerlyError as ``{"error", "message", "details"}``.

    Authentication failures all look alike to the caller; the specific
    reason only goes to the log. Storage and unexpected errors never
    expose their details.
    """
    status_code = status_for(exc)

    if isinstance(exc, UnauthorizedError):
        logger.info(
            f"Authentication failed on {request.method} {request.url.path}: "
            f"reason={exc.reason} code={exc.code}"
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": "UNAUTHORIZED", "message": "Authentication required", "details": {}},
            headers={"WWW-Authenticate": "Bearer"},
        )

    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message} {exc.details}")
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": "Service temporarily unavailable", "details": {}},
        )

    return JSONResponse(status_code=status_code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        f"Starting {settings.app_name} on {settings.host}:{settings.port} "
        f"(storage: {settings.storage_backend})"
    )
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Expense tracking API for web sessions and bound chats",
        version=settings.app_version,
        lifespan=lifespan,
        responses=ERROR_RESPONSES,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(LedgerlyError, ledgerly_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(usage.router, prefix="/api/usage", tags=["usage"])
    app.include_router(groups_router, prefix="/api/groups", tags=["groups"])
    app.include_router(chat_binding_router, prefix="/api", tags=["chat-bindings"])

    return app


# Application instance for uvicorn
app = create_app()
