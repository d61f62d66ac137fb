"""
SessionVault

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sessionvault.api.middleware import (
    REQUEST_ID_HEADER,
    OriginCheckMiddleware,
    RequestIdMiddleware,
    SecurityHeadersMiddleware,
)
from sessionvault.api.v1 import router as api_v1_router
from sessionvault.config import Settings, get_settings
from sessionvault.database import Database
from sessionvault.errors import ServiceError, ValidationError
from sessionvault.kernel.identity.tokens import utc_now
from sessionvault.logging_config import configure_logging, get_logger
from sessionvault.schemas.common import HealthResponse

logger = get_logger(__name__)

INTERNAL_SERVER_ERROR = "Internal server error"
_VALUE_ERROR_PREFIX = "Value error, "


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    settings: Settings = app.state.settings

    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await app.state.database.init_models()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await app.state.database.dispose()
    logger.info("Database connections closed")


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def _first_validation_message(exc: RequestValidationError) -> str:
    """Message of the first failing field, without pydantic's prefix."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg", "Invalid request"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "status_code": exc.status_code},
                exc_info=exc,
            )
        return _error_response(request, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        error = ValidationError(_first_validation_message(exc))
        return _error_response(request, error.status_code, error.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error_response(request, exc.status_code, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", type(exc).__name__)
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build an application bound to ``settings`` and its own database."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.project_name,
        description="""
    SessionVault

    Credential and token lifecycle service.

    ## Features

    - **Registration and login**: bcrypt password hashing, cookie-borne tokens
    - **Access tokens**: short-lived, verified statelessly
    - **Refresh tokens**: long-lived, recorded in a revocation ledger
    - **Logout**: revokes the refresh token and clears both cookies
    """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.clock = utc_now

    # add_middleware stacks innermost-first; CORS is added last so it wraps everything
    app.add_middleware(OriginCheckMiddleware, allowed_origins=[settings.website_url])
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.website_url],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version)

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)

    return app


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "sessionvault.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=_settings.debug,
    )
