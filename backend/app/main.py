"""Feynman Teacher Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# Logging must be configured before any module below calls structlog.get_logger().
from app.core.logging import configure_structlog
from app.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
    sql_echo=_early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import RecordNotFoundError, StorageError
from app.db import close_db
from app.db.seed import seed_demo_data
from app.middleware.correlation import get_correlation_id, setup_correlation_middleware
from app.storage import build_storage

logger = structlog.get_logger(__name__)

# URL segment -> noun used in "Invalid <noun> data" validation messages
RESOURCE_NAMES = {
    "users": "user",
    "personas": "persona",
    "sessions": "session",
    "messages": "message",
    "chat": "chat",
    "feedback": "feedback",
    "materials": "material",
    "gaps": "gap",
    "quizzes": "quiz",
    "answer": "answer",
}


def invalid_data_message(path: str) -> str:
    """'Invalid <thing> data' for the innermost resource named in ``path``."""
    for segment in reversed(path.strip("/").split("/")):
        if segment in RESOURCE_NAMES:
            return f"Invalid {RESOURCE_NAMES[segment]} data"
    return "Invalid request data"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    # Startup
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    app.state.storage = await build_storage(settings)
    logger.info("storage_initialized", backend=app.state.storage.name)

    if settings.seed_demo_data:
        await seed_demo_data(app.state.storage)

    logger.info(
        "analyzer_selected",
        analyzer="anthropic" if settings.anthropic_api_key else "heuristic",
    )

    yield

    # Shutdown
    logger.info("shutdown_begin")
    if app.state.storage.name == "database":
        await close_db()
    logger.info("shutdown_complete")


def _request_context(request: Request) -> dict:
    return {
        "correlation_id": get_correlation_id(),
        "path": request.url.path,
        "method": request.method,
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())
    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        detail=exc.detail,
        **_request_context(request),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "debug_id": debug_id},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body, path or query values -> 400 with an 'Invalid <thing> data' message."""
    message = invalid_data_message(request.url.path)
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.warning("request_validation_failed", message=message, errors=errors, **_request_context(request))
    return JSONResponse(status_code=400, content={"message": message, "errors": errors})


async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    logger.info(
        "record_not_found",
        entity=exc.entity,
        record_id=str(exc.record_id),
        **_request_context(request),
    )
    return JSONResponse(status_code=404, content={"message": f"{exc.entity} not found"})


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    debug_id = str(uuid.uuid4())
    logger.error("storage_failure", debug_id=debug_id, error=str(exc), **_request_context(request))
    return JSONResponse(
        status_code=500,
        content={"message": "Storage operation failed", "debug_id": debug_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())
    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
        **_request_context(request),
    )
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "debug_id": debug_id},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Learn by teaching: a Feynman technique tutor with an AI learner persona",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(RecordNotFoundError)(not_found_handler)
    app.exception_handler(StorageError)(storage_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
