"""Main FastAPI application"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional
import logging
import traceback
import time
import uuid

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response
from sqlalchemy.orm import Session

from arena.config import Settings, settings
from arena.core.database import init_db, SessionLocal
from arena.core.exceptions import AppError, INTERNAL_ERROR_LABEL
from arena.core.responses import envelope, error_response
from arena.core.tokens import TokenCodec
from arena.api.v1 import auth, users, game
from arena.services.session_service import SessionLifecycle
from arena.services.session_store import SqlSessionStore

# Configure logging - ensure log directory exists
_log_dir = Path(settings.get_log_file()).parent
_log_dir.mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.get_log_file()),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

REQUEST_COUNT = Counter(
    "arena_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "arena_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_REJECTIONS = Counter(
    "arena_auth_rejections_total",
    "Requests rejected by the auth pipeline",
    ["status"],
)


async def add_headers_and_timing(request: Request, call_next):
    """Add security headers and log slow requests"""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.time()
    response = await call_next(request)
    duration = time.time() - start

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-Request-ID"] = request_id

    REQUEST_COUNT.labels(request.method, request.url.path, str(response.status_code)).inc()
    REQUEST_LATENCY.labels(request.method, request.url.path).observe(duration)

    if duration > 1.0:
        logger.warning(
            "Slow request: %s %s took %.2fs request_id=%s",
            request.method,
            request.url.path,
            duration,
            request_id,
        )

    return response


async def app_error_handler(request: Request, exc: AppError):
    """Handle application errors"""
    logger.error(
        f"API Exception: {exc.public_message()}",
        extra={
            "status_code": exc.status_code,
            "details": exc.details,
            "path": request.url.path,
            "method": request.method
        }
    )
    if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        AUTH_REJECTIONS.labels(str(exc.status_code)).inc()

    return error_response(exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"Validation error: {errors}",
        extra={"path": request.url.path, "method": request.method}
    )

    first = errors[0] if errors else {"field": "", "message": "invalid request"}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(
            f"Bad request: {first['field'] or first['message']}",
            {"field": first["field"], "errors": errors},
        )
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors"""
    logger.error(
        f"Database error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc()
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(f"{INTERNAL_ERROR_LABEL}: database error")
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.critical(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc()
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(f"{INTERNAL_ERROR_LABEL}: unexpected error")
    )


def create_app(
    app_settings: Optional[Settings] = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> FastAPI:
    """
    Build the application and its long-lived collaborators

    The token codec, session store and session lifecycle are created once
    here and exposed to request handlers through ``app.state``.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        debug=app_settings.DEBUG,
        docs_url="/api/docs" if app_settings.DEBUG else None,
        redoc_url="/api/redoc" if app_settings.DEBUG else None
    )

    refresh_ttl = timedelta(seconds=app_settings.get_refresh_token_ttl_seconds())
    app.state.settings = app_settings
    app.state.token_codec = TokenCodec(
        app_settings.SECRET_KEY,
        algorithm=app_settings.ALGORITHM,
        access_ttl=timedelta(hours=app_settings.AUTH_TOKEN_EXPIRE_HOURS),
        refresh_ttl=refresh_ttl,
    )
    app.state.session_lifecycle = SessionLifecycle(
        SqlSessionStore(session_factory),
        refresh_ttl=refresh_ttl,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_headers_and_timing)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.on_event("startup")
    async def startup_event():
        """Initialize application on startup"""
        app_settings.validate_security_settings()
        logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")
        logger.info(f"Environment: {app_settings.ENVIRONMENT}")

        try:
            init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info(f"Shutting down {app_settings.APP_NAME}")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        db_ok = True
        db_error = None
        db = session_factory()
        try:
            db.execute(text("SELECT 1"))
        except Exception as exc:
            db_ok = False
            db_error = str(exc)
        finally:
            db.close()

        return {
            "status": "healthy" if db_ok else "degraded",
            "version": app_settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "readiness": {"database": {"ok": db_ok, "error": db_error}},
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "status": "running",
            "docs": "/api/docs" if app_settings.DEBUG else "disabled"
        }

    app.include_router(auth.router, prefix="/v1", tags=["Authentication"])
    app.include_router(users.router, prefix="/v1", tags=["Users"])
    app.include_router(game.router, prefix="/v1", tags=["Game"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "arena.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
