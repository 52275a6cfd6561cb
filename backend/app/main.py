"""
FastAPI application entry point.

Uses structured logging from codiro.logging.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from codiro.db import db
from codiro.logging import configure_logging, get_logger

from .config import get_settings
from .error_handlers import register_exception_handlers
from .middleware.request_logging import RequestLoggingMiddleware
from .routers import auth as auth_router

# Configure structured logging
settings = get_settings()
log_level = "DEBUG" if settings.debug else "INFO"
configure_logging(level=log_level)
logger = get_logger("api")


def check_configuration() -> None:
    """Log configuration problems; refuse to start in production with errors."""
    errors, warnings = settings.validate_production_config()
    for warning in warnings:
        logger.warning("config_warning", message=warning)

    if not errors:
        logger.info("config_validation_passed")
        return

    for error in errors:
        logger.error("config_error", error=error)
    if settings.is_production:
        raise RuntimeError("Invalid production configuration: " + "; ".join(errors))


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    # CORS middleware - credentials are needed for the auth cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With", "X-Request-ID"],
    )

    # Outermost: binds the request id before anything else logs
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name)

        check_configuration()

        db.initialize(settings.database_url)
        db.create_all_tables()
        health = db.health_check()
        if not health["healthy"]:
            raise RuntimeError(f"Database unreachable: {health['error']}")
        logger.info("database_initialized", latency_ms=health["latency_ms"])

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("app_shutdown")

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe. Returns minimal information."""
        return {"status": "ok"}

    app.include_router(auth_router.router, prefix=settings.api_prefix)

    @app.get(f"{settings.api_prefix}/test", tags=["system"])
    def api_test():
        return {
            "name": settings.app_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Registered last so it never shadows a real API route
    @app.get(settings.api_prefix + "/{path:path}", tags=["system"])
    def api_fallback(path: str):
        return JSONResponse(status_code=status.HTTP_200_OK, content={"name": settings.app_name})

    return app


app = create_app()
