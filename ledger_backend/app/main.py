"""
FastAPI Application Entry Point.

Composition root of the Commerce Ledger Backend: owns the settings, the
logging setup and the lifecycle of the database handle.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_backend.app.api.v1.router import router as api_v1_router
from ledger_backend.app.core.config import Settings, settings as default_settings
from ledger_backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from ledger_backend.app.core.observability import ObservabilityMiddleware, configure_logging
from ledger_backend.app.db.session import Database


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around one set of settings.

    The database handle is opened on startup and closed on shutdown.
    """
    app_settings = app_settings or default_settings
    configure_logging(app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(
            app_settings.database_url,
            echo=app_settings.db_echo,
            busy_timeout=app_settings.db_busy_timeout
        ).open()
        await database.create_schema()
        app.state.database = database
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
        description="Supplier and client account ledger with running balances",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(ObservabilityMiddleware)

    # Register global exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint.

        Returns:
            dict: Status and application information
        """
        return {
            "status": "healthy",
            "app_name": app_settings.app_name,
            "version": app_settings.api_version,
        }

    # Include API v1 router
    app.include_router(api_v1_router, prefix=f"/{app_settings.api_version}")

    return app


app = create_app()
