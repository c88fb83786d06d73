"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopdesk.api.routes import (
    clients_router,
    dashboard_router,
    health_router,
    orders_router,
    projects_router,
    users_router,
)
from shopdesk.config import Settings, configure_logging, get_settings
from shopdesk.database import Database
from shopdesk.errors import ShopdeskError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    # Startup
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
    if settings.auto_create_schema:
        await app.state.database.create_all()
    logger.info("shopdesk %s started", settings.app_version)

    yield

    # Shutdown
    if owns_database:
        await app.state.database.dispose()


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; read from the environment if omitted
        database: Store client to use; built from settings at startup if omitted
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Shopdesk API",
        description="Shop management backend: clients, orders, editing projects and salaries",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if database is not None:
        app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ShopdeskError)
    async def shopdesk_exception_handler(request: Request, exc: ShopdeskError) -> JSONResponse:
        """Expected errors carry their own status code."""
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed requests are 400s, like every other validation failure."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error"},
        )

    # Include routers
    app.include_router(health_router)
    for router in (
        orders_router,
        clients_router,
        projects_router,
        users_router,
        dashboard_router,
    ):
        app.include_router(router, prefix="/api")

    return app
