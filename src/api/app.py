"""FastAPI application entry point with global error handling."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from api.middleware import BodyParserMiddleware, PathExemptCORSMiddleware, SecurityHeadersMiddleware
from api.routes import (
    API_PREFIX,
    RouterMount,
    auth,
    build_mount_table,
    ordered_for_mounting,
    root,
)
from api.routes.root import API_VERSION
from api.static import UPLOADS_PATH, UploadsStaticFiles, prepare_uploads_dir
from core.config import Settings, get_settings
from core.db import create_pool, dispose_pool, probe_database
from core.exceptions import DatabaseUnavailableError, SalonApiError, TokenError
from core.logging_config import get_logger, setup_logging

LOGGER = get_logger(__name__)


def log_startup_banner(settings: Settings) -> None:
    """
    Operational startup diagnostics, including the admin login literals.

    Logged from the lifespan startup, which uvicorn runs before it binds the
    socket. A failed bind therefore still shows the banner, followed by
    uvicorn's own bind error.
    """
    LOGGER.info(f"Backend server running on port {settings.port}")
    LOGGER.info(f"API available at {API_PREFIX}")
    LOGGER.info(f"Environment: {settings.environment}")
    # Admin login literals are logged on purpose; see DESIGN.md
    LOGGER.info(f"Admin user: {settings.admin_email}")
    LOGGER.info(f"Admin password: {settings.admin_password}")
    if settings.is_default_jwt_secret():
        LOGGER.warning("JWT_SECRET is not set - tokens are signed with the built-in default secret")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Sets up logging, probes the database and logs startup/shutdown events.
    Non-blocking startup - the app serves requests even if the database is
    unreachable; database-backed routes then fail per request.
    """
    settings: Settings = app.state.settings
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        json_format=settings.log_format == "json",
    )

    db_status = await run_in_threadpool(probe_database, app.state.db)
    if db_status["status"] == "ok":
        LOGGER.info(
            "Connected to the database",
            extra={"extra_data": {"database_url": db_status["database_url"]}},
        )
    else:
        LOGGER.error(
            f"Database connection failed - app will start without database: {db_status['error']}",
            extra={"extra_data": {"database_url": db_status["database_url"]}},
        )

    log_startup_banner(settings)

    yield

    dispose_pool(app.state.db)
    LOGGER.info("API application shutting down")


def _error_body(mensaje: str) -> dict:
    return {"success": False, "mensaje": mensaje}


def register_exception_handlers(application: FastAPI) -> None:
    """Map application and database errors to the JSON error envelope."""

    @application.exception_handler(SalonApiError)
    async def app_error_handler(request: Request, exc: SalonApiError) -> JSONResponse:
        """Handle application errors carrying their own status code."""
        if exc.status_code >= 500:
            LOGGER.error(f"Application error: {exc}", exc_info=True, extra={"path": request.url.path})
        else:
            LOGGER.warning(f"Request rejected: {exc}", extra={"path": request.url.path})
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, TokenError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.mensaje),
            headers=headers,
        )

    @application.exception_handler(OperationalError)
    async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
        """Handle lost or refused database connections."""
        LOGGER.error(f"Database unavailable: {exc}", extra={"path": request.url.path})
        unavailable = DatabaseUnavailableError()
        return JSONResponse(
            status_code=unavailable.status_code,
            content=_error_body(unavailable.mensaje),
        )

    @application.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle all other database errors without leaking details."""
        LOGGER.error(f"Database error: {exc}", exc_info=True, extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content=_error_body(SalonApiError.default_message),
        )

    @application.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort: log the traceback, answer with the generic envelope."""
        LOGGER.error(f"Unhandled error: {exc}", exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content=_error_body(SalonApiError.default_message),
        )


def create_app(
    settings: Optional[Settings] = None,
    mount_table: Optional[Sequence[RouterMount]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the cached environment settings.
        mount_table: Feature-area routers; defaults to `build_mount_table()`.

    Returns:
        Configured FastAPI application instance with:
        - its own connection pool on ``app.state.db``
        - security headers, CORS and body-parsing middleware
        - global exception handlers
        - /uploads static files, root status, admin auth and the /api routers
    """
    settings = settings or get_settings()

    application = FastAPI(
        title="Salón Sandra Fajardo API",
        description="Backend de tienda y reservas: productos, carrito, citas, inventario y ventas",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    application.state.settings = settings
    application.state.db = create_pool(settings)

    # -------------------------------------------------------------------------
    # Middleware (added innermost first; requests see them in reverse order)
    # -------------------------------------------------------------------------
    application.add_middleware(BodyParserMiddleware, max_body_bytes=settings.max_body_bytes)
    application.add_middleware(
        PathExemptCORSMiddleware,
        exempt_prefixes=(UPLOADS_PATH,),
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(application)

    # -------------------------------------------------------------------------
    # Uploaded files
    # -------------------------------------------------------------------------
    uploads_dir = settings.uploads_dir
    if prepare_uploads_dir(uploads_dir):
        application.mount(UPLOADS_PATH, UploadsStaticFiles(uploads_dir), name="uploads")

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------
    application.include_router(root.router, tags=["Status"])
    application.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])

    mounts = build_mount_table() if mount_table is None else mount_table
    for mount in ordered_for_mounting(mounts):
        application.include_router(mount.router, prefix=mount.path, tags=[mount.tag])

    return application


# Create the application instance
app = create_app()
