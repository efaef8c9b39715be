"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, categories, collections, health, passwords, previews, view
from core.config import Settings, get_settings
from db.session import create_engine, create_session_factory, create_tables
from services.blob_storage import BlobStorage
from services.remote_mirror import RemoteMirror
from services.workspace import Workspace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: connect the remote mirror (if configured) and load bookmarks once
    engine = None
    mirror = None
    if app_settings.database_url is not None:
        engine = create_engine(app_settings.database_url)
        try:
            await create_tables(engine)
        except (SQLAlchemyError, OSError):
            # The initial load below fails too and surfaces the banner
            logger.exception("Could not prepare the document store")
        mirror = RemoteMirror(
            create_session_factory(engine),
            BlobStorage(app_settings.blob_storage_dir, app_settings.blob_public_url),
        )
    else:
        logger.info("No DATABASE_URL configured; running a local-only session")

    workspace = Workspace(mirror=mirror)
    await workspace.load_remote()
    app.state.workspace = workspace

    yield

    # Shutdown: let in-flight remote writes finish, then close the pool
    if mirror is not None:
        await mirror.drain()
    if engine is not None:
        await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing (uploaded images are served from /storage)
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


def create_app(app_settings: Settings) -> FastAPI:
    """Build the application for the given settings."""
    application = FastAPI(
        title="MindBox API",
        description="Personal bookmark and password organizer.",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router)
    application.include_router(previews.router)
    application.include_router(bookmarks.router)
    application.include_router(collections.router)
    application.include_router(categories.router)
    application.include_router(passwords.router)
    application.include_router(view.router)

    # Uploaded images; the directory is created on first upload
    application.mount(
        "/storage",
        StaticFiles(directory=app_settings.blob_storage_dir, check_dir=False),
        name="storage",
    )
    return application


app = create_app(get_settings())
