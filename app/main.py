"""
==============================================================================
Product Catalog Service - Application Entry Point
==============================================================================

FastAPI application with:
- RESTful product CRUD endpoints
- Image uploads served as static files
- WebSocket broadcast of the full catalog on every change

Usage:
------
    # Development
    uvicorn app.main:app --reload

    # Production
    PORT=8080 python -m app.main

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from app.api.router import api_router
from app.catalog import ProductRepository
from app.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.services import CatalogService
from app.storage import ImageStore
from app.websockets import CatalogBroadcaster, catalog_router


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Owns the service graph of one app instance:
    ProductRepository, ImageStore, CatalogBroadcaster and CatalogService.
    They are exposed to routes through ``app.state``.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the application.

        Args:
            settings: Settings to use (global settings if None)
        """
        self._settings = settings or get_settings()
        self._settings.ensure_directories()

        self._repository = ProductRepository()
        self._image_store = ImageStore.from_settings(self._settings)
        self._broadcaster = CatalogBroadcaster()
        self._catalog_service = CatalogService(
            self._repository, self._image_store, self._broadcaster
        )

        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Product catalog with image uploads and live updates",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        app.state.image_store = self._image_store
        app.state.broadcaster = self._broadcaster
        app.state.catalog_service = self._catalog_service

        self._configure_middleware(app)
        register_exception_handlers(app)
        self._register_routers(app)

        # Uploaded images, read-only
        app.mount(
            self._settings.upload_url_prefix,
            StaticFiles(directory=self._settings.upload_path),
            name="uploads",
        )

        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        self._startup()
        yield
        await self._shutdown()

    def _startup(self) -> None:
        """Application startup tasks."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info(f"📁 Uploads: {self._settings.upload_path.resolve()}")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"🔌 WebSocket: ws://{self._settings.host}:{self._settings.port}/ws/products")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    async def _shutdown(self) -> None:
        """Application shutdown tasks."""
        logger.info("🛑 Shutting down...")
        await self._image_store.drain()
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        """Register API routers."""
        app.include_router(api_router)
        app.include_router(catalog_router)

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/", response_class=PlainTextResponse)
        async def root():
            """Plain-text liveness banner."""
            return "Product catalog API is running!"

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app

    @property
    def catalog_service(self) -> CatalogService:
        return self._catalog_service

    @property
    def image_store(self) -> ImageStore:
        return self._image_store

    @property
    def broadcaster(self) -> CatalogBroadcaster:
        return self._broadcaster


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
