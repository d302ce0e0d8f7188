"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the catalog service graph.

Design Pattern: Dependency Injection
-----------------------------------
The Application builds one ProductRepository, ImageStore, CatalogBroadcaster
and CatalogService per FastAPI app and stores them on ``app.state``. Route
handlers receive them through these dependencies, never through globals,
so every app instance (and every test) owns an isolated catalog.

                    ┌─────────────────┐
                    │   app.state     │
                    └────────┬────────┘
                             │
        ┌────────────────────┼────────────────────┐
        │                    │                    │
┌───────▼────────┐  ┌────────▼───────┐  ┌─────────▼──────┐
│catalog_service │  │  image_store   │  │  broadcaster   │
└────────────────┘  └────────────────┘  └────────────────┘

Usage Examples:
--------------
    @router.get("/products")
    async def list_products(service: CatalogService = Depends(get_catalog_service)):
        return service.list_products()

==============================================================================
"""

from typing import TYPE_CHECKING

from fastapi.requests import HTTPConnection

if TYPE_CHECKING:
    from app.services import CatalogService
    from app.storage import ImageStore
    from app.websockets.catalog import CatalogBroadcaster


def get_catalog_service(connection: HTTPConnection) -> "CatalogService":
    """Catalog service of the current app (HTTP and WebSocket)."""
    return connection.app.state.catalog_service


def get_image_store(connection: HTTPConnection) -> "ImageStore":
    """Image store of the current app."""
    return connection.app.state.image_store


def get_broadcaster(connection: HTTPConnection) -> "CatalogBroadcaster":
    """Broadcast channel of the current app."""
    return connection.app.state.broadcaster
