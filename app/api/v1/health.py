"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_broadcaster, get_catalog_service, get_image_store
from app.services import CatalogService
from app.storage import ImageStore
from app.websockets.catalog import CatalogBroadcaster


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(
        self,
        service: CatalogService,
        image_store: ImageStore,
        broadcaster: CatalogBroadcaster
    ):
        self._service = service
        self._images = image_store
        self._broadcaster = broadcaster

    def check_storage(self) -> str:
        """Check the upload directory is present."""
        return "healthy" if self._images.directory.is_dir() else "unhealthy"

    def get_health(self) -> dict:
        """Get full health status."""
        storage_status = self.check_storage()
        overall = "healthy" if storage_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "storage": storage_status,
            },
            "details": {
                "products": len(self._service.list_products()),
                "connected_clients": self._broadcaster.client_count,
                "pending_image_deletions": self._images.pending_deletions,
            }
        }


@router.get("")
async def health_check(
    service: CatalogService = Depends(get_catalog_service),
    image_store: ImageStore = Depends(get_image_store),
    broadcaster: CatalogBroadcaster = Depends(get_broadcaster)
):
    """
    Health check endpoint.

    Returns API and storage status with catalog counters.
    """
    controller = HealthController(service, image_store, broadcaster)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
