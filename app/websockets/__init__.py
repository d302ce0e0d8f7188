"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket channel for catalog updates.

Handlers:
---------
- catalog: Full-catalog broadcast to every connected client

==============================================================================
"""

from .catalog import CatalogBroadcaster, router as catalog_router

__all__ = ["CatalogBroadcaster", "catalog_router"]
