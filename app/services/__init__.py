"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing business logic.

Architecture Pattern: Service Layer
----------------------------------
Services encapsulate business logic and provide a clean interface
between API endpoints and the storage layer.

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ CatalogService  │  ← Validation, image lifecycle, broadcast
    └───┬─────────┬───┘
        │         │
 ┌──────▼───┐ ┌───▼────────┐
 │Repository│ │ ImageStore │
 └──────────┘ └────────────┘

Design Principles:
-----------------
- Dependency Injection: Services receive collaborators via constructor
- Exception Handling: AppException for invalid operations

==============================================================================
"""

from .catalog_service import CatalogPublisher, CatalogService

__all__ = [
    "CatalogPublisher",
    "CatalogService",
]
