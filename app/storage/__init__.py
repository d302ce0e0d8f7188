"""
==============================================================================
Storage Package
==============================================================================

Blob storage for uploaded product images.

==============================================================================
"""

from .image_store import ImageStore, ImageUpload

__all__ = ["ImageStore", "ImageUpload"]
