"""
==============================================================================
Product Catalog Service
==============================================================================

In-memory product catalog with image uploads and live WebSocket updates.

==============================================================================
"""
