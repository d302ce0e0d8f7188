"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- validators: Product form field validation

==============================================================================
"""

from .validators import PriceValidator, RequiredFieldsValidator, blank_to_none

__all__ = [
    "PriceValidator",
    "RequiredFieldsValidator",
    "blank_to_none",
]
