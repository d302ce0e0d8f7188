"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for product form input.

This module implements:
- PriceValidator: Parses and validates product prices
- RequiredFieldsValidator: Checks required text fields are present

Validation Rules for Prices:
---------------------------
- Must parse as a decimal number (surrounding whitespace allowed)
- Must be finite (no "nan" / "inf")
- Must be zero or greater

==============================================================================
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple


class PriceValidator:
    """
    Validator for product prices submitted as form text.

    Example:
        >>> validator = PriceValidator()
        >>> validator.validate("49.90")
        (True, 49.9, None)
        >>> validator.validate("-1")
        (False, None, 'Price must be a non-negative number')
    """

    ERROR_MESSAGE = "Price must be a non-negative number"

    def validate(self, raw: Optional[str]) -> Tuple[bool, Optional[float], Optional[str]]:
        """
        Validate and parse a price.

        Args:
            raw: Raw price input

        Returns:
            Tuple of (is_valid, parsed_price, error_message)
        """
        if raw is None or not raw.strip():
            return False, None, "Price is required"

        try:
            price = float(raw.strip())
        except ValueError:
            return False, None, self.ERROR_MESSAGE

        if not math.isfinite(price) or price < 0:
            return False, None, self.ERROR_MESSAGE

        return True, price, None


class RequiredFieldsValidator:
    """
    Validator for required non-blank text fields.

    Example:
        >>> validator = RequiredFieldsValidator(["titulo", "preco"])
        >>> validator.missing({"titulo": "Chair", "preco": " "})
        ['preco']
    """

    def __init__(self, fields: List[str]) -> None:
        self._fields = list(fields)

    def missing(self, values: Dict[str, Optional[str]]) -> List[str]:
        """Names of required fields that are absent or blank."""
        return [
            name for name in self._fields
            if values.get(name) is None or not str(values.get(name)).strip()
        ]

    def validate(self, values: Dict[str, Optional[str]]) -> Tuple[bool, List[str]]:
        """
        Validate required fields.

        Returns:
            Tuple of (is_valid, missing_field_names)
        """
        missing = self.missing(values)
        return not missing, missing


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Treat empty or whitespace-only form values as not supplied."""
    if value is None or not value.strip():
        return None
    return value
