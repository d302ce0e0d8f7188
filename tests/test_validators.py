"""
==============================================================================
Validator Tests
==============================================================================
"""

import pytest

from app.utils import PriceValidator, RequiredFieldsValidator, blank_to_none


class TestPriceValidator:
    """Tests for price parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("49.90", 49.9),
        ("0", 0.0),
        (" 12 ", 12.0),
        ("1e2", 100.0),
    ])
    def test_valid_prices(self, raw, expected):
        """Test accepted prices parse to floats."""
        assert PriceValidator().validate(raw) == (True, expected, None)

    @pytest.mark.parametrize("raw", ["-1", "-0.01", "abc", "nan", "inf", "12abc"])
    def test_invalid_prices(self, raw):
        """Test rejected prices mention non-negative."""
        is_valid, price, error = PriceValidator().validate(raw)
        assert not is_valid
        assert price is None
        assert "non-negative" in error

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_price(self, raw):
        """Test blank price is reported as required."""
        assert PriceValidator().validate(raw) == (False, None, "Price is required")


class TestRequiredFieldsValidator:
    """Tests for required text fields."""

    def test_reports_missing_and_blank(self):
        """Test absent and whitespace-only values are missing."""
        validator = RequiredFieldsValidator(["titulo", "descricao", "preco"])
        is_valid, missing = validator.validate({"titulo": " ", "preco": "1"})
        assert not is_valid
        assert missing == ["titulo", "descricao"]

    def test_all_present(self):
        validator = RequiredFieldsValidator(["titulo"])
        assert validator.validate({"titulo": "Chair"}) == (True, [])

    def test_blank_to_none(self):
        assert blank_to_none("  ") is None
        assert blank_to_none(None) is None
        assert blank_to_none("x") == "x"

