"""
==============================================================================
Settings Tests
==============================================================================
"""

import pytest

from app.config import Settings


class TestSettings:
    """Tests for configuration loading."""

    def test_port_from_environment(self, monkeypatch):
        """Test PORT env var overrides the default."""
        monkeypatch.setenv("PORT", "8081")
        assert Settings(_env_file=None).port == 8081

    def test_port_default(self, monkeypatch):
        """Test fallback port."""
        monkeypatch.delenv("PORT", raising=False)
        assert Settings(_env_file=None).port == 3000

    def test_upload_defaults(self):
        """Test upload limits and allowed types."""
        settings = Settings(_env_file=None)
        assert settings.max_upload_bytes == 5 * 1024 * 1024
        assert settings.allowed_image_types_set == {"jpeg", "jpg", "png", "gif"}
        assert settings.upload_url_prefix == "/uploads"

    def test_invalid_upload_prefix(self):
        """Test prefix must be an absolute path."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, upload_url_prefix="uploads")

    def test_allowed_types_are_normalized(self):
        settings = Settings(_env_file=None, allowed_image_types=" .PNG, jpg ,,")
        assert settings.allowed_image_types_set == {"png", "jpg"}

    @pytest.mark.parametrize("raw,expected", [
        ('["http://localhost:5173"]', ["http://localhost:5173"]),
        ("not json", ["*"]),
        ('"*"', ["*"]),
    ])
    def test_cors_origins_list(self, raw, expected):
        """Test CORS origins parse from JSON with a wildcard fallback."""
        assert Settings(_env_file=None, cors_origins=raw).cors_origins_list == expected
