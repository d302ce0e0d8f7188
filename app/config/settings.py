"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values (paths, byte limits)

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Set

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number (``PORT`` env var)
        upload_directory: Directory where uploaded images are stored
        upload_url_prefix: Public URL prefix for uploaded images
        max_upload_size_mb: Maximum accepted image size in MiB
        allowed_image_types: Comma-separated allowed image extensions
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings(port=8080)
        >>> settings.max_upload_bytes
        5242880
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Product Catalog API",
        description="Display name for the application"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # UPLOAD SETTINGS
    # =========================================================================
    upload_directory: str = Field(
        default="uploads",
        description="Directory for uploaded product images"
    )

    upload_url_prefix: str = Field(
        default="/uploads",
        description="Public URL prefix under which images are served"
    )

    max_upload_size_mb: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum image size in MiB"
    )

    allowed_image_types: str = Field(
        default="jpeg,jpg,png,gif",
        description="Comma-separated list of accepted image types"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("upload_url_prefix")
    @classmethod
    def validate_upload_url_prefix(cls, value: str) -> str:
        """
        Validate the public upload prefix.

        Args:
            value: Raw prefix, e.g. "/uploads" or "/uploads/"

        Returns:
            Prefix with a leading slash and no trailing slash

        Raises:
            ValueError: If prefix does not start with "/" or is only "/"
        """
        if not value.startswith("/"):
            raise ValueError("upload_url_prefix must start with '/'")

        normalized = value.rstrip("/")
        if not normalized:
            raise ValueError("upload_url_prefix cannot be the root path")

        return normalized

    @field_validator("allowed_image_types")
    @classmethod
    def validate_allowed_image_types(cls, value: str) -> str:
        """Normalize the allow-list to lowercase without dots or blanks."""
        types = [t.strip().lower().lstrip(".") for t in value.split(",")]
        types = [t for t in types if t]

        if not types:
            raise ValueError("allowed_image_types cannot be empty")

        return ",".join(types)

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def upload_path(self) -> Path:
        """Upload directory as a Path object."""
        return Path(self.upload_directory)

    @property
    def max_upload_bytes(self) -> int:
        """Maximum image size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def allowed_image_types_set(self) -> Set[str]:
        """Allowed image types as a set, e.g. {"png", "jpg"}."""
        return set(self.allowed_image_types.split(","))

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def ensure_directories(self) -> None:
        """Create the upload directory if missing."""
        self.upload_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Upload directory ready: {self.upload_path}")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"port={self.port}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Returns:
        Global Settings instance

    Example:
        >>> settings = get_settings()
        >>> print(settings.port)
        3000
    """
    settings = Settings()
    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
