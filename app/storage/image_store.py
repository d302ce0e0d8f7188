"""
==============================================================================
Image Store Module
==============================================================================

On-disk storage for uploaded product images.

This module implements:
- ImageUpload: Uploaded file contents plus client-declared metadata
- ImageStore: Validation, persistence and best-effort removal of images

Storage Layout:
--------------
All images live in a single flat directory. Each file is named
``{uuid4 hex}{original extension}`` and is publicly reachable as
``{url_prefix}/{filename}``, which is the reference stored on products.

Removal Policy:
--------------
- delete(): awaited, used to roll back an upload whose request failed
- schedule_delete(): fire-and-forget, used for superseded/orphaned images
Neither raises; failures are only logged.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Set

from app.config import Settings
from app.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


DEFAULT_ALLOWED_TYPES = frozenset({"jpeg", "jpg", "png", "gif"})
DEFAULT_MAX_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class ImageUpload:
    """Uploaded image as received from the client."""

    data: bytes
    filename: str
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


class ImageStore:
    """
    Manager for uploaded image files.

    Attributes:
        directory: Upload directory
        url_prefix: Public path prefix for stored images
        max_bytes: Maximum accepted file size
        allowed_types: Accepted extensions / MIME subtypes

    Example:
        >>> store = ImageStore(Path("uploads"))
        >>> ref = await store.accept(upload)
        >>> ref
        '/uploads/3f2c0d5e8a0b4a8e9b7a6c1d2e3f4a5b.png'
        >>> await store.delete(ref)
        True
    """

    def __init__(
        self,
        directory: Path,
        url_prefix: str = "/uploads",
        max_bytes: int = DEFAULT_MAX_BYTES,
        allowed_types: Iterable[str] = DEFAULT_ALLOWED_TYPES
    ) -> None:
        self._directory = Path(directory)
        self._url_prefix = url_prefix.rstrip("/")
        self._max_bytes = max_bytes
        self._allowed_types: Set[str] = {t.lower().lstrip(".") for t in allowed_types}
        self._pending: Set[asyncio.Task] = set()

        self._directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageStore":
        """Build a store configured from application settings."""
        return cls(
            directory=settings.upload_path,
            url_prefix=settings.upload_url_prefix,
            max_bytes=settings.max_upload_bytes,
            allowed_types=settings.allowed_image_types_set,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def url_prefix(self) -> str:
        return self._url_prefix

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def pending_deletions(self) -> int:
        """Number of scheduled deletions not yet finished."""
        return len(self._pending)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self, upload: ImageUpload) -> str:
        """
        Check type and size of an upload.

        Both the filename extension and the declared MIME type must name
        one of the allowed image types.

        Args:
            upload: Uploaded image

        Returns:
            Normalized extension including the dot, e.g. ".png"

        Raises:
            AppException: INVALID_FILE_TYPE or FILE_TOO_LARGE
        """
        extension = os.path.splitext(upload.filename or "")[1].lower()
        mimetype = (upload.content_type or "").lower()

        extension_ok = extension.lstrip(".") in self._allowed_types
        mimetype_ok = mimetype.startswith("image/") and any(
            allowed in mimetype for allowed in self._allowed_types
        )

        if not (extension_ok and mimetype_ok):
            logger.info(
                f"Rejected upload '{upload.filename}' ({mimetype or 'no type'})"
            )
            raise exceptions.invalid_file_type(sorted(self._allowed_types))

        if upload.size > self._max_bytes:
            logger.info(
                f"Rejected upload '{upload.filename}': {upload.size} bytes"
            )
            raise exceptions.file_too_large(self._max_bytes)

        return extension

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    async def accept(self, upload: ImageUpload) -> str:
        """
        Validate and persist an upload.

        Returns:
            Public reference of the stored image

        Raises:
            AppException: INVALID_FILE_TYPE, FILE_TOO_LARGE or STORAGE_ERROR
        """
        extension = self.validate(upload)
        filename = f"{uuid.uuid4().hex}{extension}"
        path = self._directory / filename

        try:
            await asyncio.to_thread(self._write, path, upload.data)
        except FileExistsError as e:
            logger.error(f"Image name collision: {filename}")
            raise exceptions.storage_error() from e
        except OSError as e:
            logger.error(f"Failed to store image {filename}: {e}")
            await asyncio.to_thread(self._unlink, path)
            raise exceptions.storage_error() from e

        reference = f"{self._url_prefix}/{filename}"
        logger.info(f"Stored image {reference} ({upload.size} bytes)")
        return reference

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        with path.open("xb") as f:
            f.write(data)

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to remove partial file {path}: {e}")
            return False

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def path_for(self, reference: Optional[str]) -> Optional[Path]:
        """
        Resolve a public reference to a file path inside the upload directory.

        Returns None for references outside the upload prefix or naming
        anything other than a plain filename.
        """
        if not reference:
            return None

        prefix = f"{self._url_prefix}/"
        if not reference.startswith(prefix):
            return None

        filename = reference[len(prefix):]
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None

        return self._directory / filename

    def exists(self, reference: Optional[str]) -> bool:
        path = self.path_for(reference)
        return path is not None and path.is_file()

    # =========================================================================
    # REMOVAL
    # =========================================================================

    async def delete(self, reference: Optional[str]) -> bool:
        """
        Remove a stored image.

        Missing files and unknown references are ignored. Errors are
        logged and never raised.

        Returns:
            True if a file was removed
        """
        path = self.path_for(reference)
        if path is None:
            if reference:
                logger.warning(f"Ignoring delete of foreign reference: {reference}")
            return False

        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.debug(f"Image already gone: {reference}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete image {reference}: {e}")
            return False

        logger.info(f"Deleted image {reference}")
        return True

    def schedule_delete(self, reference: Optional[str]) -> Optional[asyncio.Task]:
        """
        Remove an image in the background and return immediately.

        Must be called from inside the running event loop.
        """
        if not reference:
            return None

        task = asyncio.get_running_loop().create_task(self.delete(reference))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all scheduled deletions to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
