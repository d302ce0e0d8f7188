"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides isolated settings, application, client and image fixtures.

Every test gets its own upload directory under tmp_path and a freshly built
Application, so catalogs and files never leak between tests.

==============================================================================
"""

import pytest
from typing import Generator, List, Tuple
from fastapi.testclient import TestClient

from app.catalog import Product, ProductRepository
from app.config import Settings
from app.main import Application
from app.storage import ImageStore, ImageUpload


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
GIF_BYTES = b"GIF89a" + b"\x00" * 64


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a per-test upload directory."""
    return Settings(
        _env_file=None,
        upload_directory=str(tmp_path / "uploads"),
    )


@pytest.fixture
def application(settings: Settings) -> Application:
    """A fresh application with an empty catalog."""
    return Application(settings)


@pytest.fixture
def client(application: Application) -> Generator[TestClient, None, None]:
    """Test client bound to the fresh application."""
    with TestClient(application.app) as test_client:
        yield test_client


@pytest.fixture
def upload_dir(application: Application):
    """Upload directory of the fresh application."""
    return application.image_store.directory


# ============================================================================
# SERVICE-LEVEL FIXTURES
# ============================================================================

class RecordingPublisher:
    """Publisher that stores every catalog snapshot it receives."""

    def __init__(self) -> None:
        self.snapshots: List[List[Product]] = []

    async def publish(self, products: List[Product]) -> int:
        self.snapshots.append(list(products))
        return 0


class RecordingImageStore(ImageStore):
    """Image store that records delete calls."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.deleted: List[str] = []
        self.scheduled: List[str] = []

    async def delete(self, reference):
        self.deleted.append(reference)
        return await super().delete(reference)

    def schedule_delete(self, reference):
        self.scheduled.append(reference)
        return super().schedule_delete(reference)


@pytest.fixture
def repository() -> ProductRepository:
    return ProductRepository()


@pytest.fixture
def image_store(tmp_path) -> RecordingImageStore:
    return RecordingImageStore(tmp_path / "images")


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


# ============================================================================
# UPLOAD FIXTURES
# ============================================================================

@pytest.fixture
def png_upload() -> ImageUpload:
    return ImageUpload(data=PNG_BYTES, filename="photo.png", content_type="image/png")


@pytest.fixture
def gif_upload() -> ImageUpload:
    return ImageUpload(data=GIF_BYTES, filename="anim.gif", content_type="image/gif")


@pytest.fixture
def png_file() -> Tuple[str, bytes, str]:
    """Multipart file tuple for the test client."""
    return ("photo.png", PNG_BYTES, "image/png")


@pytest.fixture
def gif_file() -> Tuple[str, bytes, str]:
    return ("anim.gif", GIF_BYTES, "image/gif")
