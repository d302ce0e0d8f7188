"""
==============================================================================
Catalog Service Tests
==============================================================================

Tests for validation, image lifecycle and broadcast rules of CatalogService.

==============================================================================
"""

import pytest

from app.core import AppException
from app.services import CatalogService


pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(repository, image_store, publisher) -> CatalogService:
    return CatalogService(repository, image_store, publisher)


def stored_files(image_store):
    return sorted(p.name for p in image_store.directory.iterdir())


class TestCreate:
    """Tests for create_product."""

    async def test_create_sets_equal_timestamps(self, service, repository):
        """Test new product has createdAt == updatedAt."""
        product = await service.create_product("Chair", "Wood chair", "49.90")

        assert product.price == 49.9
        assert product.image_url is None
        assert product.created_at == product.updated_at
        assert repository.list() == [product]

    async def test_create_ids_are_unique(self, service):
        """Test ids never repeat."""
        ids = {(await service.create_product("A", "B", "1")).id for _ in range(10)}
        assert len(ids) == 10

    @pytest.mark.parametrize("price", ["-5", "abc", "nan", "inf"])
    async def test_invalid_price_leaves_repository_unchanged(
        self, service, repository, publisher, price
    ):
        """Test rejected price creates nothing and publishes nothing."""
        with pytest.raises(AppException) as exc_info:
            await service.create_product("Chair", "Wood chair", price)

        assert exc_info.value.code == "INVALID_PRICE"
        assert exc_info.value.status_code == 400
        assert len(repository) == 0
        assert publisher.snapshots == []

    async def test_missing_fields_reported(self, service):
        """Test all missing fields are listed."""
        with pytest.raises(AppException) as exc_info:
            await service.create_product(None, "", "10")

        assert exc_info.value.code == "MISSING_FIELDS"
        assert exc_info.value.details["missing"] == ["titulo", "descricao"]

    async def test_failed_validation_rolls_back_upload(
        self, service, image_store, png_upload
    ):
        """Test stored upload is deleted when validation fails."""
        with pytest.raises(AppException):
            await service.create_product("Chair", None, "10", png_upload)

        assert len(image_store.deleted) == 1
        assert stored_files(image_store) == []

    async def test_create_with_image(self, service, image_store, png_upload):
        """Test image reference points at the stored file."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)

        assert image_store.exists(product.image_url)
        assert image_store.deleted == []


class TestUpdate:
    """Tests for update_product."""

    async def test_partial_update_keeps_other_fields(self, service):
        """Test unsupplied fields keep their values."""
        product = await service.create_product("Chair", "Wood chair", "49.90")

        updated = await service.update_product(product.id, descricao="Oak chair")

        assert updated.description == "Oak chair"
        assert updated.title == product.title
        assert updated.price == product.price
        assert updated.image_url == product.image_url
        assert updated.id == product.id
        assert updated.created_at == product.created_at
        assert updated.updated_at >= product.updated_at

    async def test_unknown_id_rolls_back_upload(self, service, image_store, png_upload):
        """Test 404 deletes the just-stored upload."""
        with pytest.raises(AppException) as exc_info:
            await service.update_product("missing", titulo="X", image=png_upload)

        assert exc_info.value.status_code == 404
        assert stored_files(image_store) == []

    async def test_failed_rollback_keeps_original_error(
        self, service, image_store, png_upload, monkeypatch
    ):
        """Test a cleanup failure does not mask the request error."""
        async def failing_delete(reference):
            image_store.deleted.append(reference)
            return False

        monkeypatch.setattr(image_store, "delete", failing_delete)

        with pytest.raises(AppException) as exc_info:
            await service.update_product("missing", image=png_upload)

        assert exc_info.value.code == "PRODUCT_NOT_FOUND"
        assert len(image_store.deleted) == 1

    async def test_whitespace_price_is_invalid(self, service, repository):
        """Test only an empty price counts as not supplied."""
        product = await service.create_product("Chair", "Wood chair", "10")

        with pytest.raises(AppException) as exc_info:
            await service.update_product(product.id, preco="   ")

        assert exc_info.value.code == "INVALID_PRICE"
        assert repository.get(product.id) == product

        updated = await service.update_product(product.id, preco="")
        assert updated.price == 10.0

    async def test_invalid_price_keeps_product_and_image(
        self, service, repository, image_store, png_upload, gif_upload
    ):
        """Test failed update leaves product and its old image intact."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)

        with pytest.raises(AppException):
            await service.update_product(
                product.id, titulo="Changed", preco="-1", image=gif_upload
            )

        assert repository.get(product.id) == product
        assert stored_files(image_store) == [product.image_url.rsplit("/", 1)[1]]

    async def test_new_image_replaces_old_file(
        self, service, image_store, png_upload, gif_upload
    ):
        """Test previous image is removed after the swap."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)

        updated = await service.update_product(product.id, image=gif_upload)
        await image_store.drain()

        assert updated.image_url != product.image_url
        assert image_store.scheduled == [product.image_url]
        assert not image_store.exists(product.image_url)
        assert image_store.exists(updated.image_url)

    async def test_update_without_image_keeps_file(self, service, image_store, png_upload):
        """Test text-only update does not touch the image."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)

        await service.update_product(product.id, preco="12")
        await image_store.drain()

        assert image_store.scheduled == []
        assert image_store.exists(product.image_url)


class TestDelete:
    """Tests for delete_product."""

    async def test_delete_without_image_touches_no_files(self, service, image_store):
        """Test no filesystem deletion for image-less product."""
        product = await service.create_product("Chair", "Wood chair", "10")

        removed = await service.delete_product(product.id)

        assert removed == product
        assert image_store.deleted == []
        assert image_store.scheduled == []

    async def test_delete_removes_image(self, service, image_store, png_upload):
        """Test image file is removed in the background."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)

        await service.delete_product(product.id)
        await image_store.drain()

        assert not image_store.exists(product.image_url)

    async def test_delete_with_missing_file_succeeds(self, service, image_store, png_upload):
        """Test an already-missing image is not an error."""
        product = await service.create_product("Chair", "Wood chair", "10", png_upload)
        image_store.path_for(product.image_url).unlink()

        removed = await service.delete_product(product.id)
        await image_store.drain()

        assert removed.id == product.id

    async def test_delete_twice(self, service):
        """Test second delete raises PRODUCT_NOT_FOUND."""
        product = await service.create_product("Chair", "Wood chair", "10")
        await service.delete_product(product.id)

        with pytest.raises(AppException) as exc_info:
            await service.delete_product(product.id)

        assert exc_info.value.code == "PRODUCT_NOT_FOUND"


class TestBroadcast:
    """Tests for one-broadcast-per-mutation."""

    async def test_each_mutation_publishes_current_catalog(
        self, service, repository, publisher
    ):
        """Test create, update and delete each publish exactly once."""
        first = await service.create_product("A", "a", "1")
        assert len(publisher.snapshots) == 1
        assert publisher.snapshots[-1] == repository.list()

        second = await service.create_product("B", "b", "2")
        assert len(publisher.snapshots) == 2
        assert publisher.snapshots[-1] == [first, second]

        updated = await service.update_product(first.id, titulo="A2")
        assert len(publisher.snapshots) == 3
        assert publisher.snapshots[-1] == [updated, second]

        await service.delete_product(second.id)
        assert len(publisher.snapshots) == 4
        assert publisher.snapshots[-1] == [updated]

    async def test_reads_and_failures_do_not_publish(self, service, publisher):
        """Test lookups and rejected requests never publish."""
        product = await service.create_product("A", "a", "1")
        publisher.snapshots.clear()

        service.list_products()
        service.get_product(product.id)
        with pytest.raises(AppException):
            await service.update_product(product.id, preco="abc")
        with pytest.raises(AppException):
            await service.delete_product("missing")

        assert publisher.snapshots == []
