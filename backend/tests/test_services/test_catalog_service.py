"""
Unit tests for CatalogService
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from apparel.core.exceptions import ConflictError, NotFoundError, ValidationError
from apparel.domain.catalog import CategoryCreate, ColorCreate, InventoryUpdate, ProductCreate, SizeVariant, SizeVariantCreate
from apparel.services.catalog_service import CatalogService, clamp_quantity


@pytest.fixture
def products():
    return MagicMock()


@pytest.fixture
def categories():
    return MagicMock()


@pytest.fixture
def service(products, categories):
    return CatalogService(product_repository=products, category_repository=categories)


class TestInventory:

    def test_clamp_quantity(self):
        assert clamp_quantity(-5) == 0
        assert clamp_quantity(12) == 12

    def test_batch_update_clamps_negative_stock(self, service, products):
        products.set_quantities.return_value = [
            SizeVariant(id=1000, shirt_color_id=10, size="S", quantity=0),
        ]

        updated = service.batch_update_inventory([
            InventoryUpdate(variant_id=1000, quantity=-3),
            InventoryUpdate(variant_id=4242, quantity=8),
        ])

        products.set_quantities.assert_called_once_with({1000: 0, 4242: 8})
        assert [variant.id for variant in updated] == [1000]

    def test_single_update_of_unknown_variant(self, service, products):
        products.set_quantities.return_value = []

        with pytest.raises(NotFoundError):
            service.update_inventory(4242, 3)

    def test_inventory_grid(self, service, products, sample_product):
        products.find_by_id.return_value = sample_product

        grid = service.get_inventory(1)

        assert grid["total_quantity"] == 8
        assert grid["colors"][0]["sizes"][2] == {"variant_id": 1002, "size": "L", "quantity": 3}


class TestCatalogReads:

    def test_inactive_product_hidden_from_customers(self, service, products, sample_product):
        sample_product.is_active = False
        products.find_by_id.return_value = sample_product

        with pytest.raises(NotFoundError):
            service.get_product(1)
        assert service.get_product(1, include_inactive=True) is sample_product

    def test_color_sizes_include_unit_price(self, service, products, sample_product, sample_color):
        products.find_color.return_value = sample_color
        products.find_by_id.return_value = sample_product

        sizes = service.get_color_sizes(10)

        large = [entry for entry in sizes if entry["size"] == "L"][0]
        assert large["price"] == 170000.0
        assert large["in_stock"] is True
        assert [entry for entry in sizes if entry["size"] == "M"][0]["in_stock"] is False

    def test_list_products_pages(self, service, products):
        products.find_all.return_value = ([], 0)

        service.list_products(page=3, limit=12, search="tee")

        products.find_all.assert_called_once_with(include_inactive=False, limit=12, offset=24, search="tee")


class TestCatalogWrites:

    def test_create_product_checks_categories(self, service, categories):
        categories.find_by_id.return_value = None

        with pytest.raises(ValidationError):
            service.create_product(ProductCreate(name="Tee", base_price=Decimal("10"), category_ids=[99]))

    def test_duplicate_color_name(self, service, products, sample_product):
        products.find_by_id.return_value = sample_product
        products.color_name_exists.return_value = True

        with pytest.raises(ConflictError):
            service.create_color(1, ColorCreate(color_name=" black "))

        products.color_name_exists.assert_called_once_with(1, "black")

    def test_duplicate_size(self, service, products, sample_color):
        products.find_color.return_value = sample_color

        with pytest.raises(ConflictError):
            service.add_size(10, SizeVariantCreate(size="S"))

    def test_duplicate_category(self, service, categories):
        categories.name_exists.return_value = True

        with pytest.raises(ConflictError):
            service.create_category(CategoryCreate(name="Hoodies"))
