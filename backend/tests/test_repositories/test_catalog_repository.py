"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from apparel.domain.catalog import FIXED_SIZES, Product
from apparel.repositories.product_repository import ProductRepository


def product_row(**overrides):
    row = {
        'id': 1,
        'name': 'Classic Tee',
        'description': 'Heavy cotton tee',
        'base_price': Decimal('150000'),
        'category_ids': [1, 2],
        'is_active': True,
        'created_at': datetime(2025, 1, 1),
        'updated_at': None,
    }
    row.update(overrides)
    return row


def color_row(color_id=10, shirt_id=1, name='Black'):
    return {'id': color_id, 'shirt_id': shirt_id, 'color_name': name, 'color_value': '#000000',
            'created_at': None, 'updated_at': None}


def size_row(variant_id, size, color_id=10, additional_price='0', quantity=0):
    return {'id': variant_id, 'shirt_color_id': color_id, 'size': size,
            'additional_price': Decimal(additional_price), 'quantity': quantity}


@pytest.fixture
def mock_db():
    with patch('apparel.repositories.product_repository.get_db_connection_dict') as mock_get_conn:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        yield mock_conn, mock_cursor


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product_with_colors(self, mock_db):
        """find_by_id loads colors, then their images and sizes"""
        # Arrange
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row()
        mock_cursor.fetchall.side_effect = [
            [color_row()],
            [{'id': 100, 'shirt_color_id': 10, 'url': 'https://cdn.example.com/f.png',
              'view_side': 'front', 'is_primary': True, 'x_editable_zone': 250, 'y_editable_zone': 400,
              'width_editable_zone': 300, 'height_editable_zone': 300, 'image_width': 800, 'image_height': 797}],
            [size_row(1000, 'S', quantity=4), size_row(1001, 'L', additional_price='20000')],
        ]

        # Act
        product = ProductRepository().find_by_id(1)

        # Assert
        assert isinstance(product, Product)
        assert product.base_price == Decimal('150000')
        assert product.category_ids == [1, 2]
        color = product.colors[0]
        assert color.primary_image.url == 'https://cdn.example.com/f.png'
        assert [variant.size for variant in color.sizes] == ['S', 'L']
        assert color.find_size('S').in_stock is True
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    def test_find_by_id_not_found(self, mock_db):
        """find_by_id returns None when the product does not exist"""
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert ProductRepository().find_by_id(999) is None
        mock_cursor.close.assert_called_once()

    def test_find_by_id_without_colors_runs_one_query(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row()

        product = ProductRepository().find_by_id(1, with_colors=False)

        assert product.colors == []
        assert mock_cursor.execute.call_count == 1

    def test_create_color_seeds_fixed_sizes(self, mock_db):
        """A new color gets one zero-priced, zero-stock variant per fixed size"""
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.side_effect = [color_row(name='Navy')] + [
            size_row(2000 + index, size) for index, size in enumerate(FIXED_SIZES)
        ]

        color = ProductRepository().create_color(1, 'Navy', '#000080')

        assert [variant.size for variant in color.sizes] == FIXED_SIZES
        assert all(variant.quantity == 0 for variant in color.sizes)
        mock_conn.commit.assert_called_once()

    def test_set_quantities_skips_unknown_variants(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.side_effect = [size_row(1000, 'S', quantity=7), None]

        updated = ProductRepository().set_quantities({1000: 7, 4242: 3})

        assert [variant.id for variant in updated] == [1000]
        assert updated[0].quantity == 7
        mock_conn.commit.assert_called_once()

    def test_write_failure_rolls_back(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            ProductRepository().set_quantities({1000: 1})

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()
        mock_cursor.close.assert_called_once()
