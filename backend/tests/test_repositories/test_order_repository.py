"""
Unit tests for OrderRepository and CartRepository

These tests validate repository logic without requiring a database connection.
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

from apparel.domain.cart import SizeQuantity
from apparel.domain.order import OrderItem, OrderItemSize
from apparel.repositories.cart_repository import CartRepository
from apparel.repositories.order_repository import OrderRepository


def order_row(**overrides):
    row = {
        'id': 900,
        'user_id': 'user_customer',
        'stripe_payment_intent_id': 'pi_test_123',
        'status': 'processing',
        'items': [{
            'design_id': 50, 'product_id': 1, 'name': 'Classic Tee', 'color': 'Black',
            'sizes': [{'size': 'S', 'quantity': 2, 'price_per_unit': 150000}],
            'total_price': 300000, 'image_url': None,
        }],
        'total_amount': Decimal('300000'),
        'shipping_details': {'city': 'Hanoi', 'method': 'express'},
        'payment_method': 'card',
        'payment_method_details': {'brand': 'visa', 'last4': '4242'},
        'shipper_id': None,
        'shipping_image': None,
        'notes': None,
        'payment_failure_reason': None,
        'refund_amount': None,
        'refunded_at': None,
        'partially_refunded': None,
        'created_at': datetime(2025, 3, 1, 9, 30),
        'updated_at': None,
    }
    row.update(overrides)
    return row


def mock_connection(mock_get_conn):
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_get_conn.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


ORDER_ITEM = OrderItem(
    design_id=50, name='Classic Tee', color='Black',
    sizes=[OrderItemSize(size='S', quantity=2, price_per_unit=Decimal('150000'))],
    total_price=Decimal('300000'),
)


class TestOrderRepository:
    """Test OrderRepository methods"""

    @patch('apparel.repositories.order_repository.get_db_connection_dict')
    def test_find_by_id_maps_jsonb_columns(self, mock_get_conn):
        # Arrange
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = order_row()

        # Act
        order = OrderRepository().find_by_id(900)

        # Assert
        assert order.items[0].sizes[0].price_per_unit == Decimal('150000')
        assert order.shipping_details.city == 'Hanoi'
        assert order.is_express is True
        assert order.payment_method_details.last4 == '4242'
        assert order.partially_refunded is False
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('apparel.repositories.order_repository.get_db_connection_dict')
    def test_create_inserts_new_order(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = order_row()

        order, created = OrderRepository().create(
            user_id='user_customer', items=[ORDER_ITEM], total_amount=Decimal('300000'),
            status='processing', stripe_payment_intent_id='pi_test_123'
        )

        assert created is True
        assert order.id == 900
        assert mock_cursor.execute.call_count == 1
        assert 'ON CONFLICT (stripe_payment_intent_id) DO NOTHING' in mock_cursor.execute.call_args[0][0]
        mock_conn.commit.assert_called_once()

    @patch('apparel.repositories.order_repository.get_db_connection_dict')
    def test_create_returns_existing_order_for_same_intent(self, mock_get_conn):
        """A second insert for the same payment intent returns the first order"""
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [None, order_row(id=901)]

        order, created = OrderRepository().create(
            user_id='user_customer', items=[ORDER_ITEM], total_amount=Decimal('300000'),
            stripe_payment_intent_id='pi_test_123'
        )

        assert created is False
        assert order.id == 901
        assert mock_cursor.execute.call_count == 2

    @patch('apparel.repositories.order_repository.get_db_connection_dict')
    def test_conditional_update(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        order = OrderRepository().update(900, {'status': 'processing'}, expected_status=['pending'])

        assert order is None
        query, params = mock_cursor.execute.call_args[0]
        assert 'status = ANY(%s)' in query
        assert params == ['processing', 900, ['pending']]
        mock_conn.commit.assert_called_once()

    @patch('apparel.repositories.order_repository.get_db_connection_dict')
    def test_find_all_with_filters(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'total': 1}
        mock_cursor.fetchall.return_value = [order_row()]

        orders, total = OrderRepository().find_all(status='shipping', unassigned=True, limit=5, offset=10)

        assert total == 1
        assert len(orders) == 1
        query, params = mock_cursor.execute.call_args[0]
        assert 'shipper_id IS NULL' in query
        assert params == ['shipping', 5, 10]


class TestCartRepository:
    """Test CartRepository methods"""

    @patch('apparel.repositories.cart_repository.get_db_connection_dict')
    def test_find_by_user_loads_items(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'id': 7, 'user_id': 'user_customer',
                                             'created_at': None, 'updated_at': None}
        mock_cursor.fetchall.return_value = [
            {'id': 71, 'cart_id': 7, 'design_id': 50,
             'quantity_by_size': [{'size': 'S', 'quantity': 2}], 'added_at': None},
        ]

        cart = CartRepository().find_by_user('user_customer')

        assert cart.id == 7
        assert cart.items[0].total_quantity == 2
        mock_cursor.close.assert_called_once()

    @patch('apparel.repositories.cart_repository.get_db_connection_dict')
    def test_find_by_user_without_cart(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert CartRepository().find_by_user('user_new') is None

    @patch('apparel.repositories.cart_repository.get_db_connection_dict')
    def test_add_item_returns_item_count(self, mock_get_conn):
        mock_conn, mock_cursor = mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [{'id': 7}, {'total': 3}]

        count = CartRepository().add_item('user_customer', 50, [SizeQuantity(size='M', quantity=1)])

        assert count == 3
        mock_conn.commit.assert_called_once()
