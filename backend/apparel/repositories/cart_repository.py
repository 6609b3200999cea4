"""
Cart Repository - Data Access Layer for carts and cart items
"""
from typing import List, Optional

from psycopg2.extras import Json

from apparel.core.database import get_db_connection_dict
from apparel.domain.cart import Cart, CartItem, SizeQuantity


class CartRepository:
    """
    One cart per user. Items store quantity_by_size as a JSONB array of
    {"size", "quantity"} objects.
    """

    @staticmethod
    def _map_row_to_item(row: dict) -> CartItem:
        return CartItem(
            id=row['id'],
            cart_id=row['cart_id'],
            design_id=row['design_id'],
            quantity_by_size=[SizeQuantity(**entry) for entry in (row.get('quantity_by_size') or [])],
            added_at=row.get('added_at')
        )

    @staticmethod
    def _dump_sizes(quantity_by_size: List[SizeQuantity]) -> Json:
        return Json([entry.model_dump() for entry in quantity_by_size])

    def find_by_user(self, user_id: str) -> Optional[Cart]:
        """
        Find the user's cart with its items

        Returns:
            Cart or None if the user never added anything
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, user_id, created_at, updated_at
                FROM carts
                WHERE user_id = %s
            """, (user_id,))
            row = cursor.fetchone()
            if not row:
                return None

            cart = Cart(**row)
            cursor.execute("""
                SELECT id, cart_id, design_id, quantity_by_size, added_at
                FROM cart_items
                WHERE cart_id = %s
                ORDER BY added_at, id
            """, (cart.id,))
            cart.items = [self._map_row_to_item(item) for item in cursor.fetchall()]
            return cart

        finally:
            cursor.close()
            conn.close()

    def add_item(self, user_id: str, design_id: int, quantity_by_size: List[SizeQuantity]) -> int:
        """
        Append an item, creating the cart on first use

        Returns:
            Number of items in the cart after the insert
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO carts (user_id)
                VALUES (%s)
                ON CONFLICT (user_id) DO UPDATE SET updated_at = NOW()
                RETURNING id
            """, (user_id,))
            cart_id = cursor.fetchone()['id']

            cursor.execute("""
                INSERT INTO cart_items (cart_id, design_id, quantity_by_size)
                VALUES (%s, %s, %s)
            """, (cart_id, design_id, self._dump_sizes(quantity_by_size)))

            cursor.execute("SELECT COUNT(*) as total FROM cart_items WHERE cart_id = %s", (cart_id,))
            count = cursor.fetchone()['total']
            conn.commit()
            return count

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_item(self, cart_id: int, item_id: int, quantity_by_size: List[SizeQuantity]) -> Optional[CartItem]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE cart_items
                SET quantity_by_size = %s
                WHERE id = %s AND cart_id = %s
                RETURNING id, cart_id, design_id, quantity_by_size, added_at
            """, (self._dump_sizes(quantity_by_size), item_id, cart_id))
            row = cursor.fetchone()
            cursor.execute("UPDATE carts SET updated_at = NOW() WHERE id = %s", (cart_id,))
            conn.commit()
            return self._map_row_to_item(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def remove_items(self, cart_id: int, item_ids: Optional[List[int]] = None) -> int:
        """
        Remove items from a cart

        Args:
            cart_id: Cart ID
            item_ids: Items to remove; None empties the cart

        Returns:
            Number of removed items
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            if item_ids is None:
                cursor.execute("DELETE FROM cart_items WHERE cart_id = %s", (cart_id,))
            else:
                cursor.execute(
                    "DELETE FROM cart_items WHERE cart_id = %s AND id = ANY(%s)",
                    (cart_id, list(item_ids))
                )
            removed = cursor.rowcount
            cursor.execute("UPDATE carts SET updated_at = NOW() WHERE id = %s", (cart_id,))
            conn.commit()
            return removed

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
