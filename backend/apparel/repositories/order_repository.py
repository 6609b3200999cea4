"""
Order Repository - Data Access Layer for Orders

Orders keep their purchased items as a JSONB array of snapshots, so item
name searches and sales aggregates run through jsonb_array_elements.
"""
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import Json

from apparel.core.database import get_db_connection_dict
from apparel.domain.order import Order, OrderItem
from apparel.domain.serialization import jsonable


ORDER_COLUMNS = """
    id, user_id, stripe_payment_intent_id, status, items, total_amount,
    shipping_details, payment_method, payment_method_details, shipper_id,
    shipping_image, notes, payment_failure_reason, refund_amount, refunded_at,
    partially_refunded, created_at, updated_at
"""

JSONB_COLUMNS = ("items", "shipping_details", "payment_method_details")


class OrderRepository:
    """
    Repository for Order data access

    Status changes driven by payment events are conditional updates
    (WHERE status = expected) so replayed events are harmless.
    """

    @staticmethod
    def _map_row_to_order(row: dict) -> Order:
        return Order(
            id=row['id'],
            user_id=row['user_id'],
            stripe_payment_intent_id=row.get('stripe_payment_intent_id'),
            status=row['status'],
            items=row.get('items') or [],
            total_amount=row['total_amount'],
            shipping_details=row.get('shipping_details'),
            payment_method=row.get('payment_method'),
            payment_method_details=row.get('payment_method_details'),
            shipper_id=row.get('shipper_id'),
            shipping_image=row.get('shipping_image'),
            notes=row.get('notes'),
            payment_failure_reason=row.get('payment_failure_reason'),
            refund_amount=row.get('refund_amount'),
            refunded_at=row.get('refunded_at'),
            partially_refunded=bool(row.get('partially_refunded')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    @staticmethod
    def _adapt(column: str, value):
        if column in JSONB_COLUMNS and value is not None:
            return Json(jsonable(value))
        return value

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, order_id: int) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {ORDER_COLUMNS} FROM orders WHERE id = %s", (order_id,))
            row = cursor.fetchone()
            return self._map_row_to_order(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_payment_intent(self, payment_intent_id: str) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                f"SELECT {ORDER_COLUMNS} FROM orders WHERE stripe_payment_intent_id = %s",
                (payment_intent_id,)
            )
            row = cursor.fetchone()
            return self._map_row_to_order(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_payment_intents(self, payment_intent_ids: List[str]) -> Dict[str, Order]:
        if not payment_intent_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                f"SELECT {ORDER_COLUMNS} FROM orders WHERE stripe_payment_intent_id = ANY(%s)",
                (list(payment_intent_ids),)
            )
            orders = [self._map_row_to_order(row) for row in cursor.fetchall()]
            return {order.stripe_payment_intent_id: order for order in orders}

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
        shipper_id: Optional[str] = None,
        unassigned: bool = False,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            user_id: Only this customer's orders
            status: Single status filter
            statuses: Any of these statuses
            search: Case-insensitive match on purchased item names
            shipper_id: Only orders assigned to this shipper
            unassigned: Only orders without a shipper
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of orders, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if user_id:
                conditions.append("user_id = %s")
                params.append(user_id)

            if status:
                conditions.append("status = %s")
                params.append(status)

            if statuses:
                conditions.append("status = ANY(%s)")
                params.append(list(statuses))

            if shipper_id:
                conditions.append("shipper_id = %s")
                params.append(shipper_id)

            if unassigned:
                conditions.append("shipper_id IS NULL")

            if search:
                conditions.append("""
                    EXISTS (
                        SELECT 1 FROM jsonb_array_elements(items) item
                        WHERE item->>'name' ILIKE %s
                    )
                """)
                params.append(f"%{search}%")

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            orders = [self._map_row_to_order(row) for row in cursor.fetchall()]
            return orders, total

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        user_id: str,
        items: List[OrderItem],
        total_amount,
        status: str = "pending",
        stripe_payment_intent_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        payment_method_details: Optional[dict] = None,
        shipping_details: Optional[dict] = None
    ) -> Tuple[Order, bool]:
        """
        Insert an order, once per payment intent

        Returns:
            Tuple of (order, created). When an order already exists for the
            payment intent it is returned unchanged with created=False.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO orders (
                    user_id, stripe_payment_intent_id, status, items, total_amount,
                    payment_method, payment_method_details, shipping_details
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (stripe_payment_intent_id) DO NOTHING
                RETURNING {ORDER_COLUMNS}
            """, (
                user_id,
                stripe_payment_intent_id,
                status,
                Json([jsonable(item.model_dump()) for item in items]),
                total_amount,
                payment_method,
                self._adapt("payment_method_details", payment_method_details),
                self._adapt("shipping_details", shipping_details)
            ))
            row = cursor.fetchone()
            created = row is not None

            if not created:
                cursor.execute(
                    f"SELECT {ORDER_COLUMNS} FROM orders WHERE stripe_payment_intent_id = %s",
                    (stripe_payment_intent_id,)
                )
                row = cursor.fetchone()

            conn.commit()
            return self._map_row_to_order(row), created

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(
        self,
        order_id: int,
        fields: dict,
        expected_status: Optional[Sequence[str]] = None
    ) -> Optional[Order]:
        """
        Update columns of an order

        Args:
            order_id: Order ID
            fields: {column: value}
            expected_status: When given, only update if the current status is one of these

        Returns:
            Updated order, or None if nothing matched
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields] + ["updated_at = NOW()"]
            params = [self._adapt(column, value) for column, value in fields.items()]
            where = "id = %s"
            params.append(order_id)
            if expected_status:
                where += " AND status = ANY(%s)"
                params.append(list(expected_status))

            cursor.execute(f"""
                UPDATE orders
                SET {', '.join(assignments)}
                WHERE {where}
                RETURNING {ORDER_COLUMNS}
            """, params)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_order(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_by_payment_intent(
        self,
        payment_intent_id: str,
        fields: dict,
        expected_status: Optional[Sequence[str]] = None
    ) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields] + ["updated_at = NOW()"]
            params = [self._adapt(column, value) for column, value in fields.items()]
            where = "stripe_payment_intent_id = %s"
            params.append(payment_intent_id)
            if expected_status:
                where += " AND status = ANY(%s)"
                params.append(list(expected_status))

            cursor.execute(f"""
                UPDATE orders
                SET {', '.join(assignments)}
                WHERE {where}
                RETURNING {ORDER_COLUMNS}
            """, params)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_order(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count_by_status(self) -> Dict[str, int]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT status, COUNT(*) as count
                FROM orders
                GROUP BY status
            """)
            return {row['status']: row['count'] for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def revenue_summary(self, since: Optional[datetime] = None) -> dict:
        """Order count and revenue of non-canceled orders, optionally since a date"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            query = """
                SELECT
                    COUNT(*) as orders,
                    COALESCE(SUM(total_amount), 0) as revenue
                FROM orders
                WHERE status <> 'canceled'
            """
            params = []
            if since is not None:
                query += " AND created_at >= %s"
                params.append(since)
            cursor.execute(query, params)
            return dict(cursor.fetchone())

        finally:
            cursor.close()
            conn.close()

    def top_products(self, limit: int = 5) -> List[dict]:
        """Best sellers by units sold across non-canceled orders"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                WITH sold AS (
                    SELECT
                        item->>'name' as name,
                        item->>'product_id' as product_id,
                        (item->>'total_price')::numeric as revenue,
                        (
                            SELECT COALESCE(SUM((size->>'quantity')::int), 0)
                            FROM jsonb_array_elements(item->'sizes') size
                        ) as quantity
                    FROM orders o, jsonb_array_elements(o.items) item
                    WHERE o.status <> 'canceled'
                )
                SELECT
                    name,
                    MAX(product_id) as product_id,
                    SUM(quantity) as sales,
                    COALESCE(SUM(revenue), 0) as revenue
                FROM sold
                GROUP BY name
                ORDER BY sales DESC, revenue DESC
                LIMIT %s
            """, (limit,))
            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def daily_revenue(self, since: datetime) -> List[dict]:
        """Revenue and order count per day for non-canceled orders"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    DATE(created_at) as day,
                    COUNT(*) as orders,
                    COALESCE(SUM(total_amount), 0) as revenue
                FROM orders
                WHERE status <> 'canceled' AND created_at >= %s
                GROUP BY DATE(created_at)
                ORDER BY day
            """, (since,))
            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
