"""
Feedback Repository - Data Access Layer for order feedback
"""
from typing import List

from apparel.core.database import get_db_connection_dict
from apparel.domain.feedback import Feedback


class FeedbackRepository:

    def create(self, order_id: int, user_id: str, rating: int, comment: str) -> Feedback:
        """Insert feedback; a second submission for the same order replaces the first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO feedback (order_id, user_id, rating, comment)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (order_id, user_id)
                DO UPDATE SET rating = EXCLUDED.rating, comment = EXCLUDED.comment, updated_at = NOW()
                RETURNING id, order_id, user_id, rating, comment, created_at, updated_at
            """, (order_id, user_id, rating, comment))
            row = cursor.fetchone()
            conn.commit()
            return Feedback(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_product(self, product_id: int) -> List[Feedback]:
        """Feedback left on orders that contain the product"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT f.id, f.order_id, f.user_id, f.rating, f.comment, f.created_at, f.updated_at
                FROM feedback f
                JOIN orders o ON o.id = f.order_id
                WHERE EXISTS (
                    SELECT 1 FROM jsonb_array_elements(o.items) item
                    WHERE (item->>'product_id')::int = %s
                )
                ORDER BY f.created_at DESC
            """, (product_id,))
            return [Feedback(**row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
