"""
Category Repository - Data Access Layer for product categories
"""
from typing import List, Optional

from apparel.core.database import get_db_connection_dict
from apparel.domain.catalog import Category


class CategoryRepository:

    @staticmethod
    def _map_row_to_category(row: dict) -> Category:
        return Category(
            id=row['id'],
            name=row['name'],
            description=row.get('description'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_all(self) -> List[Category]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, name, description, created_at, updated_at
                FROM categories
                ORDER BY name
            """)
            return [self._map_row_to_category(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, category_id: int) -> Optional[Category]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, name, description, created_at, updated_at
                FROM categories
                WHERE id = %s
            """, (category_id,))
            row = cursor.fetchone()
            return self._map_row_to_category(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Case-insensitive name lookup"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            query = "SELECT 1 FROM categories WHERE LOWER(name) = LOWER(%s)"
            params = [name]
            if exclude_id is not None:
                query += " AND id <> %s"
                params.append(exclude_id)
            cursor.execute(query, params)
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def create(self, name: str, description: Optional[str] = None) -> Category:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO categories (name, description)
                VALUES (%s, %s)
                RETURNING id, name, description, created_at, updated_at
            """, (name, description))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_category(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, category_id: int, fields: dict) -> Optional[Category]:
        if not fields:
            return self.find_by_id(category_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields] + ["updated_at = NOW()"]
            cursor.execute(f"""
                UPDATE categories
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING id, name, description, created_at, updated_at
            """, list(fields.values()) + [category_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_category(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, category_id: int) -> bool:
        """Delete a category and drop it from every product that references it"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE products
                SET category_ids = array_remove(category_ids, %s)
                WHERE %s = ANY(category_ids)
            """, (category_id, category_id))
            cursor.execute("DELETE FROM categories WHERE id = %s", (category_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
