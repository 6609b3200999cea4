"""
Design Template Repository - Data Access Layer for design templates
"""
from typing import List, Optional, Tuple

from apparel.core.database import get_db_connection_dict
from apparel.domain.design_template import DesignTemplate


TEMPLATE_COLUMNS = """
    id, name, image_url, category, is_active, featured, rating,
    total_ratings, created_at, updated_at
"""

TEMPLATE_SORTS = {
    "newest": "created_at DESC, id DESC",
    "popular": "total_ratings DESC, id DESC",
    "rating": "rating DESC, total_ratings DESC, id DESC",
}


class DesignTemplateRepository:

    @staticmethod
    def _map_row_to_template(row: dict) -> DesignTemplate:
        return DesignTemplate(**row)

    def find_all(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        featured: Optional[bool] = None,
        sort: str = "newest",
        limit: int = 12,
        offset: int = 0
    ) -> Tuple[List[DesignTemplate], int]:
        """
        Find templates with filters

        Returns:
            Tuple of (list of templates, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if category:
                conditions.append("category = %s")
                params.append(category)

            if search:
                conditions.append("name ILIKE %s")
                params.append(f"%{search}%")

            if is_active is not None:
                conditions.append("is_active = %s")
                params.append(is_active)

            if featured is not None:
                conditions.append("featured = %s")
                params.append(featured)

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            order_by = TEMPLATE_SORTS.get(sort, TEMPLATE_SORTS["newest"])

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM design_templates
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {TEMPLATE_COLUMNS}
                FROM design_templates
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [self._map_row_to_template(row) for row in cursor.fetchall()], total

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, template_id: int) -> Optional[DesignTemplate]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {TEMPLATE_COLUMNS} FROM design_templates WHERE id = %s", (template_id,))
            row = cursor.fetchone()
            return self._map_row_to_template(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, values: dict) -> DesignTemplate:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns = list(values.keys())
            placeholders = ", ".join(["%s"] * len(columns))
            cursor.execute(f"""
                INSERT INTO design_templates ({', '.join(columns)})
                VALUES ({placeholders})
                RETURNING {TEMPLATE_COLUMNS}
            """, list(values.values()))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_template(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, template_id: int, fields: dict) -> Optional[DesignTemplate]:
        if not fields:
            return self.find_by_id(template_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields] + ["updated_at = NOW()"]
            cursor.execute(f"""
                UPDATE design_templates
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING {TEMPLATE_COLUMNS}
            """, list(fields.values()) + [template_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_template(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def toggle_active(self, template_id: int) -> Optional[DesignTemplate]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE design_templates
                SET is_active = NOT is_active, updated_at = NOW()
                WHERE id = %s
                RETURNING {TEMPLATE_COLUMNS}
            """, (template_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_template(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, template_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM design_templates WHERE id = %s", (template_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def count(self) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT COUNT(*) as total FROM design_templates")
            return cursor.fetchone()['total']

        finally:
            cursor.close()
            conn.close()
