"""
Design Repository - Data Access Layer for customer designs
"""
from typing import Dict, List, Optional

from psycopg2.extras import Json

from apparel.core.database import get_db_connection_dict
from apparel.domain.design import Design, ORIGINAL_VERSION
from apparel.domain.serialization import jsonable


DESIGN_COLUMNS = """
    id, user_id, shirt_color_id, name, element_design, design_images,
    parent_design_id, version, created_at, updated_at
"""

JSONB_COLUMNS = ("element_design", "design_images")


class DesignRepository:

    @staticmethod
    def _map_row_to_design(row: dict) -> Design:
        return Design(
            id=row['id'],
            user_id=row['user_id'],
            shirt_color_id=row['shirt_color_id'],
            name=row['name'],
            element_design=row.get('element_design') or {},
            design_images=row.get('design_images') or {},
            parent_design_id=row.get('parent_design_id'),
            version=row.get('version') or ORIGINAL_VERSION,
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, design_id: int) -> Optional[Design]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {DESIGN_COLUMNS} FROM designs WHERE id = %s", (design_id,))
            row = cursor.fetchone()
            return self._map_row_to_design(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_ids(self, design_ids: List[int]) -> Dict[int, Design]:
        if not design_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {DESIGN_COLUMNS} FROM designs WHERE id = ANY(%s)", (list(design_ids),))
            return {row['id']: self._map_row_to_design(row) for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def find_original(self, user_id: str, shirt_color_id: int) -> Optional[Design]:
        """The user's original (non-derived) design for a product color"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {DESIGN_COLUMNS}
                FROM designs
                WHERE user_id = %s AND shirt_color_id = %s AND parent_design_id IS NULL
                ORDER BY id
                LIMIT 1
            """, (user_id, shirt_color_id))
            row = cursor.fetchone()
            return self._map_row_to_design(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_user(self, user_id: str) -> List[Design]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {DESIGN_COLUMNS}
                FROM designs
                WHERE user_id = %s
                ORDER BY COALESCE(updated_at, created_at) DESC, id DESC
            """, (user_id,))
            return [self._map_row_to_design(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def count_versions(self, parent_design_id: int) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT COUNT(*) as total FROM designs WHERE parent_design_id = %s",
                (parent_design_id,)
            )
            return cursor.fetchone()['total']

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        user_id: str,
        shirt_color_id: int,
        name: str,
        element_design: dict,
        design_images: Optional[dict] = None,
        parent_design_id: Optional[int] = None,
        version: str = ORIGINAL_VERSION
    ) -> Design:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO designs (
                    user_id, shirt_color_id, name, element_design, design_images,
                    parent_design_id, version
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {DESIGN_COLUMNS}
            """, (
                user_id,
                shirt_color_id,
                name,
                Json(jsonable(element_design)),
                Json(design_images or {}),
                parent_design_id,
                version
            ))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_design(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, design_id: int, fields: dict) -> Optional[Design]:
        if not fields:
            return self.find_by_id(design_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = []
            params = []
            for column, value in fields.items():
                assignments.append(f"{column} = %s")
                params.append(Json(jsonable(value)) if column in JSONB_COLUMNS else value)
            assignments.append("updated_at = NOW()")

            cursor.execute(f"""
                UPDATE designs
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING {DESIGN_COLUMNS}
            """, params + [design_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_design(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, design_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM designs WHERE id = %s", (design_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
