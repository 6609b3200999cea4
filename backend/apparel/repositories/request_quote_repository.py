"""
Request Quote Repository - Data Access Layer for quote requests

Admin responses are stored as a JSONB array on the quote row; the service
mutates the RequestQuote aggregate and persists it back with save_state().
"""
from typing import List, Optional, Tuple

from psycopg2.extras import Json

from apparel.core.database import get_db_connection_dict
from apparel.domain.request_quote import RequestQuote, RequestQuoteCreate
from apparel.domain.serialization import jsonable


QUOTE_COLUMNS = """
    id, user_id, first_name, last_name, email, phone, company,
    street_address, suburb_city, country, state, postcode, agree_terms,
    type, product_details, custom_request, need_delivery_by, extra_information,
    status, quoted_price, quoted_at, approved_at, rejected_at, rejection_reason,
    admin_notes, designer_id, design_id, admin_responses, current_version,
    total_revisions, created_at, updated_at
"""

QUOTE_SORTS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "status": "status",
}

# Columns rewritten whenever the aggregate changes
STATE_COLUMNS = (
    "status", "quoted_price", "quoted_at", "approved_at", "rejected_at",
    "rejection_reason", "admin_notes", "designer_id", "current_version", "total_revisions",
)


class RequestQuoteRepository:

    @staticmethod
    def _map_row_to_quote(row: dict) -> RequestQuote:
        data = dict(row)
        data['admin_responses'] = data.get('admin_responses') or []
        return RequestQuote(**data)

    def create(self, payload: RequestQuoteCreate, user_id: Optional[str] = None) -> RequestQuote:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            values = payload.model_dump()
            product_details = values.pop('product_details')
            custom_request = values.pop('custom_request')
            values['email'] = str(values['email']).lower()

            columns = ['user_id'] + list(values.keys()) + ['product_details', 'custom_request']
            params = [user_id] + list(values.values()) + [
                Json(jsonable(product_details)) if product_details else None,
                Json(jsonable(custom_request)) if custom_request else None,
            ]
            placeholders = ", ".join(["%s"] * len(columns))

            cursor.execute(f"""
                INSERT INTO request_quotes ({', '.join(columns)})
                VALUES ({placeholders})
                RETURNING {QUOTE_COLUMNS}
            """, params)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_quote(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, quote_id: int) -> Optional[RequestQuote]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {QUOTE_COLUMNS} FROM request_quotes WHERE id = %s", (quote_id,))
            row = cursor.fetchone()
            return self._map_row_to_quote(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[str] = None,
        quote_type: Optional[str] = None,
        search: Optional[str] = None,
        designer_id: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[RequestQuote], int]:
        """
        Find quote requests with filters

        Args:
            status: Filter by status
            quote_type: Filter by type (product or custom)
            search: Case-insensitive match on first/last name, email or company
            designer_id: Only quotes assigned to this designer
            sort_by: createdAt, updatedAt or status
            sort_order: asc or desc

        Returns:
            Tuple of (list of quotes, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if status:
                conditions.append("status = %s")
                params.append(status)

            if quote_type:
                conditions.append("type = %s")
                params.append(quote_type)

            if designer_id:
                conditions.append("designer_id = %s")
                params.append(designer_id)

            if search:
                conditions.append(
                    "(first_name ILIKE %s OR last_name ILIKE %s OR email ILIKE %s OR company ILIKE %s)"
                )
                search_term = f"%{search}%"
                params.extend([search_term] * 4)

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            sort_column = QUOTE_SORTS.get(sort_by, "created_at")
            direction = "ASC" if sort_order.lower() == "asc" else "DESC"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM request_quotes
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {QUOTE_COLUMNS}
                FROM request_quotes
                WHERE {where_clause}
                ORDER BY {sort_column} {direction}, id {direction}
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            quotes = [self._map_row_to_quote(row) for row in cursor.fetchall()]
            return quotes, total

        finally:
            cursor.close()
            conn.close()

    def save_state(self, quote: RequestQuote, expected_version: Optional[int] = None) -> Optional[RequestQuote]:
        """
        Persist status fields and the admin response list of an aggregate

        With expected_version the row is only written while its stored
        current_version still equals it; None is returned otherwise.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in STATE_COLUMNS]
            params = [getattr(quote, column) for column in STATE_COLUMNS]
            assignments.append("admin_responses = %s")
            params.append(Json(jsonable([response.model_dump() for response in quote.admin_responses])))
            assignments.append("updated_at = NOW()")

            conditions = ["id = %s"]
            params.append(quote.id)
            if expected_version is not None:
                conditions.append("current_version = %s")
                params.append(expected_version)

            cursor.execute(f"""
                UPDATE request_quotes
                SET {', '.join(assignments)}
                WHERE {' AND '.join(conditions)}
                RETURNING {QUOTE_COLUMNS}
            """, params)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_quote(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
