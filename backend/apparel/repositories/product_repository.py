"""
Product Repository - Data Access Layer for the catalog

Handles products, their colors, color images and size variants (which also
carry the inventory quantity). Returns catalog domain models.
"""
from typing import Dict, List, Optional, Tuple

from apparel.core.database import get_db_connection_dict
from apparel.domain.catalog import (
    FIXED_SIZES,
    ColorImage,
    ImageSave,
    Product,
    ProductColor,
    SizeVariant,
)


PRODUCT_COLUMNS = "p.id, p.name, p.description, p.base_price, p.category_ids, p.is_active, p.created_at, p.updated_at"

IMAGE_COLUMNS = """
    id, shirt_color_id, url, view_side, is_primary,
    x_editable_zone, y_editable_zone, width_editable_zone, height_editable_zone,
    image_width, image_height
"""

PRODUCT_SORTS = {
    "newest": "p.created_at DESC, p.id DESC",
    "oldest": "p.created_at ASC, p.id ASC",
    "price_high": "p.base_price DESC, p.id DESC",
    "price_low": "p.base_price ASC, p.id ASC",
}


class ProductRepository:
    """
    Repository for catalog data access

    List and detail reads return products with their colors populated;
    colors, images and sizes are fetched in three batched queries.
    """

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        return Product(
            id=row['id'],
            name=row['name'],
            description=row.get('description'),
            base_price=row['base_price'],
            category_ids=list(row.get('category_ids') or []),
            is_active=row['is_active'],
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    @staticmethod
    def _map_row_to_color(row: dict) -> ProductColor:
        return ProductColor(
            id=row['id'],
            shirt_id=row['shirt_id'],
            color_name=row['color_name'],
            color_value=row['color_value'],
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    @staticmethod
    def _map_row_to_image(row: dict) -> ColorImage:
        return ColorImage(**{key: row[key] for key in ColorImage.model_fields if key in row})

    @staticmethod
    def _map_row_to_size(row: dict) -> SizeVariant:
        return SizeVariant(
            id=row['id'],
            shirt_color_id=row['shirt_color_id'],
            size=row['size'],
            additional_price=row['additional_price'],
            quantity=row['quantity']
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _load_colors(self, cursor, product_ids: List[int]) -> Dict[int, List[ProductColor]]:
        """Colors with images and sizes, grouped by product ID"""
        if not product_ids:
            return {}

        cursor.execute("""
            SELECT id, shirt_id, color_name, color_value, created_at, updated_at
            FROM product_colors
            WHERE shirt_id = ANY(%s)
            ORDER BY id
        """, (product_ids,))
        colors = [self._map_row_to_color(row) for row in cursor.fetchall()]
        self._attach_color_children(cursor, colors)

        grouped: Dict[int, List[ProductColor]] = {pid: [] for pid in product_ids}
        for color in colors:
            grouped.setdefault(color.shirt_id, []).append(color)
        return grouped

    def _attach_color_children(self, cursor, colors: List[ProductColor]) -> None:
        if not colors:
            return
        color_ids = [color.id for color in colors]
        by_id = {color.id: color for color in colors}

        cursor.execute(f"""
            SELECT {IMAGE_COLUMNS}
            FROM color_images
            WHERE shirt_color_id = ANY(%s)
            ORDER BY is_primary DESC, id
        """, (color_ids,))
        for row in cursor.fetchall():
            by_id[row['shirt_color_id']].images.append(self._map_row_to_image(row))

        cursor.execute("""
            SELECT id, shirt_color_id, size, additional_price, quantity
            FROM size_variants
            WHERE shirt_color_id = ANY(%s)
            ORDER BY id
        """, (color_ids,))
        for row in cursor.fetchall():
            by_id[row['shirt_color_id']].sizes.append(self._map_row_to_size(row))

    def find_by_id(self, product_id: int, with_colors: bool = True) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Product ID
            with_colors: Populate colors, images and sizes

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE p.id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            product = self._map_row_to_product(row)
            if with_colors:
                product.colors = self._load_colors(cursor, [product.id]).get(product.id, [])
            return product

        finally:
            cursor.close()
            conn.close()

    def find_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        """Products without colors, keyed by ID"""
        if not product_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE p.id = ANY(%s)
            """, (list(product_ids),))
            return {row['id']: self._map_row_to_product(row) for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        include_inactive: bool = False,
        search: Optional[str] = None,
        sizes: Optional[List[str]] = None,
        colors: Optional[List[str]] = None,
        categories: Optional[List[int]] = None,
        product_ids: Optional[List[int]] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Color names are resolved to product IDs first; when no product carries
        any of the requested colors (or none of them is in product_ids) the
        result is empty.

        Returns:
            Tuple of (list of products with colors, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if colors:
                cursor.execute("""
                    SELECT DISTINCT shirt_id
                    FROM product_colors
                    WHERE LOWER(color_name) = ANY(%s)
                """, ([color.lower() for color in colors],))
                color_product_ids = {row['shirt_id'] for row in cursor.fetchall()}
                if product_ids:
                    color_product_ids &= set(product_ids)
                if not color_product_ids:
                    return [], 0
                product_ids = sorted(color_product_ids)

            if product_ids:
                conditions.append("p.id = ANY(%s)")
                params.append(list(product_ids))

            if not include_inactive:
                conditions.append("p.is_active = TRUE")

            if search:
                conditions.append("p.name ILIKE %s")
                params.append(f"%{search}%")

            if min_price is not None:
                conditions.append("p.base_price >= %s")
                params.append(min_price)

            if max_price is not None:
                conditions.append("p.base_price <= %s")
                params.append(max_price)

            if categories:
                conditions.append("p.category_ids && %s::int[]")
                params.append(list(categories))

            if sizes:
                conditions.append("""
                    EXISTS (
                        SELECT 1
                        FROM product_colors c
                        JOIN size_variants v ON v.shirt_color_id = c.id
                        WHERE c.shirt_id = p.id AND v.size = ANY(%s)
                    )
                """)
                params.append(list(sizes))

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            order_by = PRODUCT_SORTS.get(sort, PRODUCT_SORTS["newest"])

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            colors_by_product = self._load_colors(cursor, [product.id for product in products])
            for product in products:
                product.colors = colors_by_product.get(product.id, [])

            return products, total

        finally:
            cursor.close()
            conn.close()

    def find_color(self, color_id: int) -> Optional[ProductColor]:
        """Color with images and sizes, or None"""
        colors = self.find_colors_by_ids([color_id])
        return colors.get(color_id)

    def find_colors_by_ids(self, color_ids: List[int]) -> Dict[int, ProductColor]:
        """Colors with images and sizes, keyed by ID"""
        if not color_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, shirt_id, color_name, color_value, created_at, updated_at
                FROM product_colors
                WHERE id = ANY(%s)
            """, (list(color_ids),))
            colors = [self._map_row_to_color(row) for row in cursor.fetchall()]
            self._attach_color_children(cursor, colors)
            return {color.id: color for color in colors}

        finally:
            cursor.close()
            conn.close()

    def list_color_groups(self) -> List[dict]:
        """Distinct colors across active products, grouped by hex value"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    c.color_value,
                    MIN(c.color_name) as color_name,
                    COUNT(DISTINCT c.shirt_id) as count
                FROM product_colors c
                JOIN products p ON p.id = c.shirt_id
                WHERE p.is_active = TRUE
                GROUP BY c.color_value
                ORDER BY count DESC, color_name
            """)
            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def color_name_exists(self, shirt_id: int, color_name: str, exclude_color_id: Optional[int] = None) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            query = """
                SELECT 1 FROM product_colors
                WHERE shirt_id = %s AND LOWER(color_name) = LOWER(%s)
            """
            params = [shirt_id, color_name]
            if exclude_color_id is not None:
                query += " AND id <> %s"
                params.append(exclude_color_id)
            cursor.execute(query, params)
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def find_size(self, variant_id: int) -> Optional[SizeVariant]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, shirt_color_id, size, additional_price, quantity
                FROM size_variants
                WHERE id = %s
            """, (variant_id,))
            row = cursor.fetchone()
            return self._map_row_to_size(row) if row else None

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Product writes
    # ------------------------------------------------------------------

    def create(self, name: str, description: Optional[str], base_price, category_ids: List[int],
               is_active: bool = True) -> Product:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products (name, description, base_price, category_ids, is_active)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {PRODUCT_COLUMNS.replace('p.', '')}
            """, (name, description, base_price, list(category_ids), is_active))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, fields: dict) -> Optional[Product]:
        """Update the given columns; returns None when the product does not exist"""
        if not fields:
            return self.find_by_id(product_id, with_colors=False)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields]
            params = list(fields.values())
            assignments.append("updated_at = NOW()")

            cursor.execute(f"""
                UPDATE products
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS.replace('p.', '')}
            """, params + [product_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: int) -> bool:
        """Delete a product; colors, images and sizes cascade"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s", (product_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Color writes
    # ------------------------------------------------------------------

    def create_color(self, shirt_id: int, color_name: str, color_value: str) -> ProductColor:
        """Create a color and seed one zero-priced, zero-stock variant per fixed size"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO product_colors (shirt_id, color_name, color_value)
                VALUES (%s, %s, %s)
                RETURNING id, shirt_id, color_name, color_value, created_at, updated_at
            """, (shirt_id, color_name, color_value))
            color = self._map_row_to_color(cursor.fetchone())

            for size in FIXED_SIZES:
                cursor.execute("""
                    INSERT INTO size_variants (shirt_color_id, size, additional_price, quantity)
                    VALUES (%s, %s, 0, 0)
                    RETURNING id, shirt_color_id, size, additional_price, quantity
                """, (color.id, size))
                color.sizes.append(self._map_row_to_size(cursor.fetchone()))

            conn.commit()
            return color

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_color(self, color_id: int, fields: dict) -> Optional[ProductColor]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields] + ["updated_at = NOW()"]
            cursor.execute(f"""
                UPDATE product_colors
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING id, shirt_id, color_name, color_value, created_at, updated_at
            """, list(fields.values()) + [color_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_color(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete_color(self, color_id: int) -> bool:
        """Delete a color; its images and size variants cascade"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM product_colors WHERE id = %s", (color_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def save_image(self, color_id: int, image: ImageSave) -> ColorImage:
        """
        Store the image for one view side of a color

        An existing image for the same side is replaced. A primary image
        clears the primary flag on the color's other images.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            values = image.model_dump()
            if image.is_primary:
                cursor.execute("""
                    UPDATE color_images SET is_primary = FALSE
                    WHERE shirt_color_id = %s AND view_side <> %s
                """, (color_id, image.view_side))

            columns = ["shirt_color_id"] + list(values.keys())
            placeholders = ", ".join(["%s"] * len(columns))
            updates = ", ".join(f"{column} = EXCLUDED.{column}" for column in values if column != "view_side")

            cursor.execute(f"""
                INSERT INTO color_images ({', '.join(columns)})
                VALUES ({placeholders})
                ON CONFLICT (shirt_color_id, view_side) DO UPDATE SET {updates}
                RETURNING {IMAGE_COLUMNS}
            """, [color_id] + list(values.values()))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_image(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete_image(self, image_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM color_images WHERE id = %s", (image_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Size variants and inventory
    # ------------------------------------------------------------------

    def add_size(self, color_id: int, size: str, additional_price, quantity: int) -> SizeVariant:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO size_variants (shirt_color_id, size, additional_price, quantity)
                VALUES (%s, %s, %s, %s)
                RETURNING id, shirt_color_id, size, additional_price, quantity
            """, (color_id, size, additional_price, quantity))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_size(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_size(self, variant_id: int, fields: dict) -> Optional[SizeVariant]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{column} = %s" for column in fields]
            cursor.execute(f"""
                UPDATE size_variants
                SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING id, shirt_color_id, size, additional_price, quantity
            """, list(fields.values()) + [variant_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_size(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete_size(self, variant_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM size_variants WHERE id = %s", (variant_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def set_quantities(self, quantities: Dict[int, int]) -> List[SizeVariant]:
        """
        Set stock for several variants in one transaction

        Args:
            quantities: {variant_id: quantity}; quantities must already be >= 0

        Returns:
            The updated variants (unknown IDs are skipped)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            updated = []
            for variant_id, quantity in quantities.items():
                cursor.execute("""
                    UPDATE size_variants
                    SET quantity = %s
                    WHERE id = %s
                    RETURNING id, shirt_color_id, size, additional_price, quantity
                """, (quantity, variant_id))
                row = cursor.fetchone()
                if row:
                    updated.append(self._map_row_to_size(row))
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> dict:
        """Product and color counts for the admin dashboard"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total,
                    COUNT(*) FILTER (WHERE is_active) as active,
                    COUNT(*) FILTER (WHERE NOT is_active) as inactive
                FROM products
            """)
            products = dict(cursor.fetchone())

            cursor.execute("""
                SELECT
                    COUNT(*) as total,
                    COUNT(*) FILTER (WHERE EXISTS (
                        SELECT 1 FROM color_images i WHERE i.shirt_color_id = c.id
                    )) as with_images
                FROM product_colors c
            """)
            variants = dict(cursor.fetchone())
            variants['without_images'] = variants['total'] - variants['with_images']

            return {'products': products, 'variants': variants}

        finally:
            cursor.close()
            conn.close()
