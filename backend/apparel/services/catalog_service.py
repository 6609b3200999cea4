"""
Catalog Service

Public catalog reads plus the admin operations on products, colors, images,
size variants, inventory and categories. Uniqueness and existence rules live
here; SQL lives in the repositories.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from apparel.core.exceptions import ConflictError, NotFoundError, ValidationError
from apparel.core.pagination import page_offset
from apparel.domain.catalog import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    ColorCreate,
    ColorImage,
    ColorUpdate,
    ImageSave,
    InventoryUpdate,
    Product,
    ProductColor,
    ProductCreate,
    ProductUpdate,
    SizeVariant,
    SizeVariantCreate,
    SizeVariantUpdate,
)
from apparel.repositories.category_repository import CategoryRepository
from apparel.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


def clamp_quantity(quantity: int) -> int:
    """Stock never goes below zero"""
    return max(0, int(quantity))


class CatalogService:

    def __init__(self, product_repository: ProductRepository = None, category_repository: CategoryRepository = None):
        self.products = product_repository or ProductRepository()
        self.categories = category_repository or CategoryRepository()

    # ------------------------------------------------------------------
    # Public reads
    # ------------------------------------------------------------------

    def list_products(self, include_inactive: bool = False, page: int = 1, limit: int = 10, **filters) -> Tuple[List[Product], int]:
        return self.products.find_all(
            include_inactive=include_inactive,
            limit=limit,
            offset=page_offset(page, limit),
            **filters
        )

    def get_product(self, product_id: int, include_inactive: bool = False) -> Product:
        product = self.products.find_by_id(product_id)
        if not product or (not product.is_active and not include_inactive):
            raise NotFoundError("Product not found")
        return product

    def get_color_sizes(self, color_id: int) -> List[dict]:
        """Sizes of a color with unit price (base + surcharge) and stock"""
        color = self._get_color(color_id)
        product = self.products.find_by_id(color.shirt_id, with_colors=False)
        if not product:
            raise NotFoundError("Product not found")

        return [
            {
                "id": variant.id,
                "size": variant.size,
                "additional_price": float(variant.additional_price),
                "price": float(Decimal(product.base_price) + Decimal(variant.additional_price)),
                "quantity": variant.quantity,
                "in_stock": variant.in_stock,
            }
            for variant in color.sizes
        ]

    def list_colors(self) -> List[dict]:
        return self.products.list_color_groups()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def _check_categories(self, category_ids: List[int]) -> None:
        for category_id in set(category_ids):
            if not self.categories.find_by_id(category_id):
                raise ValidationError(f"Category {category_id} does not exist")

    def create_product(self, payload: ProductCreate) -> Product:
        self._check_categories(payload.category_ids)
        product = self.products.create(
            name=payload.name,
            description=payload.description,
            base_price=payload.base_price,
            category_ids=payload.category_ids,
            is_active=payload.is_active
        )
        logger.info(f"Product {product.id} created: {product.name}")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "category_ids" in fields:
            self._check_categories(fields["category_ids"])
        product = self.products.update(product_id, fields)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def toggle_product_status(self, product_id: int) -> Product:
        product = self.products.find_by_id(product_id, with_colors=False)
        if not product:
            raise NotFoundError("Product not found")
        return self.products.update(product_id, {"is_active": not product.is_active})

    def delete_product(self, product_id: int) -> None:
        if not self.products.delete(product_id):
            raise NotFoundError("Product not found")
        logger.info(f"Product {product_id} deleted with its colors and variants")

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def _get_color(self, color_id: int) -> ProductColor:
        color = self.products.find_color(color_id)
        if not color:
            raise NotFoundError("Color not found")
        return color

    def create_color(self, product_id: int, payload: ColorCreate) -> ProductColor:
        if not self.products.find_by_id(product_id, with_colors=False):
            raise NotFoundError("Product not found")
        if self.products.color_name_exists(product_id, payload.color_name):
            raise ConflictError(f"Color '{payload.color_name}' already exists for this product")
        return self.products.create_color(product_id, payload.color_name, payload.color_value)

    def update_color(self, color_id: int, payload: ColorUpdate) -> ProductColor:
        color = self._get_color(color_id)
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "color_name" in fields:
            fields["color_name"] = fields["color_name"].strip()
            if self.products.color_name_exists(color.shirt_id, fields["color_name"], exclude_color_id=color_id):
                raise ConflictError(f"Color '{fields['color_name']}' already exists for this product")
        if not fields:
            return color
        return self.products.update_color(color_id, fields)

    def delete_color(self, color_id: int) -> None:
        if not self.products.delete_color(color_id):
            raise NotFoundError("Color not found")

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def save_image(self, color_id: int, payload: ImageSave) -> ColorImage:
        self._get_color(color_id)
        return self.products.save_image(color_id, payload)

    def delete_image(self, image_id: int) -> None:
        if not self.products.delete_image(image_id):
            raise NotFoundError("Image not found")

    # ------------------------------------------------------------------
    # Size variants and inventory
    # ------------------------------------------------------------------

    def add_size(self, color_id: int, payload: SizeVariantCreate) -> SizeVariant:
        color = self._get_color(color_id)
        if color.find_size(payload.size):
            raise ConflictError(f"Size {payload.size} already exists for this color")
        return self.products.add_size(color_id, payload.size, payload.additional_price, payload.quantity)

    def update_size(self, variant_id: int, payload: SizeVariantUpdate) -> SizeVariant:
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            variant = self.products.find_size(variant_id)
        else:
            variant = self.products.update_size(variant_id, fields)
        if not variant:
            raise NotFoundError("Size variant not found")
        return variant

    def delete_size(self, variant_id: int) -> None:
        if not self.products.delete_size(variant_id):
            raise NotFoundError("Size variant not found")

    def get_inventory(self, product_id: int) -> dict:
        """Stock grid of a product: one row per color, one cell per size"""
        product = self.products.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        colors = []
        for color in product.colors:
            colors.append({
                "color_id": color.id,
                "color_name": color.color_name,
                "color_value": color.color_value,
                "sizes": [
                    {"variant_id": variant.id, "size": variant.size, "quantity": variant.quantity}
                    for variant in color.sizes
                ],
                "total_quantity": sum(variant.quantity for variant in color.sizes),
            })

        return {
            "product_id": product.id,
            "product_name": product.name,
            "colors": colors,
            "total_quantity": sum(color["total_quantity"] for color in colors),
        }

    def update_inventory(self, variant_id: int, quantity: int) -> SizeVariant:
        updated = self.products.set_quantities({variant_id: clamp_quantity(quantity)})
        if not updated:
            raise NotFoundError("Size variant not found")
        return updated[0]

    def batch_update_inventory(self, updates: List[InventoryUpdate]) -> List[SizeVariant]:
        quantities: Dict[int, int] = {}
        for update in updates:
            quantities[update.variant_id] = clamp_quantity(update.quantity)
        updated = self.products.set_quantities(quantities)
        missing = set(quantities) - {variant.id for variant in updated}
        if missing:
            logger.warning(f"Inventory batch skipped unknown variants: {sorted(missing)}")
        return updated

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self) -> List[Category]:
        return self.categories.find_all()

    def create_category(self, payload: CategoryCreate) -> Category:
        name = payload.name.strip()
        if self.categories.name_exists(name):
            raise ConflictError(f"Category '{name}' already exists")
        return self.categories.create(name, payload.description)

    def update_category(self, category_id: int, payload: CategoryUpdate) -> Category:
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if self.categories.name_exists(fields["name"], exclude_id=category_id):
                raise ConflictError(f"Category '{fields['name']}' already exists")
        category = self.categories.update(category_id, fields)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def delete_category(self, category_id: int) -> None:
        if not self.categories.delete(category_id):
            raise NotFoundError("Category not found")
