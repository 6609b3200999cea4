"""
Cart Service

Resolves cart items against the catalog to produce priced views, and
validates cart mutations.

Pricing rule:
    price per size = product base price + size variant additional price
    line total     = price per size x quantity
    cart subtotal  = sum of line totals
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.domain.cart import (
    Cart,
    CartItem,
    CartSummary,
    PricedCartItem,
    PricedSize,
    SizeQuantity,
)
from apparel.domain.catalog import ProductColor, SizeVariant
from apparel.repositories.cart_repository import CartRepository
from apparel.repositories.design_repository import DesignRepository
from apparel.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


def price_per_size(base_price: Decimal, variant: Optional[SizeVariant]) -> Decimal:
    """Unit price of a shirt in a size; base price alone when the variant is gone"""
    if variant is None:
        return Decimal(base_price)
    return Decimal(base_price) + Decimal(variant.additional_price)


def check_sizes_offered(color: ProductColor, quantity_by_size: List[SizeQuantity]) -> None:
    """Raise ValidationError if any requested size is not offered by the color"""
    missing = [entry.size for entry in quantity_by_size if color.find_size(entry.size) is None]
    if missing:
        raise ValidationError(f"Size(s) not available for this color: {', '.join(missing)}")


class CartService:

    def __init__(
        self,
        cart_repository: CartRepository = None,
        design_repository: DesignRepository = None,
        product_repository: ProductRepository = None
    ):
        self.carts = cart_repository or CartRepository()
        self.designs = design_repository or DesignRepository()
        self.products = product_repository or ProductRepository()

    def price_items(self, items: List[CartItem]) -> List[PricedCartItem]:
        """
        Build priced views of cart items

        Items whose design, color or product no longer exists are skipped.
        A size missing from the color's variants is a ValidationError.
        """
        designs = self.designs.find_by_ids([item.design_id for item in items])
        colors = self.products.find_colors_by_ids(
            sorted({design.shirt_color_id for design in designs.values()})
        )
        products = self.products.find_by_ids(sorted({color.shirt_id for color in colors.values()}))

        priced = []
        for item in items:
            design = designs.get(item.design_id)
            color = colors.get(design.shirt_color_id) if design else None
            product = products.get(color.shirt_id) if color else None
            if not (design and color and product):
                logger.warning(f"Skipping cart item {item.id}: design, color or product no longer exists")
                continue

            data = []
            for entry in item.quantity_by_size:
                variant = color.find_size(entry.size)
                if variant is None:
                    raise ValidationError(f"Size {entry.size} not found for color {color.color_name}")
                unit_price = price_per_size(product.base_price, variant)
                data.append(PricedSize(
                    size=entry.size,
                    quantity=entry.quantity,
                    price_per_size=unit_price,
                    total_price=unit_price * entry.quantity
                ))

            priced.append(PricedCartItem(
                id=item.id,
                design_id=design.id,
                design_name=design.name,
                product_id=product.id,
                name=product.name,
                color=color.color_name,
                color_value=color.color_value,
                preview_images=design.preview_images,
                data=data
            ))

        return priced

    def get_summary(self, user_id: str, item_ids: Optional[List[int]] = None) -> Tuple[Optional[Cart], CartSummary]:
        """
        The user's cart and its priced summary

        Args:
            user_id: Cart owner
            item_ids: Restrict the summary to these items (checkout selection)
        """
        cart = self.carts.find_by_user(user_id)
        if not cart or not cart.items:
            return cart, CartSummary()
        return cart, CartSummary(items=self.price_items(cart.select_items(item_ids)))

    def add_item(self, user_id: str, design_id: int, quantity_by_size: List[SizeQuantity]) -> int:
        """
        Add a design to the user's cart

        Returns:
            Number of items in the cart
        """
        design = self.designs.find_by_id(design_id)
        if not design:
            raise NotFoundError("Design not found")
        if not design.is_owned_by(user_id):
            raise ForbiddenError("You can only add your own designs to the cart")

        color = self.products.find_color(design.shirt_color_id)
        if not color:
            raise NotFoundError("Product color not found")
        check_sizes_offered(color, quantity_by_size)

        count = self.carts.add_item(user_id, design_id, quantity_by_size)
        logger.info(f"User {user_id} added design {design_id} to cart ({count} items)")
        return count

    def update_item(self, user_id: str, item_id: int, quantity_by_size: List[SizeQuantity]) -> CartItem:
        cart = self.carts.find_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        item = cart.find_item(item_id)
        if not item:
            raise NotFoundError("Cart item not found")

        design = self.designs.find_by_id(item.design_id)
        color = self.products.find_color(design.shirt_color_id) if design else None
        if not color:
            raise NotFoundError("Product color not found")
        check_sizes_offered(color, quantity_by_size)

        return self.carts.update_item(cart.id, item_id, quantity_by_size)

    def remove_item(self, user_id: str, item_id: int) -> None:
        cart = self.carts.find_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        if not cart.find_item(item_id):
            raise NotFoundError("Cart item not found")
        self.carts.remove_items(cart.id, [item_id])
