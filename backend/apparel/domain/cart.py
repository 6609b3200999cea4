"""
Cart Domain Models

A cart belongs to one user and holds line items. Each line item points at a
design (and through it at a product color) and lists a quantity per size.
Prices are never stored on the cart: they are resolved from the catalog every
time the cart is read, so the priced models below are read-only views.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from apparel.domain.serialization import jsonable


class SizeQuantity(BaseModel):
    size: str = Field(..., min_length=1, description="Size label")
    quantity: int = Field(..., ge=1, description="Units requested in this size")


class CartItem(BaseModel):
    id: int = Field(..., description="Cart item ID")
    cart_id: int = Field(..., description="Owning cart ID")
    design_id: int = Field(..., description="Design printed on the shirts")
    quantity_by_size: List[SizeQuantity] = Field(default_factory=list)
    added_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def total_quantity(self) -> int:
        return sum(entry.quantity for entry in self.quantity_by_size)


class Cart(BaseModel):
    id: int = Field(..., description="Cart ID")
    user_id: str = Field(..., description="Owner (identity provider user ID)")
    items: List[CartItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def find_item(self, item_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def select_items(self, item_ids: Optional[List[int]] = None) -> List[CartItem]:
        """Items matching item_ids, or every item when no ids are given"""
        if not item_ids:
            return list(self.items)
        wanted = set(item_ids)
        return [item for item in self.items if item.id in wanted]


# ============================================================================
# Priced views
# ============================================================================

class PricedSize(BaseModel):
    size: str
    quantity: int
    price_per_size: Decimal
    total_price: Decimal

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PricedCartItem(BaseModel):
    """A cart item with names, preview images and per-size prices resolved"""
    id: int
    design_id: int
    design_name: str
    product_id: int
    name: str
    color: str
    color_value: str
    preview_images: List[str] = Field(default_factory=list)
    data: List[PricedSize] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def total(self) -> Decimal:
        return sum((entry.total_price for entry in self.data), Decimal("0"))

    @property
    def quantity(self) -> int:
        return sum(entry.quantity for entry in self.data)

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump(by_alias=True))
        data["total"] = float(self.total)
        return data


class CartSummary(BaseModel):
    items: List[PricedCartItem] = Field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.total for item in self.items), Decimal("0"))

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "subtotal": float(self.subtotal),
            "totalItems": self.total_items,
            "totalQuantity": self.total_quantity,
        }


# ============================================================================
# Write schemas
# ============================================================================

def _reject_duplicate_sizes(entries: List[SizeQuantity]) -> List[SizeQuantity]:
    sizes = [entry.size for entry in entries]
    if len(sizes) != len(set(sizes)):
        raise ValueError("Each size may appear only once")
    return entries


class CartItemAdd(BaseModel):
    design_id: int
    quantity_by_size: List[SizeQuantity] = Field(..., min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("quantity_by_size")
    @classmethod
    def unique_sizes(cls, value: List[SizeQuantity]) -> List[SizeQuantity]:
        return _reject_duplicate_sizes(value)


class CartItemUpdate(BaseModel):
    quantity_by_size: List[SizeQuantity] = Field(..., min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("quantity_by_size")
    @classmethod
    def unique_sizes(cls, value: List[SizeQuantity]) -> List[SizeQuantity]:
        return _reject_duplicate_sizes(value)
