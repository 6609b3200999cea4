"""
Order Domain Model

An order is created from paid cart items. Items are snapshots: they keep the
name, color and unit prices that were charged, independently of later catalog
changes.

Status lifecycle:
    pending -> processing -> shipping -> shipped -> delivered
    any non-final status -> canceled
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from apparel.domain.serialization import jsonable


ORDER_STATUSES = ("pending", "processing", "shipping", "shipped", "delivered", "canceled")
OrderStatus = Literal["pending", "processing", "shipping", "shipped", "delivered", "canceled"]

# Statuses a shipper works with once an order is handed over
SHIPPER_STATUSES = ("shipping", "shipped", "delivered")


class OrderItemSize(BaseModel):
    size: str
    quantity: int = Field(..., ge=1)
    price_per_unit: Decimal = Field(..., ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.price_per_unit * self.quantity


class OrderItem(BaseModel):
    """Snapshot of one purchased cart item"""
    design_id: int = Field(..., description="Design printed on the shirts")
    product_id: Optional[int] = Field(None, description="Product the design was made on")
    name: str = Field(..., description="Product name at purchase time")
    color: str = Field(..., description="Color name at purchase time")
    sizes: List[OrderItemSize] = Field(default_factory=list)
    total_price: Decimal = Field(Decimal("0"), ge=0)
    image_url: Optional[str] = None

    @property
    def quantity(self) -> int:
        return sum(entry.quantity for entry in self.sizes)


class ShippingDetails(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    method: Optional[str] = Field(None, description="standard or express")


class PaymentMethodDetails(BaseModel):
    brand: Optional[str] = None
    last4: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None


class Order(BaseModel):
    """
    Order domain model

    Fields:
        user_id: Customer (identity provider user ID)
        stripe_payment_intent_id: Payment intent that paid for the order (unique)
        status: One of ORDER_STATUSES
        items: Purchased item snapshots
        total_amount: Amount charged, in major currency units
        shipper_id: Shipper who took the order, if any
        shipping_image: Proof-of-shipment photo URL
    """
    id: int = Field(..., description="Order ID")
    user_id: str = Field(..., description="Customer user ID")
    stripe_payment_intent_id: Optional[str] = Field(None, description="Payment intent ID")
    status: OrderStatus = Field("pending", description="Order status")
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: Decimal = Field(Decimal("0"), ge=0)
    shipping_details: Optional[ShippingDetails] = None
    payment_method: Optional[str] = None
    payment_method_details: Optional[PaymentMethodDetails] = None
    shipper_id: Optional[str] = None
    shipping_image: Optional[str] = None
    notes: Optional[str] = None
    payment_failure_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    refunded_at: Optional[datetime] = None
    partially_refunded: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_express(self) -> bool:
        return bool(self.shipping_details and self.shipping_details.method == "express")

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump())
        data["item_count"] = self.item_count
        data["total_quantity"] = self.total_quantity
        return data


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=2000)


class ShippingImageUpload(BaseModel):
    shipping_image: str = Field(..., min_length=1, description="Uploaded image URL")
