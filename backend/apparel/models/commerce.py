"""
Customer-facing tables: designs, carts, orders and order feedback

Embedded documents (canvas per side, size quantities, order item snapshots)
are stored as JSONB.
"""
from sqlalchemy import Boolean, Column, DateTime, DECIMAL, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from apparel.core.database import Base


class Design(Base):
    __tablename__ = "designs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), nullable=False, index=True)
    shirt_color_id = Column(Integer, ForeignKey("product_colors.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, server_default="Shirt Design")
    element_design = Column(JSONB, nullable=False, server_default="{}")
    design_images = Column(JSONB, nullable=False, server_default="{}")
    parent_design_id = Column(Integer, ForeignKey("designs.id", ondelete="SET NULL"), index=True)
    version = Column(String(20), nullable=False, server_default="original")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    design_id = Column(Integer, ForeignKey("designs.id", ondelete="CASCADE"), nullable=False)
    # [{"size": "M", "quantity": 2}, ...]
    quantity_by_size = Column(JSONB, nullable=False, server_default="[]")
    added_at = Column(DateTime(timezone=True), server_default=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), nullable=False, index=True)
    stripe_payment_intent_id = Column(String(255), unique=True)
    status = Column(String(20), nullable=False, server_default="pending", index=True)
    items = Column(JSONB, nullable=False, server_default="[]")
    total_amount = Column(DECIMAL(14, 2), nullable=False, server_default="0")
    shipping_details = Column(JSONB)
    payment_method = Column(String(50))
    payment_method_details = Column(JSONB)
    shipper_id = Column(String(100), index=True)
    shipping_image = Column(Text)
    notes = Column(Text)
    payment_failure_reason = Column(Text)
    refund_amount = Column(DECIMAL(14, 2))
    refunded_at = Column(DateTime(timezone=True))
    partially_refunded = Column(Boolean, nullable=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(100), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("order_id", "user_id", name="uq_feedback_order_user"),
    )
