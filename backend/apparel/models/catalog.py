"""
Catalog tables: categories, products, colors, images and size variants
"""
from sqlalchemy import (
    Boolean, Column, DateTime, DECIMAL, ForeignKey, Integer, String, Text, UniqueConstraint, Index,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql import func

from apparel.core.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ux_categories_name_lower", func.lower(name), unique=True),
    )


class Product(Base):
    """Shirt style; prices of sizes are base_price + size surcharge"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    base_price = Column(DECIMAL(12, 2), nullable=False)
    category_ids = Column(ARRAY(Integer), nullable=False, server_default="{}")
    is_active = Column(Boolean, nullable=False, server_default="true", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ProductColor(Base):
    __tablename__ = "product_colors"

    id = Column(Integer, primary_key=True, index=True)
    shirt_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    color_name = Column(String(100), nullable=False)
    color_value = Column(String(7), nullable=False, server_default="#000000")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ux_product_colors_name", shirt_id, func.lower(color_name), unique=True),
    )


class ColorImage(Base):
    __tablename__ = "color_images"

    id = Column(Integer, primary_key=True, index=True)
    shirt_color_id = Column(Integer, ForeignKey("product_colors.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(Text, nullable=False)
    view_side = Column(String(10), nullable=False)
    is_primary = Column(Boolean, nullable=False, server_default="false")
    x_editable_zone = Column(Integer, nullable=False, server_default="250")
    y_editable_zone = Column(Integer, nullable=False, server_default="400")
    width_editable_zone = Column(Integer, nullable=False, server_default="300")
    height_editable_zone = Column(Integer, nullable=False, server_default="300")
    image_width = Column(Integer, nullable=False, server_default="800")
    image_height = Column(Integer, nullable=False, server_default="797")

    __table_args__ = (
        UniqueConstraint("shirt_color_id", "view_side", name="uq_color_images_side"),
    )


class SizeVariant(Base):
    __tablename__ = "size_variants"

    id = Column(Integer, primary_key=True, index=True)
    shirt_color_id = Column(Integer, ForeignKey("product_colors.id", ondelete="CASCADE"), nullable=False, index=True)
    size = Column(String(10), nullable=False)
    additional_price = Column(DECIMAL(12, 2), nullable=False, server_default="0")
    quantity = Column(Integer, nullable=False, server_default="0")

    __table_args__ = (
        UniqueConstraint("shirt_color_id", "size", name="uq_size_variants_size"),
    )
