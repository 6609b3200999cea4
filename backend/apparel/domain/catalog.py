"""
Catalog Domain Models

Products (shirts), their color variants, per-color images and size variants,
plus the categories products are filed under.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apparel.domain.serialization import jsonable


# Every new color is seeded with one size variant per fixed size
FIXED_SIZES = ["S", "M", "L", "XL", "XXL"]

ViewSide = Literal["front", "back", "left", "right"]

DEFAULT_COLOR_VALUE = "#000000"

# Default printable area on the mockup image, in image pixels
DEFAULT_EDITABLE_ZONE = {"x": 250, "y": 400, "width": 300, "height": 300}
DEFAULT_IMAGE_SIZE = {"width": 800, "height": 797}


class Category(BaseModel):
    """Product category"""
    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Unique category name")
    description: Optional[str] = Field(None, description="Category description")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return jsonable(self.model_dump())


class SizeVariant(BaseModel):
    """
    Size variant of a product color

    The unit price of a shirt in a given size is the product base price plus
    the variant's additional price. Quantity is the stock on hand.
    """
    id: int = Field(..., description="Size variant ID")
    shirt_color_id: int = Field(..., description="Owning color ID")
    size: str = Field(..., description="Size label (S, M, L...)")
    additional_price: Decimal = Field(Decimal("0"), description="Surcharge over base price", ge=0)
    quantity: int = Field(0, description="Units in stock", ge=0)

    model_config = ConfigDict(from_attributes=True)

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump())
        data["in_stock"] = self.in_stock
        return data


class ColorImage(BaseModel):
    """Mockup image of a product color, one per view side"""
    id: int = Field(..., description="Image ID")
    shirt_color_id: int = Field(..., description="Owning color ID")
    url: str = Field(..., description="Public image URL")
    view_side: ViewSide = Field(..., description="Which side of the shirt the image shows")
    is_primary: bool = Field(False, description="Shown first in listings")
    x_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["x"], description="Printable area left offset")
    y_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["y"], description="Printable area top offset")
    width_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["width"], description="Printable area width")
    height_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["height"], description="Printable area height")
    image_width: int = Field(DEFAULT_IMAGE_SIZE["width"], description="Image width in pixels")
    image_height: int = Field(DEFAULT_IMAGE_SIZE["height"], description="Image height in pixels")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump()


class ProductColor(BaseModel):
    """Color variant of a product, carrying its images and size variants"""
    id: int = Field(..., description="Color ID")
    shirt_id: int = Field(..., description="Owning product ID")
    color_name: str = Field(..., description="Display name, unique per product (case-insensitive)")
    color_value: str = Field(DEFAULT_COLOR_VALUE, description="Hex color value")
    images: List[ColorImage] = Field(default_factory=list)
    sizes: List[SizeVariant] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def primary_image(self) -> Optional[ColorImage]:
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    def find_size(self, size: str) -> Optional[SizeVariant]:
        for variant in self.sizes:
            if variant.size == size:
                return variant
        return None

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump(exclude={"images", "sizes"}))
        primary = self.primary_image
        data["primary_image"] = primary.to_dict() if primary else None
        data["images"] = [image.to_dict() for image in self.images]
        data["sizes"] = [variant.to_dict() for variant in self.sizes]
        return data


class Product(BaseModel):
    """
    Product domain model - a shirt style sold in several colors and sizes

    Fields:
        id: Internal product ID
        name: Product name
        description: Long description (optional)
        base_price: Price before any size surcharge
        category_ids: Categories the product is filed under
        is_active: Inactive products are hidden from customers
        colors: Color variants, populated by the repository on detail reads
    """
    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    base_price: Decimal = Field(..., description="Base price", ge=0)
    category_ids: List[int] = Field(default_factory=list, description="Category IDs")
    is_active: bool = Field(True, description="Whether product is visible to customers")
    colors: List[ProductColor] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    def find_color(self, color_id: int) -> Optional[ProductColor]:
        for color in self.colors:
            if color.id == color_id:
                return color
        return None

    @property
    def has_images(self) -> bool:
        return any(color.images for color in self.colors)

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump(exclude={"colors"}))
        data["colors"] = [color.to_dict() for color in self.colors]
        return data


# ============================================================================
# Write schemas
# ============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    base_price: Decimal = Field(..., ge=0)
    category_ids: List[int] = Field(default_factory=list)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0)
    category_ids: Optional[List[int]] = None
    is_active: Optional[bool] = None


class ColorCreate(BaseModel):
    color_name: str = Field(..., min_length=1, max_length=100)
    color_value: str = Field(DEFAULT_COLOR_VALUE, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("color_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class ColorUpdate(BaseModel):
    color_name: Optional[str] = Field(None, min_length=1, max_length=100)
    color_value: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class ImageSave(BaseModel):
    """Image upload metadata for one view side of a color"""
    url: str = Field(..., min_length=1)
    view_side: ViewSide
    is_primary: bool = False
    x_editable_zone: int = DEFAULT_EDITABLE_ZONE["x"]
    y_editable_zone: int = DEFAULT_EDITABLE_ZONE["y"]
    width_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["width"], gt=0)
    height_editable_zone: int = Field(DEFAULT_EDITABLE_ZONE["height"], gt=0)
    image_width: int = Field(DEFAULT_IMAGE_SIZE["width"], gt=0)
    image_height: int = Field(DEFAULT_IMAGE_SIZE["height"], gt=0)


class SizeVariantCreate(BaseModel):
    size: str = Field(..., min_length=1, max_length=10)
    additional_price: Decimal = Field(Decimal("0"), ge=0)
    quantity: int = Field(0, ge=0)


class SizeVariantUpdate(BaseModel):
    additional_price: Optional[Decimal] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)


class InventoryUpdate(BaseModel):
    """Stock adjustment. Negative quantities are clamped to zero."""
    variant_id: int
    quantity: int
