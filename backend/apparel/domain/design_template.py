"""
Design Template Domain Model

Ready-made artwork customers can start a design from.
"""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from apparel.domain.serialization import jsonable


TEMPLATE_CATEGORIES = (
    "logo", "banner", "poster", "business-card", "flyer",
    "social-media", "brochure", "presentation", "invitation", "certificate",
)
TemplateCategory = Literal[
    "logo", "banner", "poster", "business-card", "flyer",
    "social-media", "brochure", "presentation", "invitation", "certificate",
]
TemplateSort = Literal["newest", "popular", "rating"]

IMAGE_URL_PATTERN = r"^https?://\S+$"


class DesignTemplate(BaseModel):
    id: int
    name: str = Field(..., min_length=1, max_length=255)
    image_url: str
    category: TemplateCategory = "logo"
    is_active: bool = True
    featured: bool = False
    rating: Decimal = Field(Decimal("0"), ge=0, le=5)
    total_ratings: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return jsonable(self.model_dump())


class DesignTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(..., pattern=IMAGE_URL_PATTERN)
    category: TemplateCategory = "logo"
    featured: bool = False
    is_active: bool = True


class DesignTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, pattern=IMAGE_URL_PATTERN)
    category: Optional[TemplateCategory] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None
