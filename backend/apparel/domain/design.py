"""
Design Domain Model

A design is a customer's customization of one product color: for each view
side it stores the canvas JSON produced by the editor and the mockup image it
was drawn on. Designers can derive versions of a customer design while
working on a quote.
"""
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from apparel.domain.serialization import jsonable


DEFAULT_DESIGN_NAME = "Shirt Design"
ORIGINAL_VERSION = "original"


class ElementDesign(BaseModel):
    """Canvas state for one side of the shirt"""
    images_id: int = Field(..., description="ID of the color image the canvas was drawn on")
    element_Json: str = Field(..., min_length=1, description="Serialized canvas JSON")


class Design(BaseModel):
    id: int = Field(..., description="Design ID")
    user_id: str = Field(..., description="Owner (identity provider user ID)")
    shirt_color_id: int = Field(..., description="Product color the design is printed on")
    name: str = Field(DEFAULT_DESIGN_NAME, description="Design name")
    element_design: Dict[str, ElementDesign] = Field(default_factory=dict, description="Canvas per view side")
    design_images: Dict[str, str] = Field(default_factory=dict, description="Rendered preview URL per view side")
    parent_design_id: Optional[int] = Field(None, description="Design this one was derived from")
    version: str = Field(ORIGINAL_VERSION, description="'original' or 'v<n>' for derived versions")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def preview_images(self) -> list:
        return list(self.design_images.values())

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def to_dict(self) -> dict:
        return jsonable(self.model_dump())


class DesignSave(BaseModel):
    """Create-or-update payload; one design per user and product color"""
    shirt_color_id: int
    element_design: Dict[str, ElementDesign]
    name: str = DEFAULT_DESIGN_NAME
    design_images: Dict[str, str] = Field(default_factory=dict)


class DesignUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    element_design: Optional[Dict[str, ElementDesign]] = None
    design_images: Optional[Dict[str, str]] = None


class DesignVersionCreate(BaseModel):
    name: Optional[str] = None
    element_design: Optional[Dict[str, ElementDesign]] = None
    design_images: Optional[Dict[str, str]] = None
