"""
Feedback Domain Model
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from apparel.domain.serialization import jsonable


class Feedback(BaseModel):
    id: int
    order_id: int
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return jsonable(self.model_dump())


class FeedbackCreate(BaseModel):
    order_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)
