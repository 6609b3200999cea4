"""
Quote requests and design templates
"""
from sqlalchemy import Boolean, Column, DateTime, DECIMAL, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from apparel.core.database import Base


class RequestQuote(Base):
    __tablename__ = "request_quotes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), index=True)

    # Customer information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    company = Column(String(255))
    street_address = Column(Text, nullable=False)
    suburb_city = Column(String(255), nullable=False)
    country = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    postcode = Column(String(20), nullable=False)
    agree_terms = Column(Boolean, nullable=False)

    # Request
    type = Column(String(10), nullable=False, index=True)
    product_details = Column(JSONB)
    custom_request = Column(JSONB)
    need_delivery_by = Column(DateTime(timezone=True))
    extra_information = Column(Text)

    # Status mirrored from the current admin response
    status = Column(String(20), nullable=False, server_default="pending", index=True)
    quoted_price = Column(DECIMAL(14, 2))
    quoted_at = Column(DateTime(timezone=True))
    approved_at = Column(DateTime(timezone=True))
    rejected_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)
    admin_notes = Column(Text)

    designer_id = Column(String(100), index=True)
    design_id = Column(Integer, ForeignKey("designs.id", ondelete="SET NULL"))

    admin_responses = Column(JSONB, nullable=False, server_default="[]")
    current_version = Column(Integer, nullable=False, server_default="0")
    total_revisions = Column(Integer, nullable=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class DesignTemplate(Base):
    __tablename__ = "design_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    image_url = Column(Text, nullable=False)
    category = Column(String(30), nullable=False, server_default="logo", index=True)
    is_active = Column(Boolean, nullable=False, server_default="true", index=True)
    featured = Column(Boolean, nullable=False, server_default="false")
    rating = Column(DECIMAL(3, 2), nullable=False, server_default="0")
    total_ratings = Column(Integer, nullable=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
