"""
Request Quote Domain Model

Customers ask for a quote either on an existing product (type "product") or
for a fully custom job (type "custom"). Staff answer with versioned admin
responses; the latest response is the current one and its values are mirrored
onto the quote's top-level fields.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from apparel.domain.serialization import jsonable


QUOTE_STATUSES = ("pending", "reviewing", "quoted", "approved", "rejected", "completed")
QuoteStatus = Literal["pending", "reviewing", "quoted", "approved", "rejected", "completed"]
QuoteType = Literal["product", "custom"]

# "revised" is a response-level status: a new quote replacing an earlier one
ResponseStatus = Literal["reviewing", "quoted", "revised", "approved", "rejected"]
PrintingMethod = Literal["DTG", "DTF", "Screen Print", "Vinyl", "Embroidery"]
ChangeAspect = Literal["price", "timeline", "materials", "design", "other"]
RevisionReason = Literal[
    "customer_request", "admin_improvement", "cost_change", "timeline_change", "material_change"
]

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"reviewing", "quoted", "rejected"}),
    "reviewing": frozenset({"quoted", "rejected"}),
    "quoted": frozenset({"quoted", "reviewing", "approved", "rejected"}),
    "approved": frozenset({"completed"}),
    "rejected": frozenset(),
    "completed": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def quote_status_for(response_status: str) -> str:
    """Quote status implied by an admin response status"""
    return "quoted" if response_status == "revised" else response_status


# ============================================================================
# Embedded documents
# ============================================================================

class QuoteSizeQuantity(BaseModel):
    size: str
    quantity: int = Field(..., ge=0)


class ProductDetails(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    selected_color_id: Optional[int] = None
    quantity_by_size: List[QuoteSizeQuantity] = Field(default_factory=list)


class CustomRequest(BaseModel):
    custom_need: str = Field(..., min_length=5)


class PriceBreakdown(BaseModel):
    base_price: Optional[Decimal] = Field(None, ge=0)
    setup_fee: Decimal = Field(Decimal("0"), ge=0)
    design_fee: Decimal = Field(Decimal("0"), ge=0)
    rush_fee: Decimal = Field(Decimal("0"), ge=0)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0)
    total_price: Optional[Decimal] = Field(None, ge=0)


class SizeAvailability(BaseModel):
    size: str
    available: bool = True


class ProductionDetails(BaseModel):
    estimated_days: Optional[int] = Field(None, ge=1)
    printing_method: Optional[PrintingMethod] = None
    material_specs: Optional[str] = None
    color_limitations: Optional[str] = None
    size_availability: List[SizeAvailability] = Field(default_factory=list)


class RequestedChange(BaseModel):
    aspect: ChangeAspect
    description: str = Field(..., min_length=1)


class CustomerFeedback(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = None
    requested_changes: List[RequestedChange] = Field(default_factory=list)


class AdminResponse(BaseModel):
    """One version of staff's answer to a quote request"""
    version: int = Field(..., ge=1)
    status: ResponseStatus
    quoted_price: Optional[Decimal] = Field(None, ge=0)
    response_message: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    price_breakdown: Optional[PriceBreakdown] = None
    production_details: Optional[ProductionDetails] = None
    responded_by: str = Field(..., serialization_alias="respondedBy")
    responded_at: datetime = Field(..., serialization_alias="respondedAt")
    valid_until: Optional[datetime] = None
    customer_viewed: bool = False
    customer_viewed_at: Optional[datetime] = None
    customer_feedback: Optional[CustomerFeedback] = None
    is_current_version: bool = True
    revision_reason: Optional[RevisionReason] = None

    @property
    def effective_price(self) -> Optional[Decimal]:
        if self.quoted_price is not None:
            return self.quoted_price
        if self.price_breakdown:
            return self.price_breakdown.total_price
        return None

    def to_dict(self) -> dict:
        return jsonable(self.model_dump(by_alias=True))


# ============================================================================
# Aggregate
# ============================================================================

class RequestQuote(BaseModel):
    id: int
    user_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone: str
    company: Optional[str] = None
    street_address: str
    suburb_city: str
    country: str
    state: str
    postcode: str
    agree_terms: bool = True
    type: QuoteType
    product_details: Optional[ProductDetails] = None
    custom_request: Optional[CustomRequest] = None
    need_delivery_by: Optional[datetime] = None
    extra_information: Optional[str] = None
    status: QuoteStatus = "pending"
    quoted_price: Optional[Decimal] = None
    quoted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    designer_id: Optional[str] = None
    design_id: Optional[int] = None
    admin_responses: List[AdminResponse] = Field(default_factory=list)
    current_version: int = 0
    total_revisions: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def current_response(self) -> Optional[AdminResponse]:
        for response in self.admin_responses:
            if response.is_current_version:
                return response
        return None

    def response_history(self) -> List[AdminResponse]:
        return sorted(self.admin_responses, key=lambda response: response.version)

    def set_status(self, status: str, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        self.status = status
        if status == "approved":
            self.approved_at = now
        elif status == "rejected":
            self.rejected_at = now

    def add_admin_response(self, response: AdminResponse) -> AdminResponse:
        """
        Append a new response version and mirror it onto the quote.

        Earlier versions lose is_current_version; version numbers are assigned
        here so they are always current_version + 1.
        """
        for previous in self.admin_responses:
            previous.is_current_version = False

        response.version = self.current_version + 1
        response.is_current_version = True
        self.admin_responses.append(response)
        self.current_version = response.version
        self.total_revisions = max(0, len(self.admin_responses) - 1)

        new_status = quote_status_for(response.status)
        self.set_status(new_status, response.responded_at)
        price = response.effective_price
        if price is not None:
            self.quoted_price = price
        if new_status == "quoted":
            self.quoted_at = response.responded_at
        if response.admin_notes is not None:
            self.admin_notes = response.admin_notes
        if response.rejection_reason is not None:
            self.rejection_reason = response.rejection_reason
        return response

    def to_dict(self) -> dict:
        data = jsonable(self.model_dump(by_alias=True))
        data["full_name"] = self.full_name
        return data


# ============================================================================
# Write schemas
# ============================================================================

class RequestQuoteCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    company: Optional[str] = None
    street_address: str = Field(..., min_length=1)
    suburb_city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postcode: str = Field(..., min_length=1)
    agree_terms: bool
    type: QuoteType
    product_details: Optional[ProductDetails] = None
    custom_request: Optional[CustomRequest] = None
    design_id: Optional[int] = None
    need_delivery_by: Optional[datetime] = None
    extra_information: Optional[str] = None

    @model_validator(mode="after")
    def check_type_details(self) -> "RequestQuoteCreate":
        if not self.agree_terms:
            raise ValueError("Terms and conditions must be agreed to")
        if self.type == "product" and not self.product_details:
            raise ValueError("Product details are required for product type requests")
        if self.type == "custom" and not self.custom_request:
            raise ValueError("Custom request details are required for custom type requests")
        return self


class AdminResponseCreate(BaseModel):
    status: ResponseStatus
    quoted_price: Optional[Decimal] = Field(None, ge=0)
    response_message: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    price_breakdown: Optional[PriceBreakdown] = None
    production_details: Optional[ProductionDetails] = None
    valid_until: Optional[datetime] = None
    revision_reason: Optional[RevisionReason] = None

    @model_validator(mode="after")
    def check_total_price(self) -> "AdminResponseCreate":
        if self.status in ("quoted", "revised"):
            if not self.price_breakdown or self.price_breakdown.total_price is None:
                raise ValueError("price_breakdown.total_price is required for quoted responses")
        return self


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus
    admin_notes: Optional[str] = None


class DesignerAssignment(BaseModel):
    designer_id: str = Field(..., min_length=1)


class QuoteCustomerFeedback(BaseModel):
    """Sent by the customer; the email must match the quote's"""
    email: EmailStr
    rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = None
    requested_changes: List[RequestedChange] = Field(default_factory=list)
