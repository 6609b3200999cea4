"""
Identity provider user

Users live in the identity provider, not in our database. Roles are kept in
public metadata; the Stripe customer, default card and wish list are kept in
private metadata.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from apparel.core.auth import DEFAULT_ROLE


class IdentityUser(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    public_metadata: Dict[str, Any] = Field(default_factory=dict)
    private_metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "IdentityUser":
        """Build from an identity provider user payload"""
        email = None
        primary_id = data.get("primary_email_address_id")
        addresses = data.get("email_addresses") or []
        for address in addresses:
            if address.get("id") == primary_id:
                email = address.get("email_address")
                break
        if email is None and addresses:
            email = addresses[0].get("email_address")

        created_at = data.get("created_at")
        if isinstance(created_at, (int, float)):
            created_at = datetime.fromtimestamp(created_at / 1000, tz=timezone.utc)

        return cls(
            id=data["id"],
            email=email,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            image_url=data.get("image_url"),
            public_metadata=data.get("public_metadata") or {},
            private_metadata=data.get("private_metadata") or {},
            created_at=created_at,
        )

    @property
    def name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def role(self) -> str:
        return self.public_metadata.get("role") or DEFAULT_ROLE

    @property
    def stripe_customer_id(self) -> Optional[str]:
        return self.private_metadata.get("stripe_cus_id")

    @property
    def default_payment_method(self) -> Optional[str]:
        return self.private_metadata.get("default_payment_method")

    @property
    def wish_list(self) -> List[int]:
        return [int(product_id) for product_id in self.private_metadata.get("wish_list") or []]

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image_url": self.image_url,
            "role": self.role,
        }
