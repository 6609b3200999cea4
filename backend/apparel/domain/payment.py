"""
Checkout and payment request schemas

Request bodies use camelCase keys (paymentMethodId, itemIds); snake_case
names are accepted as well.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CheckoutRequest(BaseModel):
    """
    Either starts a payment (no payment_intent) or confirms one that the
    client finished with the payment provider (payment_intent set)
    """
    payment_method_id: Optional[str] = None
    save_payment_method: bool = False
    payment_intent: Optional[str] = None
    item_ids: Optional[List[int]] = None
    return_url: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentMethodAttach(BaseModel):
    payment_method_id: str = Field(..., min_length=1)
    set_as_default: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DefaultPaymentMethod(BaseModel):
    payment_method_id: str = Field(..., min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
