"""
Payments API Endpoints
Checkout, saved cards and the Stripe webhook
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from apparel.core.auth import TokenUser, get_current_user
from apparel.core.exceptions import AppError
from apparel.core.pagination import split_csv_ints
from apparel.domain.payment import CheckoutRequest, DefaultPaymentMethod, PaymentMethodAttach
from apparel.services.payment_service import PaymentService
from apparel.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_payment_service() -> PaymentService:
    return PaymentService()


def get_webhook_service() -> WebhookService:
    return WebhookService()


# ============================================================================
# Checkout
# ============================================================================

@router.get("/checkout")
async def get_checkout_info(
    item_ids: Optional[str] = Query(None, alias="itemIds", description="Comma-separated cart item IDs"),
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """Priced selection and saved-card state for the checkout page"""
    try:
        data = await service.checkout_info(current_user.id, split_csv_ints(item_ids) or None)
        return {"status": "success", "data": data}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error loading checkout for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error loading checkout: {str(e)}")


@router.post("/checkout")
async def checkout(
    payload: CheckoutRequest,
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """
    Start or confirm a payment

    Without paymentIntent: creates a payment intent for the selected cart items.
    With paymentIntent: records the order once the payment has succeeded.
    """
    try:
        if payload.payment_intent:
            order = service.confirm_payment(current_user.id, payload.payment_intent)
            return {
                "status": "success",
                "data": {"success": True, "orderId": order.id, "status": "completed"},
            }

        data = await service.create_payment(current_user.id, payload)
        return {"status": "success", "data": data}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Checkout failed for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error processing checkout: {str(e)}")


# ============================================================================
# Saved cards
# ============================================================================

@router.get("/methods")
async def list_payment_methods(
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    try:
        return {"status": "success", "data": await service.list_payment_methods(current_user.id)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching payment methods: {str(e)}")


@router.post("/methods")
async def attach_payment_method(
    payload: PaymentMethodAttach,
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    try:
        data = await service.attach_payment_method(current_user.id, payload.payment_method_id, payload.set_as_default)
        return {"status": "success", "data": data}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error saving payment method: {str(e)}")


@router.put("/methods/default")
async def set_default_payment_method(
    payload: DefaultPaymentMethod,
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    try:
        await service.set_default_payment_method(current_user.id, payload.payment_method_id)
        return {"status": "success", "message": "Default payment method updated"}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating default payment method: {str(e)}")


@router.delete("/methods/{payment_method_id}")
async def delete_payment_method(
    payment_method_id: str,
    current_user: TokenUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    try:
        await service.delete_payment_method(current_user.id, payment_method_id)
        return {"status": "success", "message": "Payment method removed"}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing payment method: {str(e)}")


# ============================================================================
# Webhook
# ============================================================================

@router.post("/webhooks")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    service: WebhookService = Depends(get_webhook_service)
):
    """Stripe event receiver; authenticated by the signature header only"""
    payload = await request.body()
    try:
        return service.process(payload, stripe_signature)

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Webhook handling failed: {e}")
        raise HTTPException(status_code=500, detail=f"Webhook handler failed: {str(e)}")
