"""
Cart API Endpoints
The current user's cart; prices are resolved from the catalog on every read
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from apparel.core.auth import TokenUser, get_current_user
from apparel.core.exceptions import AppError
from apparel.domain.cart import CartItemAdd, CartItemUpdate
from apparel.domain.serialization import jsonable
from apparel.services.cart_service import CartService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_cart_service() -> CartService:
    return CartService()


@router.get("/")
async def get_cart(
    current_user: TokenUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    """
    Get the priced cart

    Returns items with per-size prices, subtotal, totalItems (lines) and
    totalQuantity (units).
    """
    try:
        cart, summary = service.get_summary(current_user.id)
        data = summary.to_dict()
        data["cartId"] = cart.id if cart else None
        return {"status": "success", "data": data}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching cart for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching cart: {str(e)}")


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    payload: CartItemAdd,
    current_user: TokenUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    try:
        count = service.add_item(current_user.id, payload.design_id, payload.quantity_by_size)
        return {"status": "success", "message": "Item added to cart", "cartItemCount": count}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding to cart: {str(e)}")


@router.put("/items/{item_id}")
async def update_cart_item(
    item_id: int,
    payload: CartItemUpdate,
    current_user: TokenUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    try:
        item = service.update_item(current_user.id, item_id, payload.quantity_by_size)
        return {"status": "success", "data": jsonable(item.model_dump())}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating cart item: {str(e)}")


@router.delete("/items/{item_id}")
async def remove_cart_item(
    item_id: int,
    current_user: TokenUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    try:
        service.remove_item(current_user.id, item_id)
        return {"status": "success", "message": "Item removed from cart"}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing cart item: {str(e)}")
