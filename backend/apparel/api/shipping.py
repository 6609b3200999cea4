"""
Shipping API Endpoints
Shippers claim orders that are ready to ship and report delivery progress
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from apparel.core.auth import TokenUser, require_shipper, require_shipper_or_admin
from apparel.core.exceptions import AppError
from apparel.core.pagination import pagination_meta
from apparel.domain.order import OrderStatus, OrderStatusUpdate, ShippingImageUpload
from apparel.services.shipping_service import ShippingService, shipment_view

logger = logging.getLogger(__name__)

router = APIRouter()


def get_shipping_service() -> ShippingService:
    return ShippingService()


@router.get("/available")
async def get_available_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    """Orders ready for shipping that no shipper has taken yet"""
    try:
        orders, total = service.list_available(page=page, limit=limit)
        return {
            "status": "success",
            "data": [shipment_view(order) for order in orders],
            "pagination": pagination_meta(page, limit, total),
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching available orders: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching available orders: {str(e)}")


@router.get("/my-orders")
async def get_my_shipments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    current_user: TokenUser = Depends(require_shipper),
    service: ShippingService = Depends(get_shipping_service)
):
    try:
        orders, total = service.list_for_shipper(current_user.id, status=status, page=page, limit=limit)
        return {
            "status": "success",
            "data": [shipment_view(order) for order in orders],
            "pagination": pagination_meta(page, limit, total),
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shipments: {str(e)}")


@router.get("/orders/{order_id}")
async def get_shipment(
    order_id: int,
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    """Order with formatted address, priority, tracking number and estimated delivery"""
    try:
        return {"status": "success", "data": service.get_shipment(current_user, order_id)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shipment: {str(e)}")


@router.put("/orders/{order_id}/status")
async def update_shipment_status(
    order_id: int,
    payload: OrderStatusUpdate,
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    try:
        order = service.update_status(current_user, order_id, payload.status, payload.notes)
        return {"status": "success", "data": shipment_view(order)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating shipment: {str(e)}")


@router.post("/orders/{order_id}/assign")
async def assign_order(
    order_id: int,
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    try:
        order = service.assign(current_user, order_id)
        return {"status": "success", "data": shipment_view(order)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error assigning order: {str(e)}")


@router.post("/orders/{order_id}/unassign")
async def unassign_order(
    order_id: int,
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    try:
        order = service.unassign(current_user, order_id)
        return {"status": "success", "data": shipment_view(order)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error unassigning order: {str(e)}")


@router.post("/orders/{order_id}/shipping-image")
async def upload_shipping_image(
    order_id: int,
    payload: ShippingImageUpload,
    current_user: TokenUser = Depends(require_shipper_or_admin),
    service: ShippingService = Depends(get_shipping_service)
):
    """Attach proof of shipment; an order still in shipping becomes shipped"""
    try:
        order = service.upload_shipping_image(current_user, order_id, payload.shipping_image)
        return {"status": "success", "data": shipment_view(order)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error uploading shipping image: {str(e)}")
