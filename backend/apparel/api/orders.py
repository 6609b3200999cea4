"""
Orders API Endpoints
Customers see their own orders; admins see and update every order
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from apparel.core.auth import TokenUser, get_current_user, require_admin
from apparel.core.exceptions import AppError
from apparel.core.pagination import pagination_meta
from apparel.domain.order import OrderStatus, OrderStatusUpdate
from apparel.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


def get_order_service() -> OrderService:
    return OrderService()


def _order_pagination(page: int, limit: int, total: int) -> dict:
    meta = pagination_meta(page, limit, total)
    return {
        "page": page,
        "limit": limit,
        "totalOrders": total,
        "totalPages": meta["totalPages"],
        "hasNextPage": meta["hasNextPage"],
        "hasPrevPage": meta["hasPrevPage"],
    }


# ============================================================================
# Customer
# ============================================================================

@router.get("/")
async def get_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    current_user: TokenUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """The current user's orders, newest first"""
    try:
        orders, total = service.list_for_user(current_user.id, status=status, page=page, limit=limit)
        return {
            "status": "success",
            "data": [order.to_dict() for order in orders],
            "pagination": _order_pagination(page, limit, total),
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching orders for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/{order_id}")
async def get_my_order(
    order_id: int,
    current_user: TokenUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    try:
        order = service.get_for_user(current_user.id, order_id)
        return {"status": "success", "data": order.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


# ============================================================================
# Admin
# ============================================================================

@admin_router.get("/")
async def get_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    search: Optional[str] = Query(None, description="Search by purchased item name"),
    service: OrderService = Depends(get_order_service)
):
    try:
        orders, total = service.list_all(status=status, search=search, page=page, limit=limit)
        return {
            "status": "success",
            "data": [order.to_dict() for order in orders],
            "pagination": _order_pagination(page, limit, total),
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@admin_router.get("/{order_id}")
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    try:
        return {"status": "success", "data": service.get(order_id).to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@admin_router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    try:
        order = service.update_status(order_id, payload.status, payload.notes)
        return {"status": "success", "data": order.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")
