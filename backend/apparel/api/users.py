"""
Users API Endpoints
Current user, wish list, designers and role management
"""
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from apparel.core.auth import TokenUser, get_current_user, require_admin
from apparel.core.exceptions import AppError
from apparel.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_user_service() -> UserService:
    return UserService()


@router.get("/me")
async def get_me(current_user: TokenUser = Depends(get_current_user)):
    """Identity and role from the session token"""
    return {
        "status": "success",
        "data": {
            "id": current_user.id,
            "email": current_user.email,
            "name": current_user.name,
            "role": current_user.role,
        },
    }


# ============================================================================
# Wish list
# ============================================================================

@router.get("/me/wishlist")
async def get_wishlist(
    current_user: TokenUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    try:
        return {"status": "success", "data": await service.get_wishlist(current_user.id)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.post("/me/wishlist", status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(
    product_id: int = Body(..., embed=True),
    current_user: TokenUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    try:
        wish_list = await service.add_to_wishlist(current_user.id, product_id)
        return {"status": "success", "data": {"product_ids": wish_list}}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating wishlist: {str(e)}")


@router.delete("/me/wishlist/{product_id}")
async def remove_from_wishlist(
    product_id: int,
    current_user: TokenUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    try:
        wish_list = await service.remove_from_wishlist(current_user.id, product_id)
        return {"status": "success", "data": {"product_ids": wish_list}}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating wishlist: {str(e)}")


# ============================================================================
# Admin
# ============================================================================

@router.get("/designers", dependencies=[Depends(require_admin)])
async def get_designers(service: UserService = Depends(get_user_service)):
    try:
        designers = await service.list_designers()
        return {
            "status": "success",
            "count": len(designers),
            "data": [
                {"id": user.id, "name": user.name, "email": user.email, "image_url": user.image_url}
                for user in designers
            ],
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching designers: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching designers: {str(e)}")


@router.put("/{user_id}/role", dependencies=[Depends(require_admin)])
async def set_user_role(
    user_id: str,
    role: str = Body(..., embed=True),
    service: UserService = Depends(get_user_service)
):
    """Set the role stored in the user's public metadata (admin, designer, shipper, customer)"""
    try:
        user = await service.set_role(user_id, role)
        return {"status": "success", "data": user.to_public_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error setting role: {str(e)}")


@router.delete("/{user_id}/role", dependencies=[Depends(require_admin)])
async def remove_user_role(user_id: str, service: UserService = Depends(get_user_service)):
    try:
        user = await service.remove_role(user_id)
        return {"status": "success", "data": user.to_public_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing role: {str(e)}")
