"""
Designs API Endpoints
Customer shirt designs and designer-made versions
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from apparel.core.auth import TokenUser, get_current_user, require_designer
from apparel.core.exceptions import AppError
from apparel.domain.design import DesignSave, DesignUpdate, DesignVersionCreate
from apparel.services.design_service import DesignService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_design_service() -> DesignService:
    return DesignService()


@router.post("/")
async def save_design(
    payload: DesignSave,
    response: Response,
    current_user: TokenUser = Depends(get_current_user),
    service: DesignService = Depends(get_design_service)
):
    """
    Save the user's design for a product color

    Returns 201 when a design is created and 200 when the existing one is updated.
    """
    try:
        design, created = service.save(current_user.id, payload)
        response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return {"status": "success", "created": created, "data": design.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error saving design: {e}")
        raise HTTPException(status_code=500, detail=f"Error saving design: {str(e)}")


@router.get("/")
async def get_my_designs(
    current_user: TokenUser = Depends(get_current_user),
    service: DesignService = Depends(get_design_service)
):
    try:
        designs = service.list_for_user(current_user.id)
        return {"status": "success", "count": len(designs), "data": [design.to_dict() for design in designs]}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching designs: {str(e)}")


@router.get("/{design_id}")
async def get_design(
    design_id: int,
    current_user: TokenUser = Depends(get_current_user),
    service: DesignService = Depends(get_design_service)
):
    try:
        design = service.get(current_user, design_id)
        return {"status": "success", "data": design.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching design: {str(e)}")


@router.put("/{design_id}")
async def update_design(
    design_id: int,
    payload: DesignUpdate,
    current_user: TokenUser = Depends(get_current_user),
    service: DesignService = Depends(get_design_service)
):
    try:
        design = service.update(current_user, design_id, payload)
        return {"status": "success", "data": design.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating design: {str(e)}")


@router.delete("/{design_id}")
async def delete_design(
    design_id: int,
    current_user: TokenUser = Depends(get_current_user),
    service: DesignService = Depends(get_design_service)
):
    try:
        service.delete(current_user, design_id)
        return {"status": "success", "message": "Design deleted"}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting design: {str(e)}")


@router.post("/{design_id}/versions", status_code=status.HTTP_201_CREATED)
async def create_design_version(
    design_id: int,
    payload: DesignVersionCreate,
    current_user: TokenUser = Depends(require_designer),
    service: DesignService = Depends(get_design_service)
):
    """Derive a numbered version of a design (designers and admins)"""
    try:
        design = service.create_version(current_user, design_id, payload)
        return {"status": "success", "data": design.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating design version: {str(e)}")
