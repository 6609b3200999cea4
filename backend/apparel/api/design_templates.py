"""
Design Templates API Endpoints
Public browsing of ready-made artwork plus admin management
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from apparel.core.auth import TokenUser, get_current_user_optional, require_admin
from apparel.core.exceptions import AppError
from apparel.core.pagination import pagination_meta
from apparel.domain.design_template import DesignTemplateCreate, DesignTemplateUpdate, TemplateSort
from apparel.services.template_service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_template_service() -> TemplateService:
    return TemplateService()


@router.get("/")
async def get_templates(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: Optional[str] = Query(None, description="Template category, or 'all'"),
    search: Optional[str] = Query(None),
    sort: TemplateSort = Query("newest"),
    is_active: Optional[bool] = Query(None, alias="isActive", description="Admins only"),
    featured: Optional[bool] = Query(None),
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: TemplateService = Depends(get_template_service)
):
    try:
        templates, total = service.list(
            include_inactive=bool(user and user.is_admin),
            category=category,
            search=search,
            sort=sort,
            is_active=is_active,
            featured=featured,
            page=page,
            limit=limit
        )
        return {
            "status": "success",
            "data": [template.to_dict() for template in templates],
            "pagination": pagination_meta(page, limit, total),
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching templates: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching templates: {str(e)}")


@router.get("/{template_id}")
async def get_template(
    template_id: int,
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: TemplateService = Depends(get_template_service)
):
    try:
        template = service.get(template_id, include_inactive=bool(user and user.is_admin))
        return {"status": "success", "data": template.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching template: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_template(payload: DesignTemplateCreate, service: TemplateService = Depends(get_template_service)):
    try:
        return {"status": "success", "data": service.create(payload).to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating template: {str(e)}")


@router.patch("/{template_id}", dependencies=[Depends(require_admin)])
async def update_template(
    template_id: int,
    payload: DesignTemplateUpdate,
    service: TemplateService = Depends(get_template_service)
):
    try:
        return {"status": "success", "data": service.update(template_id, payload).to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating template: {str(e)}")


@router.patch("/{template_id}/toggle-status", dependencies=[Depends(require_admin)])
async def toggle_template_status(template_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        return {"status": "success", "data": service.toggle_status(template_id).to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error toggling template: {str(e)}")


@router.delete("/{template_id}", dependencies=[Depends(require_admin)])
async def delete_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        service.delete(template_id)
        return {"status": "success", "message": "Template deleted"}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting template: {str(e)}")
