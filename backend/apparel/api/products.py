"""
Products API Endpoints
Public catalog: products with their colors, images and sizes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from apparel.core.auth import TokenUser, get_current_user_optional
from apparel.core.exceptions import AppError
from apparel.core.pagination import pagination_meta, split_csv, split_csv_ints
from apparel.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_catalog_service() -> CatalogService:
    return CatalogService()


@router.get("/")
async def get_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: str = Query("newest", pattern="^(newest|oldest|price_high|price_low)$"),
    search: Optional[str] = Query(None, description="Search by name"),
    sizes: Optional[str] = Query(None, description="Comma-separated sizes, e.g. S,M"),
    colors: Optional[str] = Query(None, description="Comma-separated color names"),
    categories: Optional[str] = Query(None, description="Comma-separated category IDs"),
    product_ids: Optional[str] = Query(None, alias="productIds", description="Comma-separated product IDs"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get products with filters

    Admins also see inactive products.
    """
    try:
        products, total = service.list_products(
            include_inactive=bool(user and user.is_admin),
            page=page,
            limit=limit,
            search=search,
            sizes=split_csv(sizes),
            colors=split_csv(colors),
            categories=split_csv_ints(categories),
            product_ids=split_csv_ints(product_ids),
            min_price=min_price,
            max_price=max_price,
            sort=sort
        )
        meta = pagination_meta(page, limit, total)

        return {
            "status": "success",
            "data": [product.to_dict() for product in products],
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": meta["totalPages"],
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching products: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/categories")
async def get_categories(service: CatalogService = Depends(get_catalog_service)):
    try:
        categories = service.list_categories()
        return {"status": "success", "data": [category.to_dict() for category in categories]}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/colors")
async def get_colors(service: CatalogService = Depends(get_catalog_service)):
    """Distinct colors of active products grouped by color value"""
    try:
        return {"status": "success", "data": service.list_colors()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching colors: {str(e)}")


@router.get("/colors/{color_id}/sizes")
async def get_color_sizes(color_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        return {"status": "success", "data": service.get_color_sizes(color_id)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sizes: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        product = service.get_product(product_id, include_inactive=bool(user and user.is_admin))
        return {"status": "success", "data": product.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")
