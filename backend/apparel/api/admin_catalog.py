"""
Admin Catalog API
Products, colors, images, size variants, inventory and categories (admin only)
"""
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status

from apparel.core.auth import require_admin
from apparel.core.exceptions import AppError
from apparel.domain.catalog import (
    CategoryCreate,
    CategoryUpdate,
    ColorCreate,
    ColorUpdate,
    ImageSave,
    InventoryUpdate,
    ProductCreate,
    ProductUpdate,
    SizeVariantCreate,
    SizeVariantUpdate,
)
from apparel.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def get_catalog_service() -> CatalogService:
    return CatalogService()


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}")
    return HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")


# ============================================================================
# Products
# ============================================================================

@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreate, service: CatalogService = Depends(get_catalog_service)):
    try:
        product = service.create_product(payload)
        return {"status": "success", "data": product.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("creating product", e)


@router.put("/products/{product_id}")
async def update_product(product_id: int, payload: ProductUpdate, service: CatalogService = Depends(get_catalog_service)):
    try:
        product = service.update_product(product_id, payload)
        return {"status": "success", "data": product.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating product", e)


@router.patch("/products/{product_id}/toggle-status")
async def toggle_product_status(product_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        product = service.toggle_product_status(product_id)
        return {"status": "success", "data": product.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("toggling product status", e)


@router.delete("/products/{product_id}")
async def delete_product(product_id: int, service: CatalogService = Depends(get_catalog_service)):
    """Deletes the product with its colors, images and size variants"""
    try:
        service.delete_product(product_id)
        return {"status": "success", "message": "Product deleted"}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("deleting product", e)


# ============================================================================
# Colors and images
# ============================================================================

@router.post("/products/{product_id}/colors", status_code=status.HTTP_201_CREATED)
async def create_color(product_id: int, payload: ColorCreate, service: CatalogService = Depends(get_catalog_service)):
    """Create a color; one size variant per fixed size is created with it"""
    try:
        color = service.create_color(product_id, payload)
        return {"status": "success", "data": color.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("creating color", e)


@router.put("/colors/{color_id}")
async def update_color(color_id: int, payload: ColorUpdate, service: CatalogService = Depends(get_catalog_service)):
    try:
        color = service.update_color(color_id, payload)
        return {"status": "success", "data": color.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating color", e)


@router.delete("/colors/{color_id}")
async def delete_color(color_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        service.delete_color(color_id)
        return {"status": "success", "message": "Color deleted"}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("deleting color", e)


@router.post("/colors/{color_id}/images")
async def save_image(color_id: int, payload: ImageSave, service: CatalogService = Depends(get_catalog_service)):
    """Save the image of one view side, replacing any existing image for that side"""
    try:
        image = service.save_image(color_id, payload)
        return {"status": "success", "data": image.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("saving image", e)


@router.delete("/images/{image_id}")
async def delete_image(image_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        service.delete_image(image_id)
        return {"status": "success", "message": "Image deleted"}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("deleting image", e)


# ============================================================================
# Size variants and inventory
# ============================================================================

@router.post("/colors/{color_id}/sizes", status_code=status.HTTP_201_CREATED)
async def add_size(color_id: int, payload: SizeVariantCreate, service: CatalogService = Depends(get_catalog_service)):
    try:
        variant = service.add_size(color_id, payload)
        return {"status": "success", "data": variant.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("adding size", e)


@router.put("/sizes/{variant_id}")
async def update_size(variant_id: int, payload: SizeVariantUpdate, service: CatalogService = Depends(get_catalog_service)):
    try:
        variant = service.update_size(variant_id, payload)
        return {"status": "success", "data": variant.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating size", e)


@router.delete("/sizes/{variant_id}")
async def delete_size(variant_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        service.delete_size(variant_id)
        return {"status": "success", "message": "Size deleted"}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("deleting size", e)


@router.get("/products/{product_id}/inventory")
async def get_inventory(product_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        return {"status": "success", "data": service.get_inventory(product_id)}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("fetching inventory", e)


@router.put("/inventory/{variant_id}")
async def update_inventory(
    variant_id: int,
    quantity: int = Body(..., embed=True),
    service: CatalogService = Depends(get_catalog_service)
):
    """Set the stock of one size variant; negative quantities are stored as 0"""
    try:
        variant = service.update_inventory(variant_id, quantity)
        return {"status": "success", "data": variant.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating inventory", e)


@router.put("/inventory")
async def batch_update_inventory(
    updates: List[InventoryUpdate] = Body(..., embed=True),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        variants = service.batch_update_inventory(updates)
        return {
            "status": "success",
            "updated": len(variants),
            "data": [variant.to_dict() for variant in variants],
        }
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating inventory", e)


# ============================================================================
# Categories
# ============================================================================

@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, service: CatalogService = Depends(get_catalog_service)):
    try:
        category = service.create_category(payload)
        return {"status": "success", "data": category.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("creating category", e)


@router.put("/categories/{category_id}")
async def update_category(category_id: int, payload: CategoryUpdate, service: CatalogService = Depends(get_catalog_service)):
    try:
        category = service.update_category(category_id, payload)
        return {"status": "success", "data": category.to_dict()}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("updating category", e)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        service.delete_category(category_id)
        return {"status": "success", "message": "Category deleted"}
    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise _server_error("deleting category", e)
