"""
Dashboard API Endpoints
Admin statistics and revenue analytics
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from apparel.core.auth import require_admin
from apparel.core.exceptions import AppError
from apparel.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def get_dashboard_service() -> DashboardService:
    return DashboardService()


@router.get("/stats")
async def get_dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    """
    Get dashboard statistics

    Returns:
    - Orders per status and total
    - Revenue total and average order value (canceled orders excluded)
    - Product and color variant counts
    - User and template counts
    - Recent orders, today and this week (weeks start on Sunday)
    - Top 5 products by units sold
    """
    try:
        return {"status": "success", "data": await service.get_stats()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard stats: {str(e)}")


@router.get("/revenue")
async def get_revenue_analytics(
    days: int = Query(30, ge=1, le=365),
    service: DashboardService = Depends(get_dashboard_service)
):
    try:
        return {"status": "success", "data": service.revenue_analytics(days=days)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching revenue analytics: {str(e)}")
