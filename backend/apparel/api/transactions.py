"""
Transactions API Endpoints
Admin view of Stripe charges linked to orders
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from apparel.core.auth import require_admin
from apparel.core.exceptions import AppError
from apparel.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def get_transaction_service() -> TransactionService:
    return TransactionService()


@router.get("/")
async def list_transactions(
    status: Optional[str] = Query(None, pattern="^(succeeded|refunded|disputed|failed|uncaptured)$"),
    start_date: Optional[date] = Query(None, alias="startDate", description="YYYY-MM-DD, inclusive"),
    end_date: Optional[date] = Query(None, alias="endDate", description="YYYY-MM-DD, inclusive"),
    min_amount: Optional[float] = Query(None, alias="minAmount", ge=0, description="Major currency units"),
    max_amount: Optional[float] = Query(None, alias="maxAmount", ge=0, description="Major currency units"),
    email: Optional[str] = Query(None, description="Customer email"),
    limit: int = Query(25, ge=1, le=100),
    starting_after: Optional[str] = Query(None, alias="startingAfter", description="Charge ID cursor"),
    service: TransactionService = Depends(get_transaction_service)
):
    try:
        result = service.list_transactions(
            status=status,
            start_date=start_date,
            end_date=end_date,
            min_amount=min_amount,
            max_amount=max_amount,
            email=email,
            limit=limit,
            starting_after=starting_after
        )
        return {
            "status": "success",
            "count": len(result["transactions"]),
            "hasMore": result["has_more"],
            "nextCursor": result["next_cursor"],
            "data": result["transactions"],
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error fetching transactions: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching transactions: {str(e)}")


@router.get("/{charge_id}")
async def get_transaction(charge_id: str, service: TransactionService = Depends(get_transaction_service)):
    try:
        return {"status": "success", "data": service.get_transaction(charge_id)}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching transaction: {str(e)}")
