"""
Request Quotes API Endpoints
Quote requests from customers and versioned answers from staff
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from apparel.core.auth import TokenUser, get_current_user_optional, require_admin, require_designer
from apparel.core.exceptions import AppError
from apparel.domain.request_quote import (
    AdminResponseCreate,
    DesignerAssignment,
    QuoteCustomerFeedback,
    QuoteStatus,
    QuoteStatusUpdate,
    QuoteType,
    RequestQuoteCreate,
)
from apparel.services.request_quote_service import RequestQuoteService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_quote_service() -> RequestQuoteService:
    return RequestQuoteService()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_request_quote(
    payload: RequestQuoteCreate,
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: RequestQuoteService = Depends(get_quote_service)
):
    """Submit a quote request; signed-in users get it linked to their account"""
    try:
        quote = service.create(payload, user_id=user.id if user else None)
        return {"status": "success", "data": quote.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error creating quote request: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating quote request: {str(e)}")


@router.get("/")
async def get_request_quotes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[QuoteStatus] = Query(None),
    quote_type: Optional[QuoteType] = Query(None, alias="type"),
    search: Optional[str] = Query(None, description="Name, email or company"),
    designer_id: Optional[str] = Query(None, alias="designerId", description="Only quotes assigned to this designer"),
    sort_by: str = Query("createdAt", alias="sortBy", pattern="^(createdAt|updatedAt|status)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        quotes, total = service.list(
            status=status,
            quote_type=quote_type,
            search=search,
            designer_id=designer_id,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit
        )
        return {
            "status": "success",
            "data": {
                "items": [quote.to_dict() for quote in quotes],
                "totalItems": total,
                "page": page,
                "pageSize": limit,
            },
        }

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching quote requests: {str(e)}")


@router.get("/{quote_id}")
async def get_request_quote(
    quote_id: int,
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        return {"status": "success", "data": service.get(quote_id).to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching quote request: {str(e)}")


@router.get("/{quote_id}/responses/current")
async def get_current_response(
    quote_id: int,
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        response = service.get(quote_id).current_response()
        return {"status": "success", "data": response.to_dict() if response else None}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching quote response: {str(e)}")


@router.get("/{quote_id}/responses")
async def get_response_history(
    quote_id: int,
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    """All response versions, oldest first"""
    try:
        history = service.get(quote_id).response_history()
        return {"status": "success", "count": len(history), "data": [response.to_dict() for response in history]}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching quote responses: {str(e)}")


@router.post("/{quote_id}/responses", status_code=status.HTTP_201_CREATED)
async def add_admin_response(
    quote_id: int,
    payload: AdminResponseCreate,
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        quote = service.add_admin_response(quote_id, payload, responded_by=current_user.id)
        return {"status": "success", "data": quote.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding quote response: {str(e)}")


@router.put("/{quote_id}/status")
async def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    current_user: TokenUser = Depends(require_designer),
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        quote = service.update_status(quote_id, payload.status, payload.admin_notes)
        return {"status": "success", "data": quote.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating quote status: {str(e)}")


@router.put("/{quote_id}/designer", dependencies=[Depends(require_admin)])
async def assign_designer(
    quote_id: int,
    payload: DesignerAssignment,
    service: RequestQuoteService = Depends(get_quote_service)
):
    try:
        quote = await service.assign_designer(quote_id, payload.designer_id)
        return {"status": "success", "data": quote.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error assigning designer: {str(e)}")


@router.delete("/{quote_id}/designer", dependencies=[Depends(require_admin)])
async def unassign_designer(quote_id: int, service: RequestQuoteService = Depends(get_quote_service)):
    try:
        quote = service.unassign_designer(quote_id)
        return {"status": "success", "data": quote.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error unassigning designer: {str(e)}")


@router.post("/{quote_id}/feedback")
async def submit_customer_feedback(
    quote_id: int,
    payload: QuoteCustomerFeedback,
    service: RequestQuoteService = Depends(get_quote_service)
):
    """Customer feedback on the current response; the email must match the request"""
    try:
        response = service.customer_feedback(quote_id, payload).current_response()
        return {"status": "success", "data": response.to_dict() if response else None}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error saving feedback: {str(e)}")
