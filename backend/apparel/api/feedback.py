"""
Feedback API Endpoints
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from apparel.core.auth import TokenUser, get_current_user
from apparel.core.exceptions import AppError
from apparel.domain.feedback import FeedbackCreate
from apparel.services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_feedback_service() -> FeedbackService:
    return FeedbackService()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_feedback(
    payload: FeedbackCreate,
    current_user: TokenUser = Depends(get_current_user),
    service: FeedbackService = Depends(get_feedback_service)
):
    try:
        feedback = service.create(current_user.id, payload)
        return {"status": "success", "data": feedback.to_dict()}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error saving feedback: {e}")
        raise HTTPException(status_code=500, detail=f"Error saving feedback: {str(e)}")


@router.get("/products/{product_id}")
async def get_product_feedback(product_id: int, service: FeedbackService = Depends(get_feedback_service)):
    try:
        feedback = service.list_for_product(product_id)
        return {"status": "success", "count": len(feedback), "data": [item.to_dict() for item in feedback]}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching feedback: {str(e)}")
