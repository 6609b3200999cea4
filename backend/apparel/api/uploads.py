"""
Uploads API Endpoints
Files are uploaded straight from the browser to Supabase Storage; the API only
deletes them.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from apparel.connectors.storage_connector import StorageConnector, get_storage_connector
from apparel.core.auth import TokenUser, get_current_user
from apparel.core.exceptions import AppError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


class FileDelete(BaseModel):
    file_key: Optional[str] = None


@router.delete("/")
async def delete_file(
    payload: FileDelete,
    current_user: TokenUser = Depends(get_current_user),
    storage: StorageConnector = Depends(get_storage_connector)
):
    try:
        if not payload.file_key or not payload.file_key.strip():
            raise ValidationError("file_key is required")

        storage.delete_files([payload.file_key.strip()])
        logger.info(f"User {current_user.id} deleted file {payload.file_key}")
        return {"status": "success", "success": True}

    except (HTTPException, AppError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting file: {str(e)}")
