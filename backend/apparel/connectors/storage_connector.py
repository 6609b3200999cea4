"""
Object Storage Connector
Deletes uploaded files (design previews, product mockups, shipping photos)
from the Supabase Storage bucket.
"""
import logging
from typing import List, Optional

from supabase import Client, create_client

from apparel.core.config import settings
from apparel.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageConnector:

    def __init__(self, url: str = None, key: str = None, bucket: str = None, client: Optional[Client] = None):
        self.url = url or settings.SUPABASE_URL
        self.key = key or settings.SUPABASE_SERVICE_ROLE_KEY
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.url or not self.key:
                raise StorageError("Storage not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
            self._client = create_client(self.url, self.key)
        return self._client

    def delete_files(self, file_keys: List[str]) -> None:
        logger.info(f"Deleting {len(file_keys)} file(s) from bucket {self.bucket}: {file_keys}")
        try:
            self.client.storage.from_(self.bucket).remove(file_keys)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Error deleting files from storage: {e}")
            raise StorageError(f"Error deleting file: {e}")


def get_storage_connector() -> StorageConnector:
    """FastAPI dependency"""
    return StorageConnector()
