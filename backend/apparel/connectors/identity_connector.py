"""
Identity Provider Connector
Handles calls to the identity provider's backend REST API (users and metadata)
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from apparel.core.config import settings
from apparel.core.exceptions import IdentityProviderError, NotFoundError
from apparel.domain.user import IdentityUser

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class IdentityConnector:
    """
    Connector for the identity provider backend API

    Handles:
    - User lookup and listing
    - Public metadata (role) and private metadata (payments, wish list) updates
    """

    def __init__(self, secret_key: str = None, api_url: str = None):
        self.secret_key = secret_key or settings.CLERK_SECRET_KEY
        self.api_url = (api_url or settings.CLERK_API_URL).rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, params: Dict = None, json: Dict = None) -> Any:
        if not self.secret_key:
            raise IdentityProviderError("Identity provider credentials not configured. Set CLERK_SECRET_KEY")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.request(
                    method,
                    f"{self.api_url}{path}",
                    params=params,
                    json=json,
                    headers=self.headers,
                    timeout=30.0
                )
            except httpx.HTTPError as e:
                logger.error(f"Identity provider request failed: {method} {path}: {e}")
                raise IdentityProviderError(f"Identity provider unavailable: {e}")

        if response.status_code == 404:
            raise NotFoundError("User not found")
        if response.status_code >= 400:
            logger.error(f"Identity provider error {response.status_code} on {method} {path}: {response.text}")
            raise IdentityProviderError(f"Identity provider error: {response.status_code}")

        return response.json()

    async def get_user(self, user_id: str) -> IdentityUser:
        data = await self._request("GET", f"/users/{user_id}")
        return IdentityUser.from_api(data)

    async def list_users(self, limit: int = PAGE_SIZE, offset: int = 0, order_by: str = "-created_at") -> List[IdentityUser]:
        data = await self._request(
            "GET", "/users", params={"limit": limit, "offset": offset, "order_by": order_by}
        )
        return [IdentityUser.from_api(item) for item in data]

    async def list_all_users(self) -> List[IdentityUser]:
        users: List[IdentityUser] = []
        offset = 0
        while True:
            page = await self.list_users(limit=PAGE_SIZE, offset=offset)
            users.extend(page)
            if len(page) < PAGE_SIZE:
                return users
            offset += PAGE_SIZE

    async def count_users(self) -> int:
        data = await self._request("GET", "/users/count")
        return int(data.get("total_count", 0))

    async def count_users_since(self, since: datetime) -> int:
        """Count users created at or after `since` (pages newest first)"""
        count = 0
        offset = 0
        while True:
            page = await self.list_users(limit=PAGE_SIZE, offset=offset)
            for user in page:
                if user.created_at is None or user.created_at < since:
                    return count
                count += 1
            if len(page) < PAGE_SIZE:
                return count
            offset += PAGE_SIZE

    async def update_metadata(
        self,
        user_id: str,
        public_metadata: Optional[Dict] = None,
        private_metadata: Optional[Dict] = None
    ) -> IdentityUser:
        """
        Merge metadata into the user's existing metadata

        Keys set to None are removed by the provider.
        """
        body: Dict[str, Dict] = {}
        if public_metadata is not None:
            body["public_metadata"] = public_metadata
        if private_metadata is not None:
            body["private_metadata"] = private_metadata

        logger.info(f"Updating metadata for user {user_id}: {sorted(body)}")
        data = await self._request("PATCH", f"/users/{user_id}/metadata", json=body)
        return IdentityUser.from_api(data)
