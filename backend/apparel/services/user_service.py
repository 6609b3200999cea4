"""
User Service

Users, roles and wish lists all live in the identity provider. Roles are
public metadata; wish lists are private metadata.
"""
import logging
from typing import List

from apparel.connectors.identity_connector import IdentityConnector
from apparel.core.auth import ROLES
from apparel.core.exceptions import NotFoundError, ValidationError
from apparel.domain.user import IdentityUser
from apparel.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, identity_connector: IdentityConnector = None, product_repository: ProductRepository = None):
        self.identity = identity_connector or IdentityConnector()
        self.products = product_repository or ProductRepository()

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def list_designers(self) -> List[IdentityUser]:
        users = await self.identity.list_all_users()
        return [user for user in users if user.role == "designer"]

    async def set_role(self, user_id: str, role: str) -> IdentityUser:
        if role not in ROLES:
            raise ValidationError(f"Invalid role: {role}. Allowed: {', '.join(ROLES)}")
        user = await self.identity.update_metadata(user_id, public_metadata={"role": role})
        logger.info(f"Role of user {user_id} set to {role}")
        return user

    async def remove_role(self, user_id: str) -> IdentityUser:
        user = await self.identity.update_metadata(user_id, public_metadata={"role": None})
        logger.info(f"Role of user {user_id} removed")
        return user

    # ------------------------------------------------------------------
    # Wish list
    # ------------------------------------------------------------------

    async def get_wishlist(self, user_id: str) -> dict:
        """Saved product ids plus the products that still exist"""
        user = await self.identity.get_user(user_id)
        product_ids = user.wish_list
        products = self.products.find_by_ids(product_ids)
        return {
            "product_ids": product_ids,
            "products": [products[product_id].to_dict() for product_id in product_ids if product_id in products],
        }

    async def add_to_wishlist(self, user_id: str, product_id: int) -> List[int]:
        if not self.products.find_by_id(product_id, with_colors=False):
            raise NotFoundError("Product not found")

        user = await self.identity.get_user(user_id)
        wish_list = user.wish_list
        if product_id in wish_list:
            raise ValidationError("Product is already in your wishlist")

        wish_list.append(product_id)
        await self.identity.update_metadata(user_id, private_metadata={"wish_list": wish_list})
        return wish_list

    async def remove_from_wishlist(self, user_id: str, product_id: int) -> List[int]:
        user = await self.identity.get_user(user_id)
        wish_list = user.wish_list
        if product_id not in wish_list:
            raise NotFoundError("Product not found in wishlist")

        wish_list.remove(product_id)
        await self.identity.update_metadata(user_id, private_metadata={"wish_list": wish_list})
        return wish_list
