"""
Design Service

Customers keep one original design per product color; saving again updates
it. Designers derive numbered versions from a customer's design.
"""
import logging
from typing import List, Tuple

from apparel.core.auth import TokenUser
from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.domain.design import Design, DesignSave, DesignUpdate, DesignVersionCreate
from apparel.repositories.design_repository import DesignRepository
from apparel.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class DesignService:

    def __init__(self, design_repository: DesignRepository = None, product_repository: ProductRepository = None):
        self.designs = design_repository or DesignRepository()
        self.products = product_repository or ProductRepository()

    def _check_image_refs(self, shirt_color_id: int, element_design: dict) -> None:
        color = self.products.find_color(shirt_color_id)
        if not color:
            raise NotFoundError("Product color not found")
        image_ids = {image.id for image in color.images}
        for side, element in element_design.items():
            if element.images_id not in image_ids:
                raise ValidationError(f"Image {element.images_id} does not belong to this color ({side})")

    def save(self, user_id: str, payload: DesignSave) -> Tuple[Design, bool]:
        """
        Create or update the user's design for a product color

        Returns:
            Tuple of (design, created)
        """
        self._check_image_refs(payload.shirt_color_id, payload.element_design)

        existing = self.designs.find_original(user_id, payload.shirt_color_id)
        if existing:
            fields = {"name": payload.name, "element_design": payload.element_design}
            if payload.design_images:
                fields["design_images"] = payload.design_images
            return self.designs.update(existing.id, fields), False

        design = self.designs.create(
            user_id=user_id,
            shirt_color_id=payload.shirt_color_id,
            name=payload.name,
            element_design=payload.element_design,
            design_images=payload.design_images
        )
        logger.info(f"Design {design.id} created for user {user_id}")
        return design, True

    def list_for_user(self, user_id: str) -> List[Design]:
        return self.designs.find_by_user(user_id)

    def get(self, user: TokenUser, design_id: int) -> Design:
        """Owners see their designs; designers and admins see every design"""
        design = self.designs.find_by_id(design_id)
        if not design:
            raise NotFoundError("Design not found")
        if not design.is_owned_by(user.id) and user.role not in ("admin", "designer"):
            raise ForbiddenError("You do not have access to this design")
        return design

    def update(self, user: TokenUser, design_id: int, payload: DesignUpdate) -> Design:
        design = self._get_owned(user, design_id)
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if payload.element_design is not None:
            self._check_image_refs(design.shirt_color_id, payload.element_design)
            fields["element_design"] = payload.element_design
        return self.designs.update(design_id, fields)

    def delete(self, user: TokenUser, design_id: int) -> None:
        self._get_owned(user, design_id)
        self.designs.delete(design_id)

    def create_version(self, user: TokenUser, design_id: int, payload: DesignVersionCreate) -> Design:
        """Derive the next version ("v1", "v2"...) of a design, keeping its owner"""
        parent = self.designs.find_by_id(design_id)
        if not parent:
            raise NotFoundError("Design not found")

        element_design = payload.element_design or parent.element_design
        if payload.element_design is not None:
            self._check_image_refs(parent.shirt_color_id, payload.element_design)

        version_number = self.designs.count_versions(parent.id) + 1
        design = self.designs.create(
            user_id=parent.user_id,
            shirt_color_id=parent.shirt_color_id,
            name=payload.name or parent.name,
            element_design=element_design,
            design_images=payload.design_images if payload.design_images is not None else parent.design_images,
            parent_design_id=parent.id,
            version=f"v{version_number}"
        )
        logger.info(f"User {user.id} created version {design.version} of design {parent.id}")
        return design

    def _get_owned(self, user: TokenUser, design_id: int) -> Design:
        design = self.designs.find_by_id(design_id)
        if not design:
            raise NotFoundError("Design not found")
        if not design.is_owned_by(user.id):
            raise ForbiddenError("You can only modify your own designs")
        return design
