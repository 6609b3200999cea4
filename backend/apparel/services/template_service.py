"""
Design Template Service
"""
import logging
from typing import List, Optional, Tuple

from apparel.core.exceptions import NotFoundError
from apparel.core.pagination import page_offset
from apparel.domain.design_template import DesignTemplate, DesignTemplateCreate, DesignTemplateUpdate
from apparel.repositories.design_template_repository import DesignTemplateRepository

logger = logging.getLogger(__name__)


class TemplateService:

    def __init__(self, template_repository: DesignTemplateRepository = None):
        self.templates = template_repository or DesignTemplateRepository()

    def list(
        self,
        include_inactive: bool = False,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        is_active: Optional[bool] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 12
    ) -> Tuple[List[DesignTemplate], int]:
        """Non-admin callers only ever see active templates; category "all" means no filter"""
        if not include_inactive:
            is_active = True
        return self.templates.find_all(
            category=None if category in (None, "", "all") else category,
            search=search,
            is_active=is_active,
            featured=featured,
            sort=sort,
            limit=limit,
            offset=page_offset(page, limit)
        )

    def get(self, template_id: int, include_inactive: bool = False) -> DesignTemplate:
        template = self.templates.find_by_id(template_id)
        if not template or (not template.is_active and not include_inactive):
            raise NotFoundError("Design template not found")
        return template

    def create(self, payload: DesignTemplateCreate) -> DesignTemplate:
        template = self.templates.create(payload.model_dump())
        logger.info(f"Design template {template.id} created: {template.name}")
        return template

    def update(self, template_id: int, payload: DesignTemplateUpdate) -> DesignTemplate:
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        template = self.templates.update(template_id, fields) if fields else self.templates.find_by_id(template_id)
        if not template:
            raise NotFoundError("Design template not found")
        return template

    def toggle_status(self, template_id: int) -> DesignTemplate:
        template = self.templates.toggle_active(template_id)
        if not template:
            raise NotFoundError("Design template not found")
        return template

    def delete(self, template_id: int) -> None:
        if not self.templates.delete(template_id):
            raise NotFoundError("Design template not found")
