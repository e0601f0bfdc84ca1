from typing import Any, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from coopcms.config import Config
from coopcms.models.entities import Organization, Page
from coopcms.models.trees import PAGE_TREE
from coopcms.repositories.tree_repository import ANY_PARENT, TreeRepository


class PageRepository(TreeRepository):
    def __init__(self, session: Session):
        super().__init__(session, PAGE_TREE)

    def published(self):
        return select(Page).where(Page.is_draft.is_(False))

    def list_published(
        self,
        language: Optional[str] = None,
        template: Optional[str] = None,
        parent_id: Any = ANY_PARENT,
    ) -> List[Page]:
        stmt = self.published()
        if language:
            stmt = stmt.where(Page.language == language)
        if template:
            stmt = stmt.where(Page.template == template)
        if parent_id is None:
            stmt = stmt.where(Page.parent_id.is_(None))
        elif parent_id is not ANY_PARENT:
            stmt = stmt.where(Page.parent_id == parent_id)
        return list(self.session.scalars(stmt.order_by(Page.sort_order, Page.title)))

    def find_published(self, key: str) -> Optional[Page]:
        """Look a published page up by id, slug or route, in that order."""
        if key.isdigit():
            page = self.get(int(key))
            if page is not None and not page.is_draft:
                return page

        stmt = self.published().where(Page.slug == key).order_by(Page.id)
        page = self.session.scalars(stmt).first()
        if page is not None:
            return page
        return self.find_by_route(key)

    def find_by_route(self, route: str) -> Optional[Page]:
        route = "/" + route.lstrip("/")
        stmt = self.published().where(Page.route == route).order_by(Page.id)
        return self.session.scalars(stmt).first()

    def slug_taken(
        self,
        slug: str,
        organization_id: int,
        language: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        stmt = select(Page.id).where(
            Page.slug == slug,
            Page.organization_id == organization_id,
            Page.language == language,
        )
        if exclude_id is not None:
            stmt = stmt.where(Page.id != exclude_id)
        return self.session.scalars(stmt).first() is not None

    def search(self, query: str, language: Optional[str] = None) -> List[Page]:
        pattern = f"%{query}%"
        stmt = self.published().where(
            or_(Page.title.ilike(pattern), Page.search_keywords.ilike(pattern))
        )
        if language:
            stmt = stmt.where(Page.language == language)
        stmt = stmt.order_by(
            Page.last_reviewed_at.desc().nulls_last(),
            Page.title,
        ).limit(Config.SEARCH_RESULT_LIMIT)
        return list(self.session.scalars(stmt))

    def organization_exists(self, organization_id: int) -> bool:
        return self.session.get(Organization, organization_id) is not None
