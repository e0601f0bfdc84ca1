from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from coopcms.models.entities import Page, PageComponent
from coopcms.models.trees import COMPONENT_TREE
from coopcms.repositories.tree_repository import TreeRepository


class ComponentRepository(TreeRepository):
    def __init__(self, session: Session):
        super().__init__(session, COMPONENT_TREE)

    def list(
        self,
        page_id: Optional[int] = None,
        componentable_type: Optional[str] = None,
        language: Optional[str] = None,
        is_draft: Optional[bool] = None,
    ) -> List[PageComponent]:
        stmt = select(PageComponent)
        if page_id is not None:
            stmt = stmt.where(PageComponent.page_id == page_id)
        if componentable_type:
            stmt = stmt.where(PageComponent.componentable_type == componentable_type)
        if language:
            stmt = stmt.where(PageComponent.language == language)
        if is_draft is not None:
            stmt = stmt.where(PageComponent.is_draft.is_(is_draft))
        stmt = stmt.order_by(PageComponent.page_id, PageComponent.position, PageComponent.id)
        return list(self.session.scalars(stmt))

    def published_roots(self, page_id: int, language: Optional[str] = None) -> List[PageComponent]:
        stmt = select(PageComponent).where(
            PageComponent.page_id == page_id,
            PageComponent.parent_id.is_(None),
            PageComponent.is_draft.is_(False),
        )
        if language:
            stmt = stmt.where(PageComponent.language == language)
        return list(self.session.scalars(stmt.order_by(PageComponent.position, PageComponent.id)))

    def count_for_page(self, page_id: int) -> int:
        stmt = select(func.count()).select_from(PageComponent).where(PageComponent.page_id == page_id)
        return self.session.scalar(stmt) or 0

    def set_language(self, page_id: int, language: str) -> int:
        stmt = (
            update(PageComponent)
            .where(PageComponent.page_id == page_id, PageComponent.language != language)
            .values(language=language)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def page(self, page_id: Optional[int]) -> Optional[Page]:
        if page_id is None:
            return None
        return self.session.get(Page, page_id)
