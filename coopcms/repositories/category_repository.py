from typing import Any, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from coopcms.models.entities import Article, Category, Image, Organization
from coopcms.models.trees import CATEGORY_TREE
from coopcms.repositories.tree_repository import ANY_PARENT, TreeRepository


class CategoryRepository(TreeRepository):
    def __init__(self, session: Session):
        super().__init__(session, CATEGORY_TREE)

    def list_active(
        self,
        parent_id: Any = ANY_PARENT,
        language: Optional[str] = None,
        category_type: Optional[str] = None,
    ) -> List[Category]:
        stmt = select(Category).where(Category.is_active.is_(True))
        if parent_id is None:
            stmt = stmt.where(Category.parent_id.is_(None))
        elif parent_id is not ANY_PARENT:
            stmt = stmt.where(Category.parent_id == parent_id)
        if language:
            stmt = stmt.where(Category.language == language)
        if category_type:
            stmt = stmt.where(Category.category_type == category_type)
        return list(self.session.scalars(stmt.order_by(Category.sort_order, Category.name)))

    def get_active(self, category_id: int) -> Optional[Category]:
        category = self.get(category_id)
        if category is None or not category.is_active:
            return None
        return category

    def slug_taken(
        self,
        slug: str,
        organization_id: Optional[int],
        language: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        stmt = select(Category.id).where(
            Category.slug == slug,
            Category.language == language,
        )
        if organization_id is None:
            stmt = stmt.where(Category.organization_id.is_(None))
        else:
            stmt = stmt.where(Category.organization_id == organization_id)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return self.session.scalars(stmt).first() is not None

    def has_content(self, category: Category) -> bool:
        for model in (Article, Image):
            stmt = select(func.count()).select_from(model).where(model.category_id == category.id)
            if self.session.scalar(stmt):
                return True
        return False

    def organization(self, organization_id: Optional[int]) -> Optional[Organization]:
        if organization_id is None:
            return None
        return self.session.get(Organization, organization_id)
