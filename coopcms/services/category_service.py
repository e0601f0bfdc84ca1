import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from coopcms.api.models import CategoryCreate, CategoryUpdate, provided_fields
from coopcms.core import TreeMutator
from coopcms.core.errors import NotFoundError, ValidationError
from coopcms.models.entities import Category
from coopcms.repositories.category_repository import CategoryRepository
from coopcms.repositories.tree_repository import ANY_PARENT
from coopcms.services.serializers import category_summary, organization_summary
from coopcms.utils.slugify import copy_slug, slugify

logger = logging.getLogger(__name__)

NON_NULLABLE = ("name", "is_active", "category_type", "language")


def is_active(category: Category) -> bool:
    return bool(category.is_active)


class CategoryService:
    def __init__(self, session: Session):
        self.repo = CategoryRepository(session)
        self.mutator = TreeMutator(self.repo)
        self.queries = self.mutator.queries

    def get(self, category_id: int) -> Category:
        category = self.repo.get(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def list(
        self,
        parent_id: Any = ANY_PARENT,
        language: Optional[str] = None,
        category_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        categories = self.repo.list_active(parent_id, language, category_type)
        return [category_summary(category) for category in categories]

    def detail(self, category: Category) -> Dict[str, Any]:
        data = category_summary(category)
        parent = self.queries.parent(category)
        data.update({
            "parent": category_summary(parent) if parent else None,
            "children": [
                category_summary(child)
                for child in self.queries.children(category, is_active)
            ],
            "organization": organization_summary(self.repo.organization(category.organization_id)),
            "depth": self.queries.depth(category),
            "full_name": self.queries.full_name(category),
            "breadcrumb": self.queries.breadcrumb(category),
        })
        return data

    def show(self, category_id: int) -> Dict[str, Any]:
        category = self.repo.get_active(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return self.detail(category)

    def tree(self, language: Optional[str] = None, category_type: Optional[str] = None) -> List[Dict[str, Any]]:
        roots = self.repo.list_active(None, language, category_type)
        return [self.queries.subtree(root, category_summary, is_active) for root in roots]

    def _check_slug(self, slug: str, organization_id: Optional[int], language: str, exclude_id: Optional[int] = None) -> None:
        if not slug:
            raise ValidationError("The slug could not be generated from the name", field="slug")
        if self.repo.slug_taken(slug, organization_id, language, exclude_id):
            raise ValidationError("The slug has already been taken", field="slug")

    def create(self, payload: CategoryCreate) -> Category:
        data = payload.model_dump()
        parent_id = data.pop("parent_id")
        sort_order = data.pop("sort_order")

        if data["organization_id"] is None and parent_id is not None:
            parent = self.repo.get(parent_id)
            if parent is not None:
                data["organization_id"] = parent.organization_id
        elif data["organization_id"] is not None and self.repo.organization(data["organization_id"]) is None:
            raise ValidationError("The selected organization does not exist", field="organization_id")

        data["slug"] = data["slug"] or slugify(data["name"])
        self._check_slug(data["slug"], data["organization_id"], data["language"])

        category = Category(**data)
        self.mutator.create(category, parent_id=parent_id, position=sort_order)
        logger.info(f"[Category] Created {category.id} '{category.name}'")
        return category

    def update(self, category_id: int, payload: CategoryUpdate) -> Category:
        category = self.get(category_id)
        data = provided_fields(payload)
        for field in NON_NULLABLE:
            if field in data and data[field] is None:
                del data[field]

        reparent = "parent_id" in data
        new_parent_id = data.pop("parent_id", None)
        sort_order = data.pop("sort_order", None)

        if data.get("slug") is None:
            data.pop("slug", None)
        if "slug" in data or "language" in data:
            self._check_slug(
                data.get("slug", category.slug),
                category.organization_id,
                data.get("language", category.language),
                exclude_id=category.id,
            )

        for field, value in data.items():
            setattr(category, field, value)

        if reparent:
            self.mutator.reparent(category, new_parent_id, sort_order)
        else:
            self.mutator.refresh_scope(category)
            if sort_order is not None:
                self.mutator.update_position(category, sort_order)

        logger.info(f"[Category] Updated {category.id}")
        return category

    def delete(self, category_id: int) -> None:
        category = self.get(category_id)
        self.mutator.delete(category, has_content=self.repo.has_content)

    def reorder(self, category_id: int, position: int) -> Category:
        category = self.get(category_id)
        self.mutator.reorder(category, position)
        return category

    def duplicate(self, category_id: int) -> Category:
        source = self.get(category_id)

        def reset(copy: Category) -> None:
            copy.name = f"{source.name} (Copy)"
            copy.slug = copy_slug(
                source.slug,
                lambda slug: self.repo.slug_taken(slug, source.organization_id, source.language),
            )
            copy.is_active = False

        return self.mutator.duplicate(source, reset)
