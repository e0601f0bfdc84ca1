import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from coopcms.api.models import PageCreate, PageUpdate, provided_fields
from coopcms.config import Config
from coopcms.core import TreeMutator
from coopcms.core.errors import MultiFieldValidationError, NotFoundError, ValidationError
from coopcms.models.entities import Page
from coopcms.repositories.component_repository import ComponentRepository
from coopcms.repositories.page_repository import PageRepository
from coopcms.repositories.tree_repository import ANY_PARENT
from coopcms.services.cache_invalidation import invalidate_on_commit
from coopcms.services.serializers import component_summary, page_reference, page_summary
from coopcms.utils.cache import PageCache
from coopcms.utils.slugify import copy_slug, slugify

logger = logging.getLogger(__name__)

TEMPLATE_CACHE_MINUTES = {
    "landing": 30,
    "article_list": 15,
}

NON_NULLABLE = ("title", "slug", "language", "template", "is_draft", "requires_auth")


def cache_minutes_for(template: str) -> int:
    return TEMPLATE_CACHE_MINUTES.get(template, Config.DEFAULT_CACHE_MINUTES)


def is_published(page: Page) -> bool:
    return not page.is_draft


def normalize_route(route: Optional[str]) -> Optional[str]:
    if route is None:
        return None
    return "/" + route.strip().lstrip("/")


class PageService:
    def __init__(self, session: Session, cache: Optional[PageCache] = None):
        self.session = session
        self.repo = PageRepository(session)
        self.components = ComponentRepository(session)
        self.mutator = TreeMutator(self.repo)
        self.queries = self.mutator.queries
        self.cache = cache

    def get(self, page_id: int) -> Page:
        page = self.repo.get(page_id)
        if page is None:
            raise NotFoundError("Page not found")
        return page

    def has_components(self, page: Page) -> bool:
        return self.components.count_for_page(page.id) > 0

    def can_be_published(self, page: Page) -> bool:
        if not page.title or not page.slug:
            return False
        return self.has_components(page)

    def detail(self, page: Page, include_components: bool = False) -> Dict[str, Any]:
        data = page_summary(page)
        parent = self.queries.parent(page)
        data.update({
            "parent": page_reference(parent),
            "children": [page_summary(child) for child in self.queries.children(page, is_published)],
            "full_slug": self.queries.full_slug(page),
            "breadcrumb": self.queries.breadcrumb(page),
            "depth": self.queries.depth(page),
            "can_be_published": self.can_be_published(page),
        })
        if include_components:
            data["components"] = [
                component_summary(component)
                for component in self.components.list(page_id=page.id)
            ]
        return data

    def list(
        self,
        language: Optional[str] = None,
        template: Optional[str] = None,
        parent_id: Any = ANY_PARENT,
    ) -> List[Dict[str, Any]]:
        return [page_summary(page) for page in self.repo.list_published(language, template, parent_id)]

    def show(self, key: str, include_components: bool = False) -> Dict[str, Any]:
        page = self.repo.find_published(key)
        if page is None:
            raise NotFoundError("Page not found")
        return self.detail(page, include_components)

    def by_route(self, route: str) -> Dict[str, Any]:
        page = self.repo.find_by_route(route)
        if page is None:
            raise NotFoundError("Page not found")
        return self.detail(page)

    def hierarchy(self, language: Optional[str] = None) -> List[Dict[str, Any]]:
        roots = self.repo.list_published(language=language, parent_id=None)
        return [self.queries.subtree(root, page_summary, is_published) for root in roots]

    def search(self, query: str, language: Optional[str] = None) -> Dict[str, Any]:
        query = (query or "").strip()
        if len(query) < Config.SEARCH_MIN_LENGTH:
            raise ValidationError(
                f"The search query must be at least {Config.SEARCH_MIN_LENGTH} characters",
                field="q"
            )
        pages = self.repo.search(query, language)
        return {
            "data": [page_summary(page) for page in pages],
            "query": query,
            "total": len(pages),
        }

    def _check_slug(self, slug: str, organization_id: int, language: str, exclude_id: Optional[int] = None) -> None:
        if slug and self.repo.slug_taken(slug, organization_id, language, exclude_id):
            raise ValidationError("The slug has already been taken", field="slug")

    def _check_template_data(self, template: str, meta_data: Optional[Dict[str, Any]]) -> None:
        if template == "contact" and not (meta_data or {}).get("contact_info"):
            raise ValidationError(
                "Contact pages need contact information",
                field="meta_data.contact_info"
            )

    def _check_publishable(self, page: Page) -> None:
        errors = {}
        if not page.title:
            errors["title"] = "A page needs a title to be published"
        if not page.slug:
            errors["slug"] = "A page needs a slug to be published"
        if errors:
            raise MultiFieldValidationError(errors, "The page cannot be published")

    def create(self, payload: PageCreate) -> Page:
        data = payload.model_dump()
        parent_id = data.pop("parent_id")
        sort_order = data.pop("sort_order")

        if not self.repo.organization_exists(data["organization_id"]):
            raise ValidationError("The selected organization does not exist", field="organization_id")

        data["slug"] = data["slug"] or slugify(data["title"])
        data["route"] = normalize_route(data["route"])
        self._check_slug(data["slug"], data["organization_id"], data["language"])
        self._check_template_data(data["template"], data["meta_data"])

        page = Page(**data, cache_duration=cache_minutes_for(data["template"]))
        if not page.is_draft:
            self._check_publishable(page)
            page.published_at = datetime.now(UTC)

        self.mutator.create(page, parent_id=parent_id, position=sort_order)
        logger.info(f"[Page] Created {page.id} '{page.title}'")
        return page

    def update(self, page_id: int, payload: PageUpdate) -> Page:
        page = self.get(page_id)
        data = provided_fields(payload)
        for field in NON_NULLABLE:
            if field in data and data[field] is None:
                del data[field]

        reparent = "parent_id" in data
        new_parent_id = data.pop("parent_id", None)
        sort_order = data.pop("sort_order", None)
        publishing = data.get("is_draft") is False and page.is_draft

        if "title" in data and "slug" not in data:
            data["slug"] = slugify(data["title"])
        if "route" in data:
            data["route"] = normalize_route(data["route"])
        if "slug" in data or "language" in data:
            self._check_slug(
                data.get("slug", page.slug),
                page.organization_id,
                data.get("language", page.language),
                exclude_id=page.id,
            )
        if "template" in data or "meta_data" in data:
            self._check_template_data(
                data.get("template", page.template),
                data.get("meta_data", page.meta_data),
            )
            data["cache_duration"] = cache_minutes_for(data.get("template", page.template))

        relabel = "language" in data and data["language"] != page.language
        for field, value in data.items():
            setattr(page, field, value)

        if not page.is_draft:
            self._check_publishable(page)
        if publishing:
            page.published_at = datetime.now(UTC)

        if reparent:
            self.mutator.reparent(page, new_parent_id, sort_order)
        else:
            self.mutator.refresh_scope(page)
            if sort_order is not None:
                self.mutator.update_position(page, sort_order)

        if relabel:
            # components always speak their page's language
            moved = self.components.set_language(page.id, page.language)
            logger.info(f"[Page] Moved {moved} components of page {page.id} to '{page.language}'")

        self._invalidate(page)
        logger.info(f"[Page] Updated {page.id}")
        return page

    def delete(self, page_id: int) -> None:
        page = self.get(page_id)
        self.mutator.delete(page, has_content=self.has_components)
        self._invalidate(page)

    def reorder(self, page_id: int, position: int) -> Page:
        page = self.get(page_id)
        self.mutator.reorder(page, position)
        return page

    def duplicate(self, page_id: int) -> Page:
        source = self.get(page_id)

        def reset(copy: Page) -> None:
            copy.title = f"{source.title} (Copy)"
            copy.slug = copy_slug(
                source.slug,
                lambda slug: self.repo.slug_taken(slug, source.organization_id, source.language),
            )
            copy.route = None
            copy.is_draft = True
            copy.published_at = None

        return self.mutator.duplicate(source, reset)

    def _invalidate(self, page: Page) -> None:
        invalidate_on_commit(self.session, self.cache, page.id)
