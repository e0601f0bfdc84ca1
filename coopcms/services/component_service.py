import logging
import secrets
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from coopcms.api.models import ComponentCreate, ComponentUpdate, provided_fields
from coopcms.core import TreeMutator
from coopcms.core.errors import NotFoundError, ValidationError
from coopcms.models.entities import Page, PageComponent
from coopcms.repositories.component_repository import ComponentRepository
from coopcms.repositories.componentables import componentable_type, resolve_componentable
from coopcms.services.cache_invalidation import invalidate_on_commit
from coopcms.services.serializers import component_summary, page_reference
from coopcms.utils.cache import PageCache

logger = logging.getLogger(__name__)

NON_NULLABLE = ("componentable_type", "componentable_id", "language", "is_draft", "version", "cache_enabled")
ANONYMOUS_HIDDEN_RULES = ("auth_required", "role_required")


def _parse_moment(value: Any) -> Optional[datetime]:
    if not value:
        return None
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


def is_visible(component: PageComponent, now: Optional[datetime] = None) -> bool:
    """Visibility for an anonymous visitor."""
    if component.is_draft:
        return False

    now = now or datetime.now(UTC)
    for rule in component.visibility_rules or []:
        rule_type = rule.get("type")
        if rule_type in ANONYMOUS_HIDDEN_RULES:
            return False
        if rule_type == "date_range":
            start = _parse_moment(rule.get("start"))
            end = _parse_moment(rule.get("end"))
            if (start and now < start) or (end and now > end):
                return False
    return True


def is_published(component: PageComponent) -> bool:
    return not component.is_draft


class ComponentService:
    def __init__(self, session: Session, cache: Optional[PageCache] = None):
        self.session = session
        self.repo = ComponentRepository(session)
        self.mutator = TreeMutator(self.repo)
        self.queries = self.mutator.queries
        self.cache = cache

    def get(self, component_id: int) -> PageComponent:
        component = self.repo.get(component_id)
        if component is None:
            raise NotFoundError("Page component not found")
        return component

    def _page(self, page_id: Optional[int]) -> Page:
        page = self.repo.page(page_id)
        if page is None:
            raise ValidationError("The selected page does not exist", field="page_id")
        return page

    def can_be_published(self, component: PageComponent) -> bool:
        page = self.repo.page(component.page_id)
        if page is None or page.is_draft:
            return False
        return self._componentable(component) is not None

    def _componentable(self, component: PageComponent) -> Optional[Any]:
        return resolve_componentable(self.session, component.componentable_type, component.componentable_id)

    def _check_componentable(self, component: PageComponent) -> None:
        kind = componentable_type(component.componentable_type)
        if kind is None:
            raise ValidationError("The selected component type is invalid", field="componentable_type")
        component.componentable_type = kind.key
        if self._componentable(component) is None:
            raise ValidationError("The selected component does not exist", field="componentable_id")

    def _check_language(self, component: PageComponent, page: Page) -> None:
        if component.language != page.language:
            raise ValidationError("The component language must match the page language", field="language")

    def _check_publishable(self, component: PageComponent) -> None:
        if not self.can_be_published(component):
            raise ValidationError(
                "A component can only be published on a published page with existing content",
                field="is_draft"
            )

    def summary(self, component: PageComponent) -> Dict[str, Any]:
        data = component_summary(component)
        data["page"] = page_reference(self.repo.page(component.page_id))
        return data

    def detail(self, component: PageComponent) -> Dict[str, Any]:
        data = self.summary(component)
        kind = componentable_type(component.componentable_type)
        data.update({
            "children": [component_summary(child) for child in self.queries.children(component)],
            "component_class": kind.class_name if kind else None,
            "is_visible": is_visible(component),
            "can_be_published": self.can_be_published(component),
            "has_visibility_rules": component.has_visibility_rules,
        })
        return data

    def list(
        self,
        page_id: Optional[int] = None,
        type_filter: Optional[str] = None,
        language: Optional[str] = None,
        is_draft: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        kind = componentable_type(type_filter)
        if kind is not None:
            type_filter = kind.key
        components = self.repo.list(page_id, type_filter, language, is_draft)
        return [self.summary(component) for component in components]

    def create(self, payload: ComponentCreate) -> PageComponent:
        data = payload.model_dump(mode="json")
        parent_id = data.pop("parent_id")
        position = data.pop("position")

        page = self._page(data["page_id"])
        data["language"] = data["language"] or page.language
        component = PageComponent(**data, organization_id=page.organization_id)

        self._check_componentable(component)
        self._check_language(component, page)
        if not component.is_draft:
            self._check_publishable(component)
            component.published_at = datetime.now(UTC)

        self.mutator.create(component, parent_id=parent_id, position=position)
        self._invalidate(component.page_id)
        logger.info(f"[Component] Created {component.id} ({component.componentable_type}) on page {page.id}")
        return component

    def update(self, component_id: int, payload: ComponentUpdate) -> PageComponent:
        component = self.get(component_id)
        data = provided_fields(payload)
        for field in NON_NULLABLE:
            if field in data and data[field] is None:
                del data[field]

        reparent = "parent_id" in data
        new_parent_id = data.pop("parent_id", None)
        position = data.pop("position", None)
        if position is not None:
            self.mutator.sequencer.validate(position)
        publishing = data.get("is_draft") is False and component.is_draft

        for field, value in data.items():
            setattr(component, field, value)

        if "componentable_type" in data or "componentable_id" in data:
            self._check_componentable(component)
        if "language" in data:
            self._check_language(component, self._page(component.page_id))
        if not component.is_draft:
            self._check_publishable(component)
        if publishing:
            component.published_at = datetime.now(UTC)

        if reparent:
            self.mutator.reparent(component, new_parent_id, position)
        elif position is not None:
            self.mutator.update_position(component, position)

        self._invalidate(component.page_id)
        logger.info(f"[Component] Updated {component.id}")
        return component

    def delete(self, component_id: int) -> None:
        component = self.get(component_id)
        page_id = component.page_id
        self.mutator.delete(component)
        self._invalidate(page_id)

    def reorder(self, component_id: int, position: int) -> PageComponent:
        component = self.get(component_id)
        self.mutator.reorder(component, position)
        self._invalidate(component.page_id)
        return component

    def duplicate(self, component_id: int) -> PageComponent:
        source = self.get(component_id)

        def reset(copy: PageComponent) -> None:
            copy.is_draft = True
            copy.published_at = None
            copy.preview_token = None

        duplicate = self.mutator.duplicate(source, reset)
        self._invalidate(source.page_id)
        return duplicate

    def issue_preview_token(self, component_id: int) -> Dict[str, Any]:
        component = self.get(component_id)
        component.preview_token = secrets.token_urlsafe(24)
        self.session.flush()
        return {
            "id": component.id,
            "preview_token": component.preview_token,
            "preview_url": f"/preview/components/{component.id}?token={component.preview_token}",
        }

    def for_page(self, page_id: int, language: Optional[str] = None) -> Dict[str, Any]:
        page = self.repo.page(page_id)
        if page is None:
            raise NotFoundError("Page not found")

        if self.cache is not None:
            cached = self.cache.get(page_id, language)
            if cached is not None:
                return cached

        roots = self.repo.published_roots(page_id, language)
        response = {
            "data": [self.queries.subtree(root, component_summary, is_published) for root in roots],
            "page_id": page_id,
            "total": len(roots),
        }
        if self.cache is not None:
            self.cache.set(page_id, language, response, ttl_seconds=page.cache_duration * 60)
        return response

    def _invalidate(self, page_id: Optional[int]) -> None:
        invalidate_on_commit(self.session, self.cache, page_id)
