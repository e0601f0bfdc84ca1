"""JSON-ready representations of the CMS entities."""
from datetime import datetime
from typing import Any, Dict, Optional

from coopcms.api.models import PAGE_TEMPLATES
from coopcms.models.entities import Category, Organization, Page, PageComponent
from coopcms.repositories.componentables import componentable_type


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def organization_summary(organization: Optional[Organization]) -> Optional[Dict[str, Any]]:
    if organization is None:
        return None
    return {"id": organization.id, "name": organization.name, "slug": organization.slug}


def category_summary(category: Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "organization_id": category.organization_id,
        "parent_id": category.parent_id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "color": category.color,
        "icon": category.icon,
        "sort_order": category.sort_order,
        "is_active": category.is_active,
        "category_type": category.category_type,
        "language": category.language,
        "created_at": iso(category.created_at),
        "updated_at": iso(category.updated_at),
    }


def is_home_page(page: Page) -> bool:
    if page.slug == "home":
        return True
    return page.route is not None and page.route.strip("/") in ("", "home")


def page_summary(page: Page) -> Dict[str, Any]:
    return {
        "id": page.id,
        "organization_id": page.organization_id,
        "parent_id": page.parent_id,
        "title": page.title,
        "slug": page.slug,
        "route": page.route,
        "language": page.language,
        "template": page.template,
        "template_label": PAGE_TEMPLATES.get(page.template, page.template),
        "meta_data": page.meta_data,
        "sort_order": page.sort_order,
        "is_draft": page.is_draft,
        "published_at": iso(page.published_at),
        "requires_auth": page.requires_auth,
        "allowed_roles": page.allowed_roles,
        "search_keywords": page.search_keywords,
        "cache_duration": page.cache_duration,
        "last_reviewed_at": iso(page.last_reviewed_at),
        "is_home_page": is_home_page(page),
        "created_at": iso(page.created_at),
        "updated_at": iso(page.updated_at),
    }


def page_reference(page: Optional[Page]) -> Optional[Dict[str, Any]]:
    if page is None:
        return None
    return {"id": page.id, "title": page.title, "slug": page.slug, "is_draft": page.is_draft}


def component_summary(component: PageComponent) -> Dict[str, Any]:
    kind = componentable_type(component.componentable_type)
    return {
        "id": component.id,
        "page_id": component.page_id,
        "organization_id": component.organization_id,
        "parent_id": component.parent_id,
        "componentable_type": component.componentable_type,
        "componentable_id": component.componentable_id,
        "component_type_name": kind.display_name if kind else component.componentable_type,
        "position": component.position,
        "language": component.language,
        "is_draft": component.is_draft,
        "published_at": iso(component.published_at),
        "version": component.version,
        "settings": component.settings,
        "cache_enabled": component.cache_enabled,
        "visibility_rules": component.visibility_rules,
        "ab_test_group": component.ab_test_group,
        "created_at": iso(component.created_at),
        "updated_at": iso(component.updated_at),
    }
