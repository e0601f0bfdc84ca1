"""SQLAlchemy models for organizations, categories, pages and page components."""
from datetime import datetime, UTC
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from coopcms.database import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)


class Category(TimestampMixin, Base):
    """A node of the category tree (articles, documents, ...)."""

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("scope_key", "sort_order", name="uq_categories_scope_position"),
        Index("ix_categories_parent_id", "parent_id"),
        Index("ix_categories_organization_id", "organization_id"),
    )

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text)
    color = Column(String(7))
    icon = Column(String(100))
    sort_order = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    category_type = Column(String(50), nullable=False, default="article")
    language = Column(String(5), nullable=False, default="es")
    scope_key = Column(String(255), nullable=False)


class Article(TimestampMixin, Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text)


class Image(TimestampMixin, Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)


class Hero(TimestampMixin, Base):
    __tablename__ = "heroes"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(255))
    image_url = Column(String(500))


class TextContent(TimestampMixin, Base):
    __tablename__ = "text_contents"

    id = Column(Integer, primary_key=True)
    title = Column(String(255))
    body = Column(Text, nullable=False)


class Banner(TimestampMixin, Base):
    __tablename__ = "banners"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    image_url = Column(String(500))
    link_url = Column(String(500))


class Page(TimestampMixin, Base):
    """A CMS page; pages nest to form the site map of one organization."""

    __tablename__ = "pages"
    __table_args__ = (
        UniqueConstraint("scope_key", "sort_order", name="uq_pages_scope_position"),
        Index("ix_pages_parent_id", "parent_id"),
        Index("ix_pages_org_language_slug", "organization_id", "language", "slug"),
    )

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    parent_id = Column(Integer, ForeignKey("pages.id"), nullable=True)
    title = Column(String(255), nullable=False, default="")
    slug = Column(String(255), nullable=False, default="")
    route = Column(String(255))
    language = Column(String(5), nullable=False, default="es")
    template = Column(String(50), nullable=False, default="default")
    meta_data = Column(JSON)
    sort_order = Column(Integer, nullable=False)
    is_draft = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime(timezone=True))
    requires_auth = Column(Boolean, nullable=False, default=False)
    allowed_roles = Column(JSON)
    search_keywords = Column(Text)
    cache_duration = Column(Integer, nullable=False, default=60)
    last_reviewed_at = Column(DateTime(timezone=True))
    scope_key = Column(String(255), nullable=False)


class PageComponent(TimestampMixin, Base):
    """Places a componentable (hero, text, banner, article) on a page."""

    __tablename__ = "page_components"
    __table_args__ = (
        UniqueConstraint("scope_key", "position", name="uq_page_components_scope_position"),
        Index("ix_page_components_page_id", "page_id"),
        Index("ix_page_components_parent_id", "parent_id"),
        Index("ix_page_components_componentable", "componentable_type", "componentable_id"),
    )

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey("pages.id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    parent_id = Column(Integer, ForeignKey("page_components.id"), nullable=True)
    componentable_type = Column(String(50), nullable=False)
    componentable_id = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False)
    language = Column(String(5), nullable=False, default="es")
    is_draft = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime(timezone=True))
    version = Column(String(20), nullable=False, default="1.0")
    preview_token = Column(String(64))
    settings = Column(JSON)
    cache_enabled = Column(Boolean, nullable=False, default=True)
    visibility_rules = Column(JSON)
    ab_test_group = Column(String(10))
    scope_key = Column(String(255), nullable=False)

    def get_setting(self, key: str, default: Any = None) -> Any:
        return (self.settings or {}).get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        # reassign so the JSON column is flagged dirty
        self.settings = {**(self.settings or {}), key: value}

    @property
    def has_visibility_rules(self) -> bool:
        return bool(self.visibility_rules)

    def visibility_rule(self, rule_type: str) -> Optional[dict]:
        for rule in self.visibility_rules or []:
            if rule.get("type") == rule_type:
                return rule
        return None
