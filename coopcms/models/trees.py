"""Hierarchy descriptions of the three tree-shaped entities."""
from coopcms.core.tree_schema import TreeSchema
from coopcms.models.entities import Category, Page, PageComponent

CATEGORY_TREE = TreeSchema(
    name="category",
    model=Category,
    children_label="subcategories",
    position_field="sort_order",
    label_field="name",
    scope_fields=("organization_id", "language"),
    parent_scope_fields=("organization_id",),
)

PAGE_TREE = TreeSchema(
    name="page",
    model=Page,
    children_label="child pages",
    position_field="sort_order",
    label_field="title",
    scope_fields=("organization_id", "language"),
    parent_scope_fields=("organization_id",),
)

COMPONENT_TREE = TreeSchema(
    name="component",
    model=PageComponent,
    children_label="child components",
    position_field="position",
    label_field="componentable_type",
    slug_field=None,
    scope_fields=("page_id",),
    parent_scope_fields=("page_id",),
)
