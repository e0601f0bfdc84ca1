"""
Service layer - business rules of the CMS resources.

Structure:
- CategoryService: category tree, slugs, attached content
- PageService: page tree, publishing, templates, search
- ComponentService: page component tree, visibility, preview tokens
"""

from .category_service import CategoryService
from .page_service import PageService
from .component_service import ComponentService

__all__ = [
    "CategoryService",
    "PageService",
    "ComponentService",
]
