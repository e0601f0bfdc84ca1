from .tree_repository import TreeRepository
from .category_repository import CategoryRepository
from .page_repository import PageRepository
from .component_repository import ComponentRepository

__all__ = ["TreeRepository", "CategoryRepository", "PageRepository", "ComponentRepository"]
