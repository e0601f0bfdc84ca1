from .cache import PageCache
from .slugify import copy_slug, slugify

__all__ = [
    "PageCache",
    "copy_slug",
    "slugify",
]
