from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from coopcms.models.entities import Article, Banner, Hero, TextContent


@dataclass(frozen=True)
class ComponentableType:
    key: str
    model: Any
    display_name: str

    @property
    def class_name(self) -> str:
        return self.model.__name__


COMPONENTABLE_TYPES: Dict[str, ComponentableType] = {
    "hero": ComponentableType("hero", Hero, "Hero Banner"),
    "text_content": ComponentableType("text_content", TextContent, "Text Block"),
    "banner": ComponentableType("banner", Banner, "Promotional Banner"),
    "article": ComponentableType("article", Article, "Article"),
}


def componentable_type(key: Optional[str]) -> Optional[ComponentableType]:
    """Look a type up by its key or by a class reference such as ``App\\Models\\Hero``."""
    if not key:
        return None
    kind = COMPONENTABLE_TYPES.get(key)
    if kind is not None:
        return kind
    class_name = key.rsplit("\\", 1)[-1]
    return next((kind for kind in COMPONENTABLE_TYPES.values() if kind.class_name == class_name), None)


def resolve_componentable(session: Session, key: Optional[str], componentable_id: Optional[int]) -> Optional[Any]:
    """Load the record a component points at, or None when the reference dangles."""
    kind = componentable_type(key)
    if kind is None or componentable_id is None:
        return None
    return session.get(kind.model, componentable_id)
