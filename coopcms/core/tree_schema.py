from dataclasses import dataclass
from typing import Any, Optional, Tuple

_CURRENT = object()


@dataclass(frozen=True)
class TreeSchema:
    """Describes how one entity family participates in a hierarchy.

    Two nodes are siblings iff they share ``parent_id`` and the values of
    ``scope_fields``; a parent must share the values of ``parent_scope_fields``
    with its children.
    """
    name: str
    model: Any
    children_label: str
    position_field: str = "position"
    label_field: str = "name"
    slug_field: Optional[str] = "slug"
    scope_fields: Tuple[str, ...] = ()
    parent_scope_fields: Tuple[str, ...] = ()

    def position_of(self, node: Any) -> Optional[int]:
        return getattr(node, self.position_field)

    def set_position(self, node: Any, position: int) -> None:
        setattr(node, self.position_field, position)

    def label_of(self, node: Any) -> str:
        return getattr(node, self.label_field) or ""

    def scope_key_for(self, node: Any, parent_id: Any = _CURRENT) -> str:
        if parent_id is _CURRENT:
            parent_id = node.parent_id
        parts = [f"parent={parent_id if parent_id is not None else 'root'}"]
        parts.extend(f"{field}={getattr(node, field)}" for field in self.scope_fields)
        return "|".join(parts)

    def shares_family(self, node: Any, parent: Any) -> bool:
        return all(
            getattr(node, field) == getattr(parent, field)
            for field in self.parent_scope_fields
        )
