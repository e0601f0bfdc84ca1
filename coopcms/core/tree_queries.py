from typing import Any, Callable, Dict, List, Optional

from coopcms.core.errors import CircularReferenceError

NodePredicate = Callable[[Any], bool]


class TreeQueries:
    """Read-only views over a hierarchy, computed by walking ``parent_id`` links."""

    def __init__(self, repository):
        self.repo = repository
        self.schema = repository.schema

    def parent(self, node: Any) -> Optional[Any]:
        return self.repo.get(node.parent_id)

    def children(self, node: Any, predicate: Optional[NodePredicate] = None) -> List[Any]:
        children = self.repo.children(node)
        if predicate is None:
            return children
        return [child for child in children if predicate(child)]

    def has_children(self, node: Any) -> bool:
        return self.repo.count_children(node) > 0

    def has_active_children(self, node: Any, predicate: NodePredicate) -> bool:
        return any(predicate(child) for child in self.repo.children(node))

    def ancestors(self, node: Any) -> List[Any]:
        """Root-most ancestor first."""
        chain: List[Any] = []
        seen = {node.id}
        current = self.parent(node)
        while current is not None:
            if current.id in seen:
                raise CircularReferenceError(
                    f"Cycle detected above {self.schema.name} {node.id}"
                )
            seen.add(current.id)
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def depth(self, node: Any) -> int:
        return len(self.ancestors(node))

    def descendants(self, node: Any) -> List[Any]:
        """All transitive children, depth-first, each exactly once."""
        result: List[Any] = []
        seen = {node.id}
        stack = list(reversed(self.repo.children(node)))
        while stack:
            current = stack.pop()
            if current.id in seen:
                continue
            seen.add(current.id)
            result.append(current)
            stack.extend(reversed(self.repo.children(current)))
        return result

    def is_ancestor_of(self, a: Any, b: Any) -> bool:
        if a.id is None or a.id == b.id:
            return False
        return any(ancestor.id == a.id for ancestor in self.ancestors(b))

    def is_descendant_of(self, a: Any, b: Any) -> bool:
        return self.is_ancestor_of(b, a)

    def breadcrumb(self, node: Any) -> List[Dict[str, Any]]:
        crumbs = []
        for item in [*self.ancestors(node), node]:
            crumb = {"id": item.id, self.schema.label_field: self.schema.label_of(item)}
            if self.schema.slug_field:
                crumb["slug"] = getattr(item, self.schema.slug_field)
            crumbs.append(crumb)
        return crumbs

    def full_path(self, node: Any, separator: str, field: Optional[str] = None) -> str:
        field = field or self.schema.label_field
        return separator.join(
            str(getattr(item, field) or "") for item in [*self.ancestors(node), node]
        )

    def full_name(self, node: Any) -> str:
        return self.full_path(node, " > ", self.schema.label_field)

    def full_slug(self, node: Any) -> str:
        return self.full_path(node, "/", self.schema.slug_field)

    def subtree(
        self,
        node: Any,
        serialize: Callable[[Any], Dict[str, Any]],
        predicate: Optional[NodePredicate] = None,
        max_depth: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Nested rendering of ``node`` and the descendants accepted by ``predicate``."""
        return self._build(node, serialize, predicate, max_depth, 0, {node.id})

    def _build(self, node, serialize, predicate, max_depth, level, seen) -> Dict[str, Any]:
        item = serialize(node)
        if max_depth is not None and level >= max_depth:
            item["children"] = []
            return item

        item["children"] = [
            self._build(child, serialize, predicate, max_depth, level + 1, seen | {child.id})
            for child in self.children(node, predicate)
            if child.id not in seen
        ]
        return item
