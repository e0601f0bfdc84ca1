from typing import Any, Optional

from coopcms.core.errors import (
    CircularReferenceError,
    CrossScopeError,
    ParentNotFoundError,
    SelfParentError,
)
from coopcms.core.position_sequencer import PositionSequencer


class TreeValidator:
    """Guards parent assignments: no self-parenting, no cycles, no cross-scope parents."""

    def __init__(self, repository, sequencer: Optional[PositionSequencer] = None):
        self.repo = repository
        self.schema = repository.schema
        self.sequencer = sequencer or PositionSequencer(repository)

    def resolve_parent(self, node: Any, candidate_parent_id: Optional[int]) -> Optional[Any]:
        """Return the validated parent node, or None for a root placement.

        Raises before touching ``node`` so a rejected candidate never mutates state.
        """
        if candidate_parent_id is None:
            return None

        name = self.schema.name
        if node.id is not None and candidate_parent_id == node.id:
            raise SelfParentError(f"A {name} cannot be its own parent")

        parent = self.repo.get(candidate_parent_id)
        if parent is None:
            raise ParentNotFoundError(f"The selected parent {name} does not exist")

        if not self.schema.shares_family(node, parent):
            shared = [field.removesuffix("_id") for field in self.schema.parent_scope_fields]
            raise CrossScopeError(
                f"The parent {name} must belong to the same {' and '.join(shared) or 'scope'}"
            )

        self._check_cycle(node, parent)
        return parent

    def _check_cycle(self, node: Any, parent: Any) -> None:
        if node.id is None:
            return

        bound = self.repo.count()
        current = parent
        steps = 0
        while current is not None:
            if current.id == node.id:
                raise CircularReferenceError(
                    f"A {self.schema.name} cannot be moved under one of its own descendants"
                )
            steps += 1
            if steps > bound:
                raise CircularReferenceError(
                    f"The {self.schema.name} ancestor chain is longer than the tree itself"
                )
            current = self.repo.get(current.parent_id)

    def set_parent(self, node: Any, candidate_parent_id: Optional[int], position: Optional[int] = None) -> Any:
        self.resolve_parent(node, candidate_parent_id)
        new_scope = self.schema.scope_key_for(node, parent_id=candidate_parent_id)

        if position is None:
            unchanged = (
                node.id is not None
                and node.parent_id == candidate_parent_id
                and node.scope_key == new_scope
            )
            if unchanged:
                return node
            position = self.sequencer.next_position(new_scope)
        else:
            self.sequencer.ensure_available(new_scope, position, node.id)

        node.parent_id = candidate_parent_id
        node.scope_key = new_scope
        self.schema.set_position(node, position)
        return node
