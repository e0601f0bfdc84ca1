import logging
from typing import Any, Callable, Optional

from coopcms.core.errors import HasAssociatedContentError, HasChildrenError
from coopcms.core.position_sequencer import PositionSequencer
from coopcms.core.tree_queries import TreeQueries
from coopcms.core.tree_validator import TreeValidator

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("id", "scope_key", "created_at", "updated_at")


class TreeMutator:
    """Create, reparent, reorder, duplicate and delete nodes of one hierarchy.

    Every operation validates first and writes second, inside the
    repository's atomic block, so a rejected call leaves the store untouched.
    """

    def __init__(self, repository):
        self.repo = repository
        self.schema = repository.schema
        self.sequencer = PositionSequencer(repository)
        self.validator = TreeValidator(repository, self.sequencer)
        self.queries = TreeQueries(repository)

    def create(self, node: Any, parent_id: Optional[int] = None, position: Optional[int] = None) -> Any:
        if position is not None:
            self.sequencer.validate(position)

        with self.repo.atomic():
            self.validator.set_parent(node, parent_id, position)
            self.repo.add(node)

        logger.info(
            f"[Tree] Created {self.schema.name} {node.id} "
            f"at {self.schema.position_of(node)} in {node.scope_key}"
        )
        return node

    def update_position(self, node: Any, position: int) -> Any:
        """Direct overwrite: an occupied position is rejected, nothing shifts."""
        self.sequencer.validate(position)
        if position == self.schema.position_of(node):
            return node

        with self.repo.atomic():
            self.sequencer.ensure_available(node.scope_key, position, node.id)
            self.schema.set_position(node, position)
            self.repo.flush()
        return node

    def reparent(self, node: Any, new_parent_id: Optional[int], position: Optional[int] = None) -> Any:
        if position is not None:
            self.sequencer.validate(position)

        old_parent_id = node.parent_id
        with self.repo.atomic():
            self.validator.set_parent(node, new_parent_id, position)
            self.repo.flush()

        if old_parent_id != new_parent_id:
            logger.info(
                f"[Tree] Reparented {self.schema.name} {node.id}: "
                f"{old_parent_id} -> {new_parent_id}"
            )
        return node

    def reorder(self, node: Any, target: int) -> int:
        """Shift-based move inside the node's current scope."""
        with self.repo.atomic():
            return self.sequencer.move_to_position(node, target)

    def refresh_scope(self, node: Any) -> Any:
        """Re-append ``node`` after one of its scope fields changed."""
        new_scope = self.schema.scope_key_for(node)
        if new_scope == node.scope_key:
            return node

        with self.repo.atomic():
            position = self.sequencer.next_position(new_scope)
            node.scope_key = new_scope
            self.schema.set_position(node, position)
            self.repo.flush()
        return node

    def delete(self, node: Any, has_content: Optional[Callable[[Any], bool]] = None) -> None:
        name = self.schema.name
        if self.queries.has_children(node):
            raise HasChildrenError(f"Cannot delete a {name} that has {self.schema.children_label}")
        if has_content is not None and has_content(node):
            raise HasAssociatedContentError(f"Cannot delete a {name} that has associated content")

        node_id = node.id
        with self.repo.atomic():
            self.repo.remove(node)
        logger.info(f"[Tree] Deleted {name} {node_id}")

    def duplicate(self, node: Any, reset: Optional[Callable[[Any], None]] = None) -> Any:
        """Copy ``node`` right after itself; ``reset`` applies entity-specific resets."""
        values = self.repo.column_values(
            node, exclude=(*IDENTITY_FIELDS, self.schema.position_field)
        )
        duplicate = type(node)(**values)
        if reset is not None:
            reset(duplicate)

        with self.repo.atomic():
            self.sequencer.place_after(node, duplicate)

        logger.info(f"[Tree] Duplicated {self.schema.name} {node.id} as {duplicate.id}")
        return duplicate
