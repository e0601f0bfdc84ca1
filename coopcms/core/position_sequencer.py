import logging
from typing import Any, Optional

from coopcms.core.errors import InvalidPositionError, PositionConflictError

logger = logging.getLogger(__name__)


class PositionSequencer:
    """Integer ordering of siblings inside one scope.

    Positions are read after the scope's rows are locked and are never cached.
    Range shifts go through the repository's park/unpark pair so that the
    UNIQUE(scope_key, position) constraint holds after every statement.
    """

    def __init__(self, repository):
        self.repo = repository
        self.schema = repository.schema

    @property
    def field(self) -> str:
        return self.schema.position_field

    def validate(self, position: Any) -> int:
        if isinstance(position, bool) or not isinstance(position, int) or position < 1:
            raise InvalidPositionError(
                f"The {self.field} must be an integer greater than or equal to 1",
                field=self.field
            )
        return position

    def next_position(self, scope_key: str) -> int:
        self.repo.lock_scope(scope_key)
        highest = self.repo.max_position(scope_key)
        return 1 if highest is None or highest < 1 else highest + 1

    def ensure_available(self, scope_key: str, position: int, node_id: Optional[int] = None) -> None:
        self.validate(position)
        self.repo.lock_scope(scope_key)
        occupant = self.repo.occupant(scope_key, position)
        if occupant is not None and occupant.id != node_id:
            raise PositionConflictError(
                f"The {self.field} {position} is already taken by another {self.schema.name}",
                field=self.field
            )

    def move_to_position(self, node: Any, target: int) -> int:
        self.validate(target)
        scope_key = node.scope_key
        current = self.schema.position_of(node)

        self.repo.lock_scope(scope_key)
        highest = self.repo.max_position(scope_key) or current
        # no trailing gaps: never move past the last occupied slot
        target = min(target, max(highest, current))

        if target == current:
            return current

        if target < current:
            self.repo.park_range(scope_key, target, current - 1, 1)
        else:
            self.repo.park_range(scope_key, current + 1, target, -1)

        self.schema.set_position(node, target)
        self.repo.flush()
        self.repo.unpark(scope_key)

        logger.debug(f"[Tree] Moved {self.schema.name} {node.id}: {current} -> {target}")
        return target

    def place_after(self, anchor: Any, newcomer: Any) -> int:
        """Insert ``newcomer`` right after ``anchor``, shifting later siblings up.

        When ``newcomer`` no longer shares the anchor's scope fields it is
        appended to its own scope instead.
        """
        scope_key = self.schema.scope_key_for(newcomer, parent_id=anchor.parent_id)
        newcomer.parent_id = anchor.parent_id
        newcomer.scope_key = scope_key

        parked = 0
        if scope_key != anchor.scope_key:
            target = self.next_position(scope_key)
        else:
            target = self.schema.position_of(anchor) + 1
            self.repo.lock_scope(scope_key)
            if self.repo.occupant(scope_key, target) is not None:
                highest = self.repo.max_position(scope_key)
                parked = self.repo.park_range(scope_key, target, highest, 1)

        self.schema.set_position(newcomer, target)
        self.repo.add(newcomer)

        if parked:
            self.repo.unpark(scope_key)
        return target
