import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

from sqlalchemy import func, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coopcms.core.errors import StorageError
from coopcms.core.tree_schema import TreeSchema

logger = logging.getLogger(__name__)

ANY_PARENT = object()


class TreeRepository:
    """SQLAlchemy storage for one hierarchy, driven by its ``TreeSchema``."""

    def __init__(self, session: Session, schema: TreeSchema):
        self.session = session
        self.schema = schema
        self.model = schema.model

    @property
    def position_column(self):
        return getattr(self.model, self.schema.position_field)

    def get(self, node_id: Optional[int]) -> Optional[Any]:
        if node_id is None:
            return None
        return self.session.get(self.model, node_id)

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(self.model)) or 0

    def children(self, node: Any) -> List[Any]:
        stmt = (
            select(self.model)
            .where(self.model.parent_id == node.id)
            .order_by(self.position_column, self.model.id)
        )
        return list(self.session.scalars(stmt))

    def count_children(self, node: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.model.parent_id == node.id)
        return self.session.scalar(stmt) or 0

    def siblings(self, node: Any) -> List[Any]:
        stmt = (
            select(self.model)
            .where(self.model.scope_key == node.scope_key, self.model.id != node.id)
            .order_by(self.position_column)
        )
        return list(self.session.scalars(stmt))

    def occupant(self, scope_key: str, position: int) -> Optional[Any]:
        stmt = select(self.model).where(
            self.model.scope_key == scope_key,
            self.position_column == position,
        )
        return self.session.scalars(stmt).first()

    def lock_scope(self, scope_key: str) -> None:
        # row locks only; aggregates cannot be combined with FOR UPDATE on postgres
        stmt = select(self.model.id).where(self.model.scope_key == scope_key).with_for_update()
        self.session.execute(stmt).all()

    def max_position(self, scope_key: str) -> Optional[int]:
        stmt = select(func.max(self.position_column)).where(
            self.model.scope_key == scope_key,
            self.position_column > 0,
        )
        return self.session.scalar(stmt)

    def park_range(self, scope_key: str, low: int, high: int, delta: int) -> int:
        """Move positions in ``[low, high]`` to ``-(position + delta)``."""
        if high < low:
            return 0
        column = self.position_column
        stmt = (
            update(self.model)
            .where(self.model.scope_key == scope_key, column >= low, column <= high)
            .values({self.schema.position_field: -(column + delta)})
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def unpark(self, scope_key: str) -> int:
        column = self.position_column
        stmt = (
            update(self.model)
            .where(self.model.scope_key == scope_key, column < 0)
            .values({self.schema.position_field: -column})
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def add(self, node: Any) -> Any:
        self.session.add(node)
        self.session.flush()
        return node

    def remove(self, node: Any) -> None:
        self.session.delete(node)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def column_values(self, node: Any, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        skipped = set(exclude)
        return {
            attr.key: copy.deepcopy(getattr(node, attr.key))
            for attr in inspect(self.model).column_attrs
            if attr.key not in skipped
        }

    @contextmanager
    def atomic(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[Tree] {self.schema.name} write failed: {type(e).__name__}")
            raise StorageError(f"Could not save the {self.schema.name}") from e
