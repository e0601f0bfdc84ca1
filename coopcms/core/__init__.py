from .errors import (
    CmsError,
    TreeError,
    SelfParentError,
    CircularReferenceError,
    CrossScopeError,
    ParentNotFoundError,
    PositionConflictError,
    InvalidPositionError,
    HasChildrenError,
    HasAssociatedContentError,
    StorageError,
)
from .tree_schema import TreeSchema
from .position_sequencer import PositionSequencer
from .tree_validator import TreeValidator
from .tree_queries import TreeQueries
from .tree_mutator import TreeMutator

__all__ = [
    "CmsError",
    "TreeError",
    "SelfParentError",
    "CircularReferenceError",
    "CrossScopeError",
    "ParentNotFoundError",
    "PositionConflictError",
    "InvalidPositionError",
    "HasChildrenError",
    "HasAssociatedContentError",
    "StorageError",
    "TreeSchema",
    "PositionSequencer",
    "TreeValidator",
    "TreeQueries",
    "TreeMutator",
]
