"""
Error taxonomy for the content API.

Every error carries an HTTP status and, when it concerns a single input,
the name of the offending field so the API layer can report it.
"""
from typing import Any, Dict, List, Optional


class CmsError(Exception):
    status_code = 422
    default_field: Optional[str] = None

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field or self.default_field

    def to_dict(self) -> Dict[str, Any]:
        errors: Dict[str, List[str]] = {}
        if self.field:
            errors[self.field] = [self.message]
        return {"message": self.message, "errors": errors}


class ValidationError(CmsError):
    """Input rejected by a business rule (slug taken, language mismatch...)."""


class MultiFieldValidationError(CmsError):
    """Several fields rejected at once, e.g. publishing without title and slug."""

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message or next(iter(errors.values())))
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "errors": {field: [msg] for field, msg in self.errors.items()},
        }


class NotFoundError(CmsError):
    status_code = 404


class StorageError(CmsError):
    """Persistence failure not otherwise classified; never retried here."""
    status_code = 500


class TreeError(CmsError):
    """Structural violation of a hierarchy."""


class SelfParentError(TreeError):
    default_field = "parent_id"


class CircularReferenceError(TreeError):
    default_field = "parent_id"


class CrossScopeError(TreeError):
    default_field = "parent_id"


class ParentNotFoundError(TreeError):
    default_field = "parent_id"


class PositionConflictError(TreeError):
    default_field = "position"


class InvalidPositionError(TreeError):
    default_field = "position"


class HasChildrenError(TreeError):
    pass


class HasAssociatedContentError(TreeError):
    pass
