from typing import Any, Optional

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from coopcms.config import Config
from coopcms.core.errors import ValidationError
from coopcms.database import get_session
from coopcms.repositories.tree_repository import ANY_PARENT
from coopcms.services import CategoryService, ComponentService, PageService

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[Config.DEFAULT_RATE_LIMIT],
    enabled=Config.RATE_LIMIT_ENABLED,
)


def get_category_service(session: Session = Depends(get_session)) -> CategoryService:
    return CategoryService(session)


def get_page_service(request: Request, session: Session = Depends(get_session)) -> PageService:
    return PageService(session, request.app.state.page_cache)


def get_component_service(request: Request, session: Session = Depends(get_session)) -> ComponentService:
    return ComponentService(session, request.app.state.page_cache)


def parse_parent_filter(raw: Optional[str]) -> Any:
    """``?parent_id=null`` selects roots, a number selects its children, absent means any."""
    if raw is None or raw == "":
        return ANY_PARENT
    if raw.lower() == "null":
        return None
    if not raw.isdigit():
        raise ValidationError("The parent_id filter must be a number or null", field="parent_id")
    return int(raw)
