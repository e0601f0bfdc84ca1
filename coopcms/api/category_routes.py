import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from coopcms.api.dependencies import get_category_service, limiter, parse_parent_filter
from coopcms.api.models import CategoryCreate, CategoryUpdate, ReorderRequest
from coopcms.config import Config
from coopcms.services import CategoryService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_categories(
    parent_id: Optional[str] = None,
    language: Optional[str] = None,
    category_type: Optional[str] = Query(None, alias="type"),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    return {"data": service.list(parse_parent_filter(parent_id), language, category_type)}


@router.get("/tree")
def category_tree(
    language: Optional[str] = None,
    category_type: Optional[str] = Query(None, alias="type"),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    return {"data": service.tree(language, category_type)}


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def create_category(
    request: Request,
    req: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    category = service.create(req)
    return {"data": service.detail(category), "message": "Category created successfully"}


@router.get("/{category_id}")
def show_category(category_id: int, service: CategoryService = Depends(get_category_service)) -> Dict[str, Any]:
    return {"data": service.show(category_id)}


@router.put("/{category_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def update_category(
    request: Request,
    category_id: int,
    req: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    category = service.update(category_id, req)
    return {"data": service.detail(category), "message": "Category updated successfully"}


@router.delete("/{category_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def delete_category(
    request: Request,
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, str]:
    service.delete(category_id)
    logger.info(f"[Category] Deleted {category_id}")
    return {"message": "Category deleted successfully"}


@router.post("/{category_id}/reorder")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def reorder_category(
    request: Request,
    category_id: int,
    req: ReorderRequest,
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    category = service.reorder(category_id, req.position)
    return {"data": service.detail(category), "message": "Category reordered successfully"}


@router.post("/{category_id}/duplicate", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def duplicate_category(
    request: Request,
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    duplicate = service.duplicate(category_id)
    return {"data": service.detail(duplicate), "message": "Category duplicated successfully"}
