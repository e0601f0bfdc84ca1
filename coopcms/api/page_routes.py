import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status

from coopcms.api.dependencies import get_page_service, limiter, parse_parent_filter
from coopcms.api.models import PageCreate, PageUpdate, ReorderRequest
from coopcms.config import Config
from coopcms.services import PageService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_pages(
    language: Optional[str] = None,
    template: Optional[str] = None,
    parent_id: Optional[str] = None,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    return {"data": service.list(language, template, parse_parent_filter(parent_id))}


@router.get("/hierarchy")
def page_hierarchy(language: Optional[str] = None, service: PageService = Depends(get_page_service)) -> Dict[str, Any]:
    return {"data": service.hierarchy(language)}


@router.get("/search")
def search_pages(
    q: str = "",
    language: Optional[str] = None,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    logger.info(f"[Page] Search: '{q}'")
    return service.search(q, language)


@router.get("/by-route/{route:path}")
def page_by_route(route: str, service: PageService = Depends(get_page_service)) -> Dict[str, Any]:
    return {"data": service.by_route(route)}


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def create_page(
    request: Request,
    req: PageCreate,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    page = service.create(req)
    return {"data": service.detail(page), "message": "Page created successfully"}


@router.get("/{key}")
def show_page(
    key: str,
    include_components: bool = False,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    return {"data": service.show(key, include_components)}


@router.put("/{page_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def update_page(
    request: Request,
    page_id: int,
    req: PageUpdate,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    page = service.update(page_id, req)
    return {"data": service.detail(page), "message": "Page updated successfully"}


@router.delete("/{page_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def delete_page(
    request: Request,
    page_id: int,
    service: PageService = Depends(get_page_service),
) -> Dict[str, str]:
    service.delete(page_id)
    logger.info(f"[Page] Deleted {page_id}")
    return {"message": "Page deleted successfully"}


@router.post("/{page_id}/reorder")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def reorder_page(
    request: Request,
    page_id: int,
    req: ReorderRequest,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    page = service.reorder(page_id, req.position)
    return {"data": service.detail(page), "message": "Page reordered successfully"}


@router.post("/{page_id}/duplicate", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def duplicate_page(
    request: Request,
    page_id: int,
    service: PageService = Depends(get_page_service),
) -> Dict[str, Any]:
    duplicate = service.duplicate(page_id)
    return {"data": service.detail(duplicate), "message": "Page duplicated successfully"}
