import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status

from coopcms.api.dependencies import get_component_service, limiter
from coopcms.api.models import ComponentCreate, ComponentUpdate, ReorderRequest
from coopcms.config import Config
from coopcms.services import ComponentService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_components(
    page_id: Optional[int] = None,
    componentable_type: Optional[str] = None,
    language: Optional[str] = None,
    is_draft: Optional[bool] = None,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    return {"data": service.list(page_id, componentable_type, language, is_draft)}


@router.get("/for-page/{page_id}")
def components_for_page(
    page_id: int,
    language: Optional[str] = None,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    return service.for_page(page_id, language)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def create_component(
    request: Request,
    req: ComponentCreate,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    component = service.create(req)
    return {"data": service.detail(component), "message": "Page component created successfully"}


@router.get("/{component_id}")
def show_component(component_id: int, service: ComponentService = Depends(get_component_service)) -> Dict[str, Any]:
    return {"data": service.detail(service.get(component_id))}


@router.put("/{component_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def update_component(
    request: Request,
    component_id: int,
    req: ComponentUpdate,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    component = service.update(component_id, req)
    return {"data": service.detail(component), "message": "Page component updated successfully"}


@router.delete("/{component_id}")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def delete_component(
    request: Request,
    component_id: int,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, str]:
    service.delete(component_id)
    logger.info(f"[Component] Deleted {component_id}")
    return {"message": "Page component deleted successfully"}


@router.post("/{component_id}/reorder")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def reorder_component(
    request: Request,
    component_id: int,
    req: ReorderRequest,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    component = service.reorder(component_id, req.position)
    return {"data": service.detail(component), "message": "Page component reordered successfully"}


@router.post("/{component_id}/duplicate", status_code=status.HTTP_201_CREATED)
@limiter.limit(Config.WRITE_RATE_LIMIT)
def duplicate_component(
    request: Request,
    component_id: int,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    duplicate = service.duplicate(component_id)
    return {"data": service.detail(duplicate), "message": "Page component duplicated successfully"}


@router.post("/{component_id}/preview-token")
@limiter.limit(Config.WRITE_RATE_LIMIT)
def issue_preview_token(
    request: Request,
    component_id: int,
    service: ComponentService = Depends(get_component_service),
) -> Dict[str, Any]:
    return {"data": service.issue_preview_token(component_id), "message": "Preview token generated"}
