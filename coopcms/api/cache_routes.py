import logging
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/stats")
def cache_stats(request: Request) -> Dict[str, Any]:
    return request.app.state.page_cache.get_stats()


@router.post("/clear")
def clear_cache(request: Request) -> Dict[str, str]:
    request.app.state.page_cache.clear()
    logger.info("[Cache] Cleared page component cache")
    return {"message": "Cache cleared successfully"}
