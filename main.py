import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from coopcms.api.cache_routes import router as cache_router
from coopcms.api.category_routes import router as category_router
from coopcms.api.component_routes import router as component_router
from coopcms.api.dependencies import limiter
from coopcms.api.page_routes import router as page_router
from coopcms.config import Config
from coopcms.core.errors import CmsError
from coopcms.database import Database
from coopcms.middleware.security import SecurityHeadersMiddleware
from coopcms.utils.cache import PageCache

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


async def cms_error_handler(request: Request, exc: CmsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())]
        if location and location[0] in ("body", "query", "path"):
            location = location[1:]
        field = ".".join(location) or "request"
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)

    first_message = next(iter(errors.values()))[0] if errors else "The given data was invalid"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": first_message, "errors": errors},
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    database = database or Database()
    database.create_all()

    app = FastAPI(
        title="CoopCMS API",
        version="1.0.0",
        description="Content API for categories, pages and page components",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.database = database
    app.state.page_cache = PageCache(
        max_size=Config.PAGE_CACHE_MAX_SIZE,
        default_ttl_seconds=Config.DEFAULT_CACHE_MINUTES * 60,
    )

    app.add_middleware(SecurityHeadersMiddleware, hsts=Config.ENABLE_HSTS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(CmsError, cms_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/health")
    async def health_check():
        """Shallow health check - service is alive."""
        return {
            "status": "healthy",
            "service": "CoopCMS API",
            "timestamp": datetime.now(UTC).isoformat()
        }

    @app.get("/health/deep")
    def deep_health_check() -> Dict[str, Any]:
        """Deep health check - validates the database connection."""
        database_ok = app.state.database.ping()
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": "CoopCMS API",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {
                "database": {
                    "status": "healthy" if database_ok else "unhealthy",
                    "message": "Connected" if database_ok else "Connection failed",
                },
                "page_cache": {
                    "status": "healthy",
                    "entries": len(app.state.page_cache.cache),
                },
            },
        }

    app.include_router(category_router, prefix=f"{API_PREFIX}/categories", tags=["Categories"])
    app.include_router(page_router, prefix=f"{API_PREFIX}/pages", tags=["Pages"])
    app.include_router(component_router, prefix=f"{API_PREFIX}/page-components", tags=["Page Components"])
    app.include_router(cache_router, prefix=f"{API_PREFIX}/cache", tags=["Cache"])

    return app


if __name__ == "__main__":
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    uvicorn.run(
        "main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
