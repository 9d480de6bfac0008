"""
FastAPI application entry point for the knowledge base backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from knowledge_base.config import Settings, get_settings
from knowledge_base.cors import cors_middleware
from knowledge_base.dependencies import build_context
from knowledge_base.errors import ApiError, StoreError, error_response
from knowledge_base.routes import health_router, router
from knowledge_base.storage import BlobStore

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return error_response(exc.status_code, exc.message, **exc.extra)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return error_response(500, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # Unknown paths and wrong methods on known paths are both "not found".
        if exc.status_code in (404, 405):
            return error_response(
                404, "Not Found", message=f"Route {request.url.path} not found"
            )
        return error_response(exc.status_code, str(exc.detail))


def create_app(
    settings: Optional[Settings] = None, store: Optional[BlobStore] = None
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Knowledge Base Backend (FastAPI)", version="0.1.0")
    app.state.context = build_context(settings, store)
    app.middleware("http")(cors_middleware)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(router, prefix=settings.api_prefix)
    logger.info(
        "Knowledge base backend ready (store=%s, admin=%s)",
        app.state.context.backend,
        "enabled" if app.state.context.authorizer.configured else "disabled",
    )
    return app


app = create_app()
