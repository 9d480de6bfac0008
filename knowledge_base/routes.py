"""
HTTP routes for the knowledge base API.
"""

from __future__ import annotations

import logging
from typing import Type, TypeVar

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ValidationError

from knowledge_base import codec
from knowledge_base.backup import export_bundle, now_iso
from knowledge_base.dependencies import (
    AdminBody,
    AppContext,
    get_context,
    read_admin_body,
)
from knowledge_base.errors import (
    BadRequestError,
    error_response,
    format_validation_errors,
)
from knowledge_base.references import check_removed_references
from knowledge_base.schemas import (
    AdminRequest,
    ArticlesWriteRequest,
    CategoriesWriteRequest,
    CollectionsData,
    CollectionsResponse,
    ExportData,
    ExportResponse,
    HealthResponse,
    ImportRequest,
    ImportResponse,
    SuccessResponse,
    TagsWriteRequest,
)

logger = logging.getLogger(__name__)

health_router = APIRouter()
router = APIRouter()

ModelT = TypeVar("ModelT", bound=BaseModel)


@health_router.get("/health", response_model=HealthResponse)
def health(ctx: AppContext = Depends(get_context)):
    return HealthResponse(
        status="ok",
        timestamp=now_iso(),
        message="API is working",
        kv_configured=ctx.kv_configured,
        environment="KV configured" if ctx.kv_configured else "KV missing",
        backend=ctx.backend,
    )


@router.get("/articles", response_model=CollectionsResponse)
def list_articles(ctx: AppContext = Depends(get_context)):
    """
    Public listing: published articles only, all categories and tags.
    """
    collections = ctx.repository.read_published()
    return CollectionsResponse(data=CollectionsData(**collections.as_dict()))


def _admin_payload(
    ctx: AppContext, body: AdminBody, model: Type[ModelT], route: str
) -> ModelT:
    """Check the password, then validate the body against ``model``."""
    ctx.authorizer.require(body.password, route=route)
    try:
        return model.model_validate(body.payload)
    except ValidationError as exc:
        raise BadRequestError(format_validation_errors(exc.errors())) from exc


@router.post("/admin/data", response_model=CollectionsResponse)
def admin_data(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    _admin_payload(ctx, body, AdminRequest, "/admin/data")
    collections = ctx.repository.read_all()
    return CollectionsResponse(data=CollectionsData(**collections.as_dict()))


@router.post("/admin/articles", response_model=SuccessResponse)
def save_articles(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    payload = _admin_payload(ctx, body, ArticlesWriteRequest, "/admin/articles")
    if payload.articles is None:
        raise BadRequestError("Missing field 'articles'")
    ctx.repository.write(codec.ARTICLES_KEY, payload.articles)
    return SuccessResponse()


@router.post("/admin/categories", response_model=SuccessResponse)
def save_categories(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    payload = _admin_payload(ctx, body, CategoriesWriteRequest, "/admin/categories")
    if payload.categories is None:
        raise BadRequestError("Missing field 'categories'")
    if ctx.settings.kb_enforce_references:
        repo = ctx.repository
        refs = codec.ArticleReferences.from_articles(repo.read(codec.ARTICLES_KEY))
        check_removed_references(
            "category",
            repo.read(codec.CATEGORIES_KEY),
            payload.categories,
            refs.category_usage(),
        )
    ctx.repository.write(codec.CATEGORIES_KEY, payload.categories)
    return SuccessResponse()


@router.post("/admin/tags", response_model=SuccessResponse)
def save_tags(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    payload = _admin_payload(ctx, body, TagsWriteRequest, "/admin/tags")
    if payload.tags is None:
        raise BadRequestError("Missing field 'tags'")
    if ctx.settings.kb_enforce_references:
        repo = ctx.repository
        refs = codec.ArticleReferences.from_articles(repo.read(codec.ARTICLES_KEY))
        check_removed_references(
            "tag",
            repo.read(codec.TAGS_KEY),
            payload.tags,
            refs.tag_usage(),
        )
    ctx.repository.write(codec.TAGS_KEY, payload.tags)
    return SuccessResponse()


@router.post("/admin/export", response_model=ExportResponse)
def export_data(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    _admin_payload(ctx, body, AdminRequest, "/admin/export")
    return ExportResponse(data=ExportData(**export_bundle(ctx.repository)))


@router.post("/admin/import", response_model=ImportResponse)
def import_data(
    body: AdminBody = Depends(read_admin_body),
    ctx: AppContext = Depends(get_context),
):
    """
    Sparse import: each collection present in ``data`` replaces the stored
    one; omitted collections are left alone. Writes are applied one by one
    and are not rolled back if a later one fails.
    """
    payload = _admin_payload(ctx, body, ImportRequest, "/admin/import")
    if payload.data is None:
        raise BadRequestError("Missing field 'data'")
    data = {key: getattr(payload.data, key) for key in codec.COLLECTION_KEYS}
    result = ctx.repository.apply_import(data)
    if not result.ok:
        return error_response(500, result.error, results=result.results)
    return ImportResponse(results=result.results)
