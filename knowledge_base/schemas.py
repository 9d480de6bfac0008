"""
Pydantic schemas for the knowledge base API.

Admin request bodies are validated against these only after the password
check has passed (see ``routes._admin_payload``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel

Record = Dict[str, Any]
WireArticles = Union[List[Record], Dict[str, Record]]


class AdminRequest(BaseModel):
    password: Optional[str] = None


class ArticlesWriteRequest(AdminRequest):
    articles: Optional[WireArticles] = None


class CategoriesWriteRequest(AdminRequest):
    categories: Optional[Dict[str, Any]] = None


class TagsWriteRequest(AdminRequest):
    tags: Optional[Dict[str, Any]] = None


class ImportData(BaseModel):
    articles: Optional[WireArticles] = None
    categories: Optional[Dict[str, Any]] = None
    tags: Optional[Dict[str, Any]] = None


class ImportRequest(AdminRequest):
    data: Optional[ImportData] = None


class CollectionsData(BaseModel):
    articles: List[Any]
    categories: Dict[str, Any]
    tags: Dict[str, Any]


class CollectionsResponse(BaseModel):
    success: Literal[True] = True
    data: CollectionsData


class ExportData(CollectionsData):
    exportDate: str


class ExportResponse(BaseModel):
    success: Literal[True] = True
    data: ExportData


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class ImportResponse(SuccessResponse):
    results: Dict[str, str]


class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str
    message: str
    kv_configured: bool
    environment: str
    backend: str
