"""
Error taxonomy and the JSON error envelope shared by every route.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse


class StoreError(Exception):
    """Raised by a blob store backend when a get or put fails."""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, *, extra: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class BadRequestError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401

    def __init__(self):
        # Never echo anything about the supplied or configured secret.
        super().__init__("Unauthorized")


class ConflictError(ApiError):
    status_code = 409


def format_validation_errors(errors: list) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Bad Request: " + "; ".join(parts)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    content = {"success": False, "error": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)
