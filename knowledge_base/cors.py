"""
Cross-origin headers on every response, and the OPTIONS short-circuit.

Unexpected exceptions are turned into a 500 envelope here so that they
also carry the CORS headers.
"""

from __future__ import annotations

import logging

from fastapi import Request
from starlette.responses import Response

from knowledge_base.errors import error_response

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


async def cors_middleware(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = error_response(500, str(exc) or type(exc).__name__)
    response.headers.update(CORS_HEADERS)
    return response
