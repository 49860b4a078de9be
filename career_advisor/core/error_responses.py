from __future__ import annotations

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from career_advisor.core.cors import CORS_HEADERS
from career_advisor.services.errors import AnalysisError

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many analysis requests. Please wait a moment and try again."


def error_response(
    payload: dict[str, Any],
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload, headers=CORS_HEADERS)


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Errors raised while resolving route dependencies, e.g. a broken prompt file."""
    logger.warning("request_failed path=%s kind=%s: %s", request.url.path, exc.kind, exc)
    return error_response(exc.to_payload())


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("rate_limited path=%s limit=%s", request.url.path, exc.detail)
    return error_response(
        {"kind": "rate_limited", "message": RATE_LIMITED_MESSAGE},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    )
