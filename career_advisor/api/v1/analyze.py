from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from career_advisor.ai.factory import get_analysis_pipeline
from career_advisor.core.cors import CORS_HEADERS
from career_advisor.core.error_responses import error_response
from career_advisor.core.rate_limit import rate_limit
from career_advisor.schemas.analysis import AnalysisRequest, ErrorPayload
from career_advisor.services.analysis_pipeline import AnalysisPipeline
from career_advisor.services.errors import AnalysisError, InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

_DISCONNECT_POLL_S = 0.5


async def _parse_request(request: Request) -> AnalysisRequest:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError(
            f"Request body is not JSON: {exc}",
            public_message="The request body must be a JSON object.",
        ) from exc
    if not isinstance(body, dict):
        raise InvalidRequestError(
            "Request body is not a JSON object",
            public_message="The request body must be a JSON object.",
        )
    try:
        return AnalysisRequest.model_validate(body)
    except PydanticValidationError as exc:
        raise InvalidRequestError(f"Invalid analysis request: {exc.error_count()} error(s)") from exc


async def _run_until_disconnected(request: Request, work: Awaitable[T]) -> T:
    """Await ``work`` but cancel it as soon as the client goes away."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=_DISCONNECT_POLL_S)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("analysis_cancelled reason=client_disconnected")
                task.cancel()
                raise asyncio.CancelledError()
    finally:
        if not task.done():
            task.cancel()


@router.options("/analyze-resume", include_in_schema=False)
async def analyze_resume_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.post("/analyze-resume", responses={500: {"model": ErrorPayload}})
@rate_limit()
async def analyze_resume(
    request: Request,
    pipeline: AnalysisPipeline = Depends(get_analysis_pipeline),
):
    try:
        payload = await _parse_request(request)
        result = await _run_until_disconnected(request, pipeline.analyze(payload))
    except AnalysisError as exc:
        logger.warning("analyze_resume_failed kind=%s: %s", exc.kind, exc)
        return error_response(exc.to_payload())
    except Exception:
        logger.exception("analyze_resume_unexpected_error")
        return error_response({"kind": "internal", "message": "Unexpected error."})

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.to_wire(),
        headers=CORS_HEADERS,
    )
