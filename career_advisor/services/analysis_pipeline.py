from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from career_advisor.ai.config import CompletionConfig
from career_advisor.ai.prompts import AnalysisPrompt
from career_advisor.ai.types import CompletionClient
from career_advisor.analytics.db import log_analysis_run
from career_advisor.schemas.analysis import AnalysisRequest, AnalysisResult
from career_advisor.services.errors import (
    AnalysisError,
    ConfigurationError,
    InvalidRequestError,
    UpstreamError,
    ValidationError,
)
from career_advisor.services.json_extract import parse_json_object

logger = logging.getLogger(__name__)

RunLogger = Callable[..., None]


def _format_issues(exc: PydanticValidationError) -> list[str]:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        issues.append(f"{loc or '<root>'}: {err.get('msg', 'invalid value')}")
    return issues


def validate_analysis(payload: dict[str, Any]) -> AnalysisResult:
    try:
        return AnalysisResult.model_validate(payload)
    except PydanticValidationError as exc:
        issues = _format_issues(exc)
        raise ValidationError(
            f"Analysis JSON failed validation ({len(issues)} issue(s))",
            issues=issues,
        ) from exc


class AnalysisPipeline:
    """Resume text in, validated AnalysisResult out, with exactly one completion call.

    Every failure is terminal for the invocation and raised as an AnalysisError
    subclass. Nothing is cached between calls.
    """

    def __init__(
        self,
        config: CompletionConfig,
        client: CompletionClient,
        prompt: AnalysisPrompt | None = None,
        *,
        resume_max_chars: int | None = None,
        run_logger: RunLogger | None = log_analysis_run,
    ):
        self._config = config
        self._client = client
        self._prompt = prompt or AnalysisPrompt()
        self._resume_max_chars = resume_max_chars
        self._run_logger = run_logger

    @property
    def model(self) -> str:
        return self._config.model or self._prompt.model

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        run_id = uuid.uuid4().hex
        started = time.perf_counter()
        resume_chars = len(request.resume_text)
        try:
            result = await self._run(request)
        except AnalysisError as exc:
            self._log_run(run_id, started, resume_chars, status="error", error=exc)
            raise
        self._log_run(run_id, started, resume_chars, status="success")
        logger.info(
            "analysis_completed run_id=%s model=%s ats_score=%s latency_ms=%s",
            run_id,
            self.model,
            result.ats_score,
            int((time.perf_counter() - started) * 1000),
        )
        return result

    async def _run(self, request: AnalysisRequest) -> AnalysisResult:
        if not self._config.api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY is not configured")

        if self._resume_max_chars is not None and len(request.resume_text) > self._resume_max_chars:
            raise InvalidRequestError(
                f"resumeText has {len(request.resume_text)} characters, limit is {self._resume_max_chars}",
                public_message=f"Resume text is too long (limit {self._resume_max_chars} characters).",
            )

        messages = self._prompt.build_messages(request.resume_text, request.linkedin_profile)
        content = await self._client.complete(messages, model=self.model)

        try:
            payload = parse_json_object(content)
        except AnalysisError:
            logger.warning("analysis_malformed_response model=%s content_len=%s", self.model, len(content))
            raise

        try:
            return validate_analysis(payload)
        except ValidationError as exc:
            logger.warning("analysis_validation_failed model=%s issues=%s", self.model, exc.issues)
            raise

    def _log_run(
        self,
        run_id: str,
        started: float,
        resume_chars: int,
        *,
        status: str,
        error: AnalysisError | None = None,
    ) -> None:
        if self._run_logger is None:
            return
        upstream_status = error.status_code if isinstance(error, UpstreamError) else None
        error_code = error.code if isinstance(error, UpstreamError) else None
        try:
            self._run_logger(
                run_id=run_id,
                model=self.model,
                prompt_version=self._prompt.version,
                status=status,
                resume_chars=resume_chars,
                error_kind=error.kind if error else None,
                error_code=error_code,
                upstream_status=upstream_status,
                latency_ms=int((time.perf_counter() - started) * 1000),
            )
        except Exception:  # pragma: no cover - analytics must not break analysis responses
            logger.debug("analysis_run_logging_failed", exc_info=True)
