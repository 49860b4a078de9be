from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from career_advisor.schemas.analysis import AnalysisRequest, AnalysisResult
from career_advisor.services.analysis_pipeline import AnalysisPipeline
from career_advisor.services.errors import InvalidRequestError

logger = logging.getLogger(__name__)

RESUME_BUCKET = "resumes"
RESUME_TABLE = "resumes"


class NotAuthenticatedError(RuntimeError):
    pass


class SubmissionStore(Protocol):
    """Operations the hosting backend-as-a-service provides around an analysis."""

    async def get_current_user(self) -> str | None: ...

    async def upload_file(self, bucket: str, path: str, content: bytes) -> None: ...

    async def get_public_url(self, bucket: str, path: str) -> str: ...

    async def insert_row(self, table: str, record: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class SubmissionResult:
    user_id: str
    file_url: str
    analysis: AnalysisResult


def storage_path(user_id: str, file_name: str, now_ms: int | None = None) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{stamp}-{file_name}"


async def submit_resume(
    store: SubmissionStore,
    pipeline: AnalysisPipeline,
    *,
    file_name: str,
    content: bytes,
    linkedin_profile: str | None = None,
) -> SubmissionResult:
    """Store the uploaded resume, analyze it and persist the analysis row.

    Errors from any step propagate unchanged; the row is only inserted once the
    analysis succeeded.
    """
    user_id = await store.get_current_user()
    if not user_id:
        raise NotAuthenticatedError("Not authenticated")

    path = storage_path(user_id, file_name)
    await store.upload_file(RESUME_BUCKET, path, content)
    file_url = await store.get_public_url(RESUME_BUCKET, path)

    resume_text = content.decode("utf-8", errors="replace")
    if not resume_text.strip():
        raise InvalidRequestError(
            f"Uploaded file {file_name!r} contains no text",
            public_message="The uploaded resume contains no readable text.",
        )
    analysis = await pipeline.analyze(
        AnalysisRequest(resume_text=resume_text, linkedin_profile=linkedin_profile)
    )

    await store.insert_row(
        RESUME_TABLE,
        {
            "user_id": user_id,
            "file_name": file_name,
            "file_url": file_url,
            "resume_text": resume_text,
            "analysis_data": analysis.to_wire(),
            "ats_score": analysis.ats_score,
        },
    )
    logger.info("resume_submitted user_id=%s path=%s ats_score=%s", user_id, path, analysis.ats_score)
    return SubmissionResult(user_id=user_id, file_url=file_url, analysis=analysis)
