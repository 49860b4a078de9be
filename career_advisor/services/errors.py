from __future__ import annotations

from typing import Any

from career_advisor.schemas.analysis import ErrorKind


class AnalysisError(RuntimeError):
    """Base class for every failure the analysis pipeline reports to its caller."""

    kind: ErrorKind = "upstream"
    public_message = "Resume analysis failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)

    def to_payload(self) -> dict[str, Any]:
        # Only the fixed public message leaves the service.
        return {"kind": self.kind, "message": self.public_message}


class ConfigurationError(AnalysisError):
    kind: ErrorKind = "configuration"
    public_message = "The analysis service is not configured. Contact the operator."


class UpstreamError(AnalysisError):
    kind: ErrorKind = "upstream"
    public_message = "The AI service is unavailable right now. Please try again."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code or (f"http_{status_code}" if status_code is not None else "transport")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.status_code is not None:
            payload["message"] = f"{self.public_message} (AI service status {self.status_code})"
        return payload


class MalformedResponseError(AnalysisError):
    kind: ErrorKind = "malformed_response"
    public_message = "The AI service returned a response that could not be read."

    def __init__(self, message: str | None = None, *, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class ValidationError(AnalysisError):
    kind: ErrorKind = "validation"
    public_message = "The AI service returned an incomplete or out-of-range analysis."

    def __init__(self, message: str | None = None, *, issues: list[str] | None = None):
        super().__init__(message)
        self.issues = list(issues or [])


class InvalidRequestError(AnalysisError):
    kind: ErrorKind = "invalid_request"
    public_message = "The request must include non-empty resume text."

    def __init__(self, message: str | None = None, *, public_message: str | None = None):
        super().__init__(message)
        if public_message:
            self.public_message = public_message
