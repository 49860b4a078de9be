from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from career_advisor.ai.config import CompletionConfig
from career_advisor.ai.types import ChatMessage
from career_advisor.services.errors import ConfigurationError, MalformedResponseError, UpstreamError

logger = logging.getLogger(__name__)

_ERROR_BODY_LOG_CHARS = 500


class OpenAIProvider:
    """Single-shot chat completion against an OpenAI-compatible gateway.

    The SDK's own retries are disabled: a failed call is reported once and the
    caller decides whether to resubmit.
    """

    def __init__(
        self,
        config: CompletionConfig,
        temperature: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._temperature = temperature
        self._transport = transport

    def _new_client(self) -> AsyncOpenAI:
        if not self._config.api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY is not configured")
        return AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=self._config.base_url or None,
            timeout=self._config.timeout_s,
            max_retries=0,
            http_client=httpx.AsyncClient(transport=self._transport) if self._transport else None,
        )

    async def complete(self, messages: Sequence[ChatMessage], *, model: str) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        create_kwargs: dict[str, Any] = {
            "model": model,
            "messages": payload,
        }
        if self._temperature is not None:
            create_kwargs["temperature"] = self._temperature
        if self._config.structured_output:
            create_kwargs["response_format"] = {"type": "json_object"}

        async with self._new_client() as client:
            try:
                response = await client.chat.completions.create(**create_kwargs)
            except openai.APITimeoutError as exc:
                logger.warning("completion_timeout model=%s timeout_s=%s", model, self._config.timeout_s)
                raise UpstreamError("Completion request timed out", code="timeout") from exc
            except openai.APIConnectionError as exc:
                logger.warning("completion_transport_failed model=%s: %s", model, exc)
                raise UpstreamError(f"Completion transport error: {exc}", code="transport") from exc
            except openai.APIStatusError as exc:
                body = ""
                try:
                    body = exc.response.text[:_ERROR_BODY_LOG_CHARS]
                except Exception:  # noqa: BLE001 - body is diagnostic only
                    body = ""
                logger.error("completion_http_error model=%s status=%s body=%s", model, exc.status_code, body)
                raise UpstreamError(
                    f"Completion endpoint returned HTTP {exc.status_code}",
                    status_code=exc.status_code,
                ) from exc

        # Gateways sometimes answer 200 with an HTML page or a partial body.
        choices = getattr(response, "choices", None)
        if not choices:
            logger.error("completion_malformed_body model=%s body_type=%s", model, type(response).__name__)
            raise MalformedResponseError("Completion response has no choices.")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not content:
            raise MalformedResponseError("Completion response has no message content.")
        return str(content)
