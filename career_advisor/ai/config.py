from __future__ import annotations

from dataclasses import dataclass

from career_advisor.core.config import Settings, settings as default_settings


@dataclass(frozen=True)
class CompletionConfig:
    api_key: str | None
    base_url: str
    timeout_s: float = 45.0
    structured_output: bool = False
    model: str | None = None


def load_completion_config(cfg: Settings | None = None) -> CompletionConfig:
    cfg = cfg or default_settings
    return CompletionConfig(
        api_key=(cfg.ai_gateway_api_key or "").strip() or None,
        base_url=cfg.ai_base_url,
        timeout_s=cfg.ai_timeout_s,
        structured_output=cfg.ai_structured_output,
        model=(cfg.ai_model or "").strip() or None,
    )
