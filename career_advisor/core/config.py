from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int | None) -> int | None:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    ai_gateway_api_key: str | None
    ai_base_url: str
    ai_model: str | None
    ai_timeout_s: float
    ai_structured_output: bool
    analysis_prompt_path: str | None
    resume_max_chars: int | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    analytics_enabled: bool
    analytics_db_path: str
    analytics_retention_days: int


def load_settings() -> Settings:
    return Settings(
        api_key=_get_env("API_KEY"),
        ai_gateway_api_key=_get_env("AI_GATEWAY_API_KEY"),
        ai_base_url=_get_env("AI_BASE_URL", "https://ai.gateway.lovable.dev/v1") or "https://ai.gateway.lovable.dev/v1",
        ai_model=_get_env("AI_MODEL"),
        ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 45.0),
        ai_structured_output=_get_env_bool("AI_STRUCTURED_OUTPUT", False),
        analysis_prompt_path=_get_env("ANALYSIS_PROMPT_PATH"),
        resume_max_chars=_get_env_int("RESUME_MAX_CHARS", None),
        rate_limit=_get_env("RATE_LIMIT", "20/minute") or "20/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        analytics_enabled=_get_env_bool("ANALYTICS_ENABLED", True),
        analytics_db_path=_get_env("ANALYTICS_DB_PATH", "data/analytics.db") or "data/analytics.db",
        analytics_retention_days=_get_env_int("ANALYTICS_RETENTION_DAYS", 180) or 180,
    )


settings = load_settings()

if settings.ai_timeout_s <= 0:
    raise RuntimeError("AI_TIMEOUT_S must be a positive number of seconds.")

if settings.resume_max_chars is not None and settings.resume_max_chars < 1:
    raise RuntimeError("RESUME_MAX_CHARS must be at least 1 when set.")
