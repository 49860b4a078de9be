from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from career_advisor.ai.types import ChatMessage
from career_advisor.services.errors import ConfigurationError

_DEFAULT_PROMPT_PATH = Path(__file__).resolve().parents[2] / "config" / "analysis_prompt.yaml"
_PROMPT_CACHE: dict[str, "AnalysisPrompt"] = {}

DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_VERSION = "builtin"
NOT_PROVIDED = "Not provided"

DEFAULT_SYSTEM_PROMPT = """You are an expert career advisor and resume analyzer. Analyze the provided resume and LinkedIn profile to:
1. Calculate an ATS (Applicant Tracking System) score (0-100) based on formatting, keywords, and structure
2. Identify key skills and categorize them by proficiency level (Beginner, Intermediate, Advanced, Expert)
3. Recommend 5 best-fit job titles based on the candidate's experience
4. Identify skill gaps for target roles
5. Generate a personalized learning roadmap with specific resources

Respond ONLY with valid JSON in this exact format:
{
  "atsScore": number,
  "skills": [{"name": string, "level": string, "yearsExperience": number}],
  "jobRecommendations": [{"title": string, "matchScore": number, "requiredSkills": string[], "company": string, "location": string}],
  "skillGaps": [{"skill": string, "currentLevel": string, "targetLevel": string, "priority": string}],
  "learningPath": [{"skill": string, "resources": [{"title": string, "url": string, "type": string}], "estimatedHours": number, "priority": string}]
}"""

DEFAULT_USER_TEMPLATE = "Resume:\n{resume_text}\n\nLinkedIn Profile:\n{linkedin_profile}"


@dataclass(frozen=True)
class AnalysisPrompt:
    """Prompt wording and model id, kept as data so they can change without code changes."""

    version: str = DEFAULT_VERSION
    model: str = DEFAULT_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    user_template: str = DEFAULT_USER_TEMPLATE
    not_provided_marker: str = NOT_PROVIDED

    def build_messages(self, resume_text: str, linkedin_profile: str | None) -> list[ChatMessage]:
        profile = linkedin_profile if linkedin_profile and linkedin_profile.strip() else self.not_provided_marker
        user_prompt = self.user_template.format(resume_text=resume_text, linkedin_profile=profile)
        return [
            ChatMessage(role="system", content=self.system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]


def _parse_prompt(raw: Any, source: Path) -> AnalysisPrompt:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid prompt config '{source}': expected a top-level mapping.")

    known = {"version", "model", "system_prompt", "user_template", "not_provided_marker"}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"Invalid prompt config '{source}': unknown keys {', '.join(unknown)}.")

    values = {key: str(value) for key, value in raw.items() if value is not None}
    template = values.get("user_template", DEFAULT_USER_TEMPLATE)
    for placeholder in ("{resume_text}", "{linkedin_profile}"):
        if placeholder not in template:
            raise ConfigurationError(f"Invalid prompt config '{source}': user_template must contain {placeholder}.")
    return AnalysisPrompt(**values)


def load_analysis_prompt(path: str | Path | None = None) -> AnalysisPrompt:
    """Load the analysis prompt from YAML and cache it per path.

    An explicit path must exist. Without one, config/analysis_prompt.yaml is used
    when present and the built-in wording otherwise.
    """
    explicit = path is not None
    prompt_path = Path(path) if explicit else _DEFAULT_PROMPT_PATH
    cache_key = str(prompt_path)

    cached = _PROMPT_CACHE.get(cache_key)
    if cached is not None:
        return cached

    if not prompt_path.exists():
        if explicit:
            raise ConfigurationError(f"Prompt config not found at '{prompt_path}'.")
        prompt = AnalysisPrompt()
        _PROMPT_CACHE[cache_key] = prompt
        return prompt

    try:
        raw = prompt_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read prompt config '{prompt_path}': {exc}") from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in prompt config '{prompt_path}': {exc}") from exc

    prompt = _parse_prompt(parsed, prompt_path)
    _PROMPT_CACHE[cache_key] = prompt
    return prompt


def clear_prompt_cache() -> None:
    _PROMPT_CACHE.clear()
