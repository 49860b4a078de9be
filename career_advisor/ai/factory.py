from career_advisor.ai.config import load_completion_config
from career_advisor.ai.prompts import load_analysis_prompt
from career_advisor.ai.providers.openai_provider import OpenAIProvider
from career_advisor.core.config import settings
from career_advisor.services.analysis_pipeline import AnalysisPipeline


def get_analysis_pipeline() -> AnalysisPipeline:
    config = load_completion_config(settings)
    return AnalysisPipeline(
        config=config,
        client=OpenAIProvider(config),
        prompt=load_analysis_prompt(settings.analysis_prompt_path),
        resume_max_chars=settings.resume_max_chars,
    )
