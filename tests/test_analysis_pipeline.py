import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("ANALYTICS_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from career_advisor.ai.config import CompletionConfig  # noqa: E402
from career_advisor.ai.prompts import AnalysisPrompt  # noqa: E402
from career_advisor.schemas.analysis import AnalysisRequest  # noqa: E402
from career_advisor.services.analysis_pipeline import AnalysisPipeline  # noqa: E402
from career_advisor.services.errors import (  # noqa: E402
    ConfigurationError,
    InvalidRequestError,
    MalformedResponseError,
    UpstreamError,
    ValidationError,
)

EMPTY_ANALYSIS = '{"atsScore":82,"skills":[],"jobRecommendations":[],"skillGaps":[],"learningPath":[]}'

FULL_ANALYSIS = """{
  "atsScore": 74,
  "skills": [{"name": "React", "level": "Advanced", "yearsExperience": 5}],
  "jobRecommendations": [
    {"title": "Frontend Engineer", "matchScore": 91, "requiredSkills": ["React", "TypeScript"],
     "company": "Acme", "location": "Remote"}
  ],
  "skillGaps": [{"skill": "GraphQL", "currentLevel": "Beginner", "targetLevel": "Advanced", "priority": "High"}],
  "learningPath": [
    {"skill": "GraphQL", "resources": [{"title": "GraphQL docs", "url": "https://graphql.org/learn", "type": "Documentation"}],
     "estimatedHours": 20, "priority": "High"}
  ]
}"""


class FakeCompletionClient:
    def __init__(self, reply: str = EMPTY_ANALYSIS, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, messages, *, model):
        self.calls.append({"messages": list(messages), "model": model})
        if self.error is not None:
            raise self.error
        return self.reply


def _pipeline(client, api_key="test-key", **kwargs):
    config = CompletionConfig(api_key=api_key, base_url="https://gateway.test/v1")
    kwargs.setdefault("run_logger", None)
    return AnalysisPipeline(config=config, client=client, prompt=AnalysisPrompt(), **kwargs)


class AnalysisPipelineTests(unittest.IsolatedAsyncioTestCase):
    async def test_scenario_prose_wrapped_reply_with_empty_profile(self):
        client = FakeCompletionClient(reply="Here is the analysis: " + EMPTY_ANALYSIS)
        pipeline = _pipeline(client)

        result = await pipeline.analyze(
            AnalysisRequest(resumeText="Jane Doe, 5 years React...", linkedinProfile="")
        )

        self.assertEqual(result.ats_score, 82)
        self.assertEqual(result.skills, [])
        self.assertEqual(result.job_recommendations, [])
        self.assertEqual(result.skill_gaps, [])
        self.assertEqual(result.learning_path, [])

        user_message = client.calls[0]["messages"][1]
        self.assertEqual(user_message.role, "user")
        self.assertIn("Resume:\nJane Doe, 5 years React...", user_message.content)
        self.assertIn("LinkedIn Profile:\nNot provided", user_message.content)

    async def test_builds_exactly_system_and_user_messages(self):
        client = FakeCompletionClient()
        await _pipeline(client).analyze(
            AnalysisRequest(resumeText="Resume body", linkedinProfile="linkedin.com/in/jane")
        )

        messages = client.calls[0]["messages"]
        self.assertEqual([m.role for m in messages], ["system", "user"])
        self.assertIn("ATS", messages[0].content)
        self.assertIn("Respond ONLY with valid JSON", messages[0].content)
        self.assertIn("linkedin.com/in/jane", messages[1].content)
        self.assertEqual(client.calls[0]["model"], "google/gemini-2.5-flash")

    async def test_configured_model_overrides_prompt_model(self):
        client = FakeCompletionClient()
        config = CompletionConfig(api_key="k", base_url="https://gateway.test/v1", model="openai/gpt-4o-mini")
        pipeline = AnalysisPipeline(config=config, client=client, run_logger=None)

        await pipeline.analyze(AnalysisRequest(resumeText="Resume"))

        self.assertEqual(client.calls[0]["model"], "openai/gpt-4o-mini")

    async def test_missing_credential_fails_before_any_call(self):
        client = FakeCompletionClient()
        pipeline = _pipeline(client, api_key=None)

        with self.assertRaises(ConfigurationError):
            await pipeline.analyze(AnalysisRequest(resumeText="Jane Doe"))

        self.assertEqual(len(client.calls), 0)

    async def test_upstream_status_is_attached_and_nothing_is_parsed(self):
        client = FakeCompletionClient(error=UpstreamError("HTTP 503", status_code=503))
        pipeline = _pipeline(client)

        with patch("career_advisor.services.analysis_pipeline.parse_json_object") as parse:
            with self.assertRaises(UpstreamError) as ctx:
                await pipeline.analyze(AnalysisRequest(resumeText="Jane Doe"))

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(len(client.calls), 1)
        parse.assert_not_called()

    async def test_reply_without_braces_skips_json_parsing(self):
        client = FakeCompletionClient(reply="Sorry, I cannot analyze this resume.")
        pipeline = _pipeline(client)

        with patch("career_advisor.services.json_extract.json.loads") as loads:
            with self.assertRaises(MalformedResponseError):
                await pipeline.analyze(AnalysisRequest(resumeText="Jane Doe"))

        loads.assert_not_called()

    async def test_unparseable_json_keeps_raw_text_for_diagnostics(self):
        reply = "Result: {atsScore: 82, skills: []}"
        pipeline = _pipeline(FakeCompletionClient(reply=reply))

        with self.assertRaises(MalformedResponseError) as ctx:
            await pipeline.analyze(AnalysisRequest(resumeText="Jane Doe"))

        self.assertEqual(ctx.exception.raw_text, reply)

    async def test_surrounding_prose_is_discarded(self):
        reply = "Sure! Analysis below.\n```json\n" + FULL_ANALYSIS + "\n```\nLet me know if you need more."
        result = await _pipeline(FakeCompletionClient(reply=reply)).analyze(
            AnalysisRequest(resumeText="Jane Doe")
        )

        self.assertEqual(result.ats_score, 74)
        self.assertEqual(result.skills[0].level, "Advanced")
        self.assertEqual(result.job_recommendations[0].required_skills, ["React", "TypeScript"])
        self.assertEqual(result.learning_path[0].resources[0].url, "https://graphql.org/learn")

    async def test_score_is_returned_exactly(self):
        reply = EMPTY_ANALYSIS.replace("82", "100")
        result = await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))
        self.assertEqual(result.ats_score, 100)

    async def test_out_of_range_score_is_rejected(self):
        reply = EMPTY_ANALYSIS.replace("82", "140")
        with self.assertRaises(ValidationError) as ctx:
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))
        self.assertTrue(any(issue.startswith("atsScore") for issue in ctx.exception.issues))

    async def test_missing_field_is_rejected(self):
        reply = '{"atsScore": 50, "skills": [], "jobRecommendations": [], "skillGaps": []}'
        with self.assertRaises(ValidationError) as ctx:
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))
        self.assertTrue(any(issue.startswith("learningPath") for issue in ctx.exception.issues))

    async def test_unknown_skill_level_is_rejected(self):
        reply = FULL_ANALYSIS.replace('"Advanced", "yearsExperience"', '"Guru", "yearsExperience"')
        with self.assertRaises(ValidationError):
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))

    async def test_negative_hours_are_rejected(self):
        reply = FULL_ANALYSIS.replace('"estimatedHours": 20', '"estimatedHours": -3')
        with self.assertRaises(ValidationError):
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))

    async def test_quoted_score_is_not_coerced(self):
        reply = EMPTY_ANALYSIS.replace("82", '"82"')
        with self.assertRaises(ValidationError) as ctx:
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))
        self.assertTrue(any(issue.startswith("atsScore") for issue in ctx.exception.issues))

    async def test_boolean_score_is_not_coerced(self):
        reply = EMPTY_ANALYSIS.replace("82", "true")
        with self.assertRaises(ValidationError):
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))

    async def test_quoted_years_of_experience_are_not_coerced(self):
        reply = FULL_ANALYSIS.replace('"yearsExperience": 5', '"yearsExperience": "5"')
        with self.assertRaises(ValidationError):
            await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))

    async def test_fractional_hours_are_accepted(self):
        reply = FULL_ANALYSIS.replace('"estimatedHours": 20', '"estimatedHours": 12.5')
        result = await _pipeline(FakeCompletionClient(reply=reply)).analyze(AnalysisRequest(resumeText="x"))
        self.assertEqual(result.learning_path[0].estimated_hours, 12.5)

    async def test_each_invocation_makes_its_own_call(self):
        client = FakeCompletionClient()
        pipeline = _pipeline(client)
        request = AnalysisRequest(resumeText="Jane Doe")

        first = await pipeline.analyze(request)
        second = await pipeline.analyze(request)

        self.assertEqual(len(client.calls), 2)
        self.assertEqual(first, second)

    async def test_resume_length_limit_is_enforced_before_the_call(self):
        client = FakeCompletionClient()
        pipeline = _pipeline(client, resume_max_chars=10)

        with self.assertRaises(InvalidRequestError):
            await pipeline.analyze(AnalysisRequest(resumeText="x" * 11))

        self.assertEqual(len(client.calls), 0)

    async def test_runs_are_logged_with_outcome(self):
        logged = []
        pipeline = _pipeline(
            FakeCompletionClient(error=UpstreamError("HTTP 429", status_code=429)),
            run_logger=lambda **kwargs: logged.append(kwargs),
        )

        with self.assertRaises(UpstreamError):
            await pipeline.analyze(AnalysisRequest(resumeText="Jane Doe"))

        self.assertEqual(len(logged), 1)
        self.assertEqual(logged[0]["status"], "error")
        self.assertEqual(logged[0]["error_kind"], "upstream")
        self.assertEqual(logged[0]["upstream_status"], 429)
        self.assertEqual(logged[0]["resume_chars"], len("Jane Doe"))
        self.assertEqual(logged[0]["prompt_version"], "builtin")

    async def test_logging_failure_does_not_break_analysis(self):
        def broken_logger(**kwargs):
            raise RuntimeError("disk full")

        result = await _pipeline(FakeCompletionClient(), run_logger=broken_logger).analyze(
            AnalysisRequest(resumeText="Jane Doe")
        )
        self.assertEqual(result.ats_score, 82)


if __name__ == "__main__":
    unittest.main()
