from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

SkillLevel = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
ErrorKind = Literal[
    "configuration",
    "upstream",
    "malformed_response",
    "validation",
    "invalid_request",
    "rate_limited",
    "internal",
]
# Model output is checked strictly: "82" or true is not a number.
NonNegativeNumber = Union[
    Annotated[StrictInt, Field(ge=0)],
    Annotated[StrictFloat, Field(ge=0)],
]
PercentScore = Union[
    Annotated[StrictInt, Field(ge=0, le=100)],
    Annotated[StrictFloat, Field(ge=0, le=100)],
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalysisRequest(_CamelModel):
    resume_text: str = Field(alias="resumeText", min_length=1)
    linkedin_profile: str | None = Field(default=None, alias="linkedinProfile")

    @field_validator("resume_text")
    @classmethod
    def _resume_text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("resumeText must not be blank")
        return value


class Skill(_CamelModel):
    name: StrictStr
    level: SkillLevel
    years_experience: NonNegativeNumber = Field(alias="yearsExperience")


class JobRecommendation(_CamelModel):
    title: StrictStr
    match_score: PercentScore = Field(alias="matchScore")
    required_skills: list[StrictStr] = Field(alias="requiredSkills")
    company: StrictStr
    location: StrictStr


class SkillGap(_CamelModel):
    skill: StrictStr
    current_level: StrictStr = Field(alias="currentLevel")
    target_level: StrictStr = Field(alias="targetLevel")
    priority: StrictStr


class LearningResource(_CamelModel):
    title: StrictStr
    url: StrictStr
    type: StrictStr


class LearningPathItem(_CamelModel):
    skill: StrictStr
    resources: list[LearningResource]
    estimated_hours: NonNegativeNumber = Field(alias="estimatedHours")
    priority: StrictStr


class AnalysisResult(_CamelModel):
    ats_score: StrictInt = Field(alias="atsScore", ge=0, le=100)
    skills: list[Skill]
    job_recommendations: list[JobRecommendation] = Field(alias="jobRecommendations")
    skill_gaps: list[SkillGap] = Field(alias="skillGaps")
    learning_path: list[LearningPathItem] = Field(alias="learningPath")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorPayload(BaseModel):
    kind: ErrorKind
    message: str
