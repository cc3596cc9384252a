"""
Structured payloads produced by the content generator.

Article and quiz payloads are stored verbatim as JSON text in Message.content
(camelCase keys, the same shape the API returns), so any consumer decodes
them with `StudyArticle.from_message_content(...)` / `Quiz.from_message_content(...)`.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

SectionType = Literal["definition", "explanation", "example", "formula"]
ArticleDifficulty = Literal["beginner", "intermediate", "advanced"]
QuestionDifficulty = Literal["easy", "medium", "hard"]


class ContentPayload(BaseModel):
    """Base for generated payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_message_content(self) -> str:
        """Serialize for storage in Message.content."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_message_content(cls, content: str):
        """Parse a payload previously stored with to_message_content()."""
        return cls.model_validate_json(content)


# =============================================================================
# ARTICLE
# =============================================================================


class ArticleSection(ContentPayload):
    title: str
    content: str
    type: SectionType


class StudyArticle(ContentPayload):
    """Study article: intro, typed sections, and follow-up questions."""

    title: str
    content: str
    sections: list[ArticleSection] = Field(default_factory=list)
    difficulty: ArticleDifficulty = "intermediate"
    estimated_read_time: int = Field(..., ge=0, description="Minutes")
    suggested_questions: list[str] = Field(default_factory=list)


# =============================================================================
# QUIZ
# =============================================================================


class QuizQuestion(ContentPayload):
    question: str
    options: list[str] = Field(..., min_length=1)
    correct_answer: int = Field(..., ge=0, description="Zero-based index into options")
    explanation: str
    difficulty: QuestionDifficulty = "medium"

    @model_validator(mode="after")
    def validate_correct_answer(self) -> "QuizQuestion":
        """Ensure correct_answer points at one of the options."""
        if self.correct_answer >= len(self.options):
            raise ValueError("correctAnswer must index one of the options")
        return self


class Quiz(ContentPayload):
    title: str
    description: str
    questions: list[QuizQuestion] = Field(..., min_length=1)
    estimated_time: int = Field(..., ge=0, description="Minutes")


# =============================================================================
# STUDY PLAN
# =============================================================================


class StudyPlanWeek(ContentPayload):
    week: int = Field(..., ge=1)
    title: str
    topics: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)


class StudyPlan(ContentPayload):
    """Multi-week plan. Returned to the caller, never stored."""

    title: str
    description: str
    weeks: list[StudyPlanWeek] = Field(default_factory=list)
