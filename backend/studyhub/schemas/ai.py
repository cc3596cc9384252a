"""Request/response schemas for the AI content endpoints."""

from uuid import UUID

from pydantic import BaseModel, Field

from studyhub.schemas.content import Quiz, StudyArticle
from studyhub.schemas.messages import MessageRead, ThreadRead


# Request schemas
class GenerateArticleRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=5000)
    subject: str = Field(..., min_length=1, max_length=255)
    channel_id: UUID


class GenerateQuizRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=1000)
    subject: str = Field(..., min_length=1, max_length=255)
    channel_id: UUID
    num_questions: int = Field(5, ge=1, le=20)


class GenerateStudyPlanRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    goals: str = Field(..., min_length=1, max_length=5000)
    timeframe: str = Field(..., min_length=1, max_length=255)


class TermDefinitionRequest(BaseModel):
    term: str = Field(..., min_length=1, max_length=255)


class ThreadResponseRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=5000)
    message_id: UUID
    subject: str = Field(..., min_length=1, max_length=255)


# Response schemas
class ArticleResponse(BaseModel):
    """The stored AI message plus the decoded article."""

    message: MessageRead
    article: StudyArticle


class QuizResponse(BaseModel):
    message: MessageRead
    quiz: Quiz


class TermDefinitionResponse(BaseModel):
    term: str
    definition: str


class ThreadAnswerResponse(BaseModel):
    thread: ThreadRead
    response: str
