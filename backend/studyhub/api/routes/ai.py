"""
AI content routes.

Each endpoint asks the configured ContentGenerator for content. Articles,
quizzes and thread answers are persisted as AI-authored rows (no author);
study plans and term definitions are returned without being stored.

Generation failures surface as 500 "Failed to generate <thing>: <reason>".
No retries.
"""

from fastapi import APIRouter, HTTPException, status

from studyhub.api.deps import (
    ContentGen,
    CurrentUser,
    DbSession,
    get_member_channel_or_404,
    get_member_message_or_404,
)
from studyhub.config import sanitize_error
from studyhub.db.models import MessageType
from studyhub.db.storage import storage
from studyhub.schemas.ai import (
    ArticleResponse,
    GenerateArticleRequest,
    GenerateQuizRequest,
    GenerateStudyPlanRequest,
    QuizResponse,
    TermDefinitionRequest,
    TermDefinitionResponse,
    ThreadAnswerResponse,
    ThreadResponseRequest,
)
from studyhub.schemas.content import StudyPlan
from studyhub.schemas.messages import MessageRead, ThreadRead
from studyhub.services.content_generator import GenerationError

router = APIRouter(prefix="/ai", tags=["ai"])


def _generation_failed(what: str, error: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to generate {what}: {sanitize_error(error)}",
    )


@router.post("/generate-article", response_model=ArticleResponse)
async def generate_article(
    request: GenerateArticleRequest,
    current_user: CurrentUser,
    db: DbSession,
    generator: ContentGen,
) -> ArticleResponse:
    """Generate a study article, post it to the channel and count it as a studied topic."""
    await get_member_channel_or_404(db, request.channel_id, current_user.id)

    try:
        article = await generator.generate_article(request.prompt, request.subject)
    except GenerationError as e:
        raise _generation_failed("article", e)

    message = await storage.create_message(
        db,
        channel_id=request.channel_id,
        content=article.to_message_content(),
        message_type=MessageType.ARTICLE.value,
        is_ai=True,
        ai_prompt=request.prompt,
    )
    await storage.increment_topics_studied(db, current_user.id, request.channel_id)

    return ArticleResponse(message=MessageRead.model_validate(message), article=article)


@router.post("/generate-quiz", response_model=QuizResponse)
async def generate_quiz(
    request: GenerateQuizRequest,
    current_user: CurrentUser,
    db: DbSession,
    generator: ContentGen,
) -> QuizResponse:
    await get_member_channel_or_404(db, request.channel_id, current_user.id)

    try:
        quiz = await generator.generate_quiz(request.topic, request.subject, request.num_questions)
    except GenerationError as e:
        raise _generation_failed("quiz", e)

    message = await storage.create_message(
        db,
        channel_id=request.channel_id,
        content=quiz.to_message_content(),
        message_type=MessageType.QUIZ.value,
        is_ai=True,
        ai_prompt=f"Generate quiz: {request.topic}",
    )

    return QuizResponse(message=MessageRead.model_validate(message), quiz=quiz)


@router.post("/generate-study-plan", response_model=StudyPlan)
async def generate_study_plan(
    request: GenerateStudyPlanRequest,
    current_user: CurrentUser,
    generator: ContentGen,
) -> StudyPlan:
    try:
        return await generator.generate_study_plan(request.subject, request.goals, request.timeframe)
    except GenerationError as e:
        raise _generation_failed("study plan", e)


@router.post("/term-definition", response_model=TermDefinitionResponse)
async def term_definition(
    request: TermDefinitionRequest,
    current_user: CurrentUser,
    generator: ContentGen,
) -> TermDefinitionResponse:
    """Define a term. Always answers; falls back to a placeholder definition."""
    definition = await generator.get_term_definition(request.term)
    return TermDefinitionResponse(term=request.term, definition=definition)


@router.post("/thread-response", response_model=ThreadAnswerResponse)
async def thread_response(
    request: ThreadResponseRequest,
    current_user: CurrentUser,
    db: DbSession,
    generator: ContentGen,
) -> ThreadAnswerResponse:
    """Answer a question about a message and store the answer as an AI reply under it."""
    message = await get_member_message_or_404(db, request.message_id, current_user.id)

    try:
        answer = await generator.generate_thread_response(request.question, message.content, request.subject)
    except GenerationError as e:
        raise _generation_failed("thread response", e)

    thread = await storage.create_thread(
        db,
        parent_message_id=message.id,
        content=answer,
        is_ai=True,
    )

    return ThreadAnswerResponse(thread=ThreadRead.model_validate(thread), response=answer)
