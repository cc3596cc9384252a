"""
AI content generation.

`ContentGenerator` is the capability interface used by the API layer. Two
implementations exist:

- AnthropicContentGenerator: prompts Claude and validates the JSON replies
  into the payload models in schemas/content.py.
- DemoContentGenerator: canned content after a short artificial delay, used
  when no API key is configured so the rest of the app behaves the same.

The variant is chosen once per process by get_content_generator().
"""

import asyncio
import logging
import random
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import TypeVar

from anthropic import AsyncAnthropic

from studyhub.config import get_settings
from studyhub.schemas.content import (
    ArticleSection,
    ContentPayload,
    Quiz,
    QuizQuestion,
    StudyArticle,
    StudyPlan,
    StudyPlanWeek,
)
from studyhub.services import prompts

logger = logging.getLogger(__name__)
settings = get_settings()

PayloadT = TypeVar("PayloadT", bound=ContentPayload)

_FENCED = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```\s*$")

EMPTY_THREAD_RESPONSE = "I'm sorry, I couldn't generate a response."


class GenerationError(Exception):
    """The completion service failed or returned unusable content."""


def _extract_json_text(text: str) -> str:
    """Strip Markdown fences and any prose around the outermost JSON object."""
    text = text.strip()
    fenced = _FENCED.match(text)
    if fenced:
        text = fenced.group(1).strip()
    if not text.startswith("{"):
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]
    return text


def placeholder_definition(term: str) -> str:
    return (
        f"{term} is a fundamental concept in science and education. This term represents an "
        "important principle that students should understand as part of their comprehensive "
        "learning journey."
    )


class ContentGenerator(ABC):
    """Capability interface for generated study content."""

    @abstractmethod
    async def generate_article(self, prompt: str, subject: str) -> StudyArticle:
        ...

    @abstractmethod
    async def generate_quiz(self, topic: str, subject: str, num_questions: int = 5) -> Quiz:
        ...

    @abstractmethod
    async def generate_thread_response(self, question: str, context: str, subject: str) -> str:
        ...

    @abstractmethod
    async def get_term_definition(self, term: str) -> str:
        """Define a term. Must never raise; degrades to a placeholder sentence."""

    @abstractmethod
    async def generate_study_plan(self, subject: str, goals: str, timeframe: str) -> StudyPlan:
        ...


# =============================================================================
# LIVE (ANTHROPIC)
# =============================================================================


class AnthropicContentGenerator(ContentGenerator):
    """Generates content with Claude. No retries: failures surface immediately."""

    def __init__(self, client: AsyncAnthropic | None = None):
        """Initialize Anthropic client."""
        self.client = client or AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def _complete(self, *, system: str, user_message: str, max_tokens: int) -> str:
        message = await self.client.messages.create(
            model=settings.llm_model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": user_message}],
        )
        if not message.content:
            return ""
        return message.content[0].text or ""

    async def _generate_payload(
        self,
        payload_cls: type[PayloadT],
        *,
        what: str,
        system: str,
        user_message: str,
        max_tokens: int,
    ) -> PayloadT:
        try:
            text = await self._complete(system=system, user_message=user_message, max_tokens=max_tokens)
            if not text.strip():
                raise ValueError("No content generated")
            return payload_cls.model_validate_json(_extract_json_text(text))
        except Exception as e:
            logger.exception("Error generating %s", what)
            raise GenerationError(str(e)) from e

    async def generate_article(self, prompt: str, subject: str) -> StudyArticle:
        return await self._generate_payload(
            StudyArticle,
            what="study article",
            system=prompts.ARTICLE_SYSTEM_PROMPT.format(subject=subject),
            user_message=prompt,
            max_tokens=settings.llm_article_max_tokens,
        )

    async def generate_quiz(self, topic: str, subject: str, num_questions: int = 5) -> Quiz:
        return await self._generate_payload(
            Quiz,
            what="quiz",
            system=prompts.QUIZ_SYSTEM_PROMPT.format(subject=subject, topic=topic, num_questions=num_questions),
            user_message=f"Create a quiz about: {topic}",
            max_tokens=settings.llm_quiz_max_tokens,
        )

    async def generate_thread_response(self, question: str, context: str, subject: str) -> str:
        try:
            text = await self._complete(
                system=prompts.THREAD_SYSTEM_PROMPT.format(subject=subject, context=context),
                user_message=question,
                max_tokens=settings.llm_thread_max_tokens,
            )
        except Exception as e:
            logger.exception("Error generating thread response")
            raise GenerationError(str(e)) from e
        return text.strip() or EMPTY_THREAD_RESPONSE

    async def get_term_definition(self, term: str) -> str:
        try:
            text = await self._complete(
                system=prompts.DEFINITION_SYSTEM_PROMPT,
                user_message=f"Define: {term}",
                max_tokens=settings.llm_definition_max_tokens,
            )
        except Exception:
            # Definitions are a tooltip nicety; never fail the request
            logger.exception("Term definition failed for %r, using placeholder", term)
            return placeholder_definition(term)
        return text.strip() or placeholder_definition(term)

    async def generate_study_plan(self, subject: str, goals: str, timeframe: str) -> StudyPlan:
        return await self._generate_payload(
            StudyPlan,
            what="study plan",
            system=prompts.STUDY_PLAN_SYSTEM_PROMPT,
            user_message=f"Create a study plan for {subject}. Goals: {goals}. Timeframe: {timeframe}",
            max_tokens=settings.llm_study_plan_max_tokens,
        )


# =============================================================================
# DEMO
# =============================================================================

_DEMO_DEFINITIONS = {
    "physics": "Physics is the natural science that studies matter, its motion and behavior through space and time, and the related entities of energy and force. It is one of the most fundamental scientific disciplines, with the main goal of understanding how the universe behaves.",
    "energy": "Energy is the quantitative property that must be transferred to an object in order to perform work on, or to heat, the object. It is a conserved quantity and can neither be created nor destroyed, only transformed from one form to another.",
    "momentum": "Momentum is the quantity of motion of a moving body, measured as a product of its mass and velocity. It is a vector quantity, possessing both magnitude and direction, and is conserved in isolated systems.",
    "force": "Force is any interaction that, when unopposed, will change the motion of an object. It can cause an object with mass to change its velocity, direction, or shape. Force is measured in newtons (N).",
    "velocity": "Velocity is the rate of change of the object's position with respect to time and direction. Unlike speed, velocity is a vector quantity that includes both magnitude and direction.",
}

_DEMO_THREAD_RESPONSES = [
    "Great question! Based on the context about {subject}, here's a detailed explanation: the concept you're asking about involves several key principles that work together to create the observed phenomena. Let me break this down into simpler terms with a practical example.",
    "That's an excellent follow-up question! In {subject}, this particular aspect is crucial because it demonstrates how theoretical knowledge applies to real-world scenarios. When we apply these principles in practice, we can see measurable results.",
    "I'm glad you asked about this! This is a common area where students often need clarification. The key insight here is understanding the relationship between different variables and how they influence the overall system. Let me provide a step-by-step explanation.",
    "This question touches on a fundamental concept in {subject}. The answer involves understanding both the theoretical framework and its practical applications. Here's how we can approach this problem systematically.",
]

_DEFAULT_PLAN_WEEKS = 4
_MAX_PLAN_WEEKS = 12


def _timeframe_weeks(timeframe: str) -> int:
    """Weeks covered by a free-text timeframe like "6 weeks" or "2 months"."""
    match = re.search(r"\d+", timeframe)
    if not match:
        return _DEFAULT_PLAN_WEEKS
    weeks = int(match.group())
    if "month" in timeframe.lower():
        weeks *= 4
    return max(1, min(weeks, _MAX_PLAN_WEEKS))


class DemoContentGenerator(ContentGenerator):
    """Canned content for running without an Anthropic key."""

    ARTICLE_DELAY = 1.0
    QUIZ_DELAY = 0.8
    THREAD_DELAY = 0.6
    DEFINITION_DELAY = 0.4
    STUDY_PLAN_DELAY = 0.7

    def __init__(self, latency: float = 1.0):
        self.latency = latency

    async def _simulate_latency(self, seconds: float) -> None:
        if self.latency > 0:
            await asyncio.sleep(seconds * self.latency)

    async def generate_article(self, prompt: str, subject: str) -> StudyArticle:
        await self._simulate_latency(self.ARTICLE_DELAY)
        headline = " ".join(prompt.split()[:3])
        return StudyArticle(
            title=f"Understanding {subject}: {headline}",
            content=(
                f"This comprehensive study guide explores the fundamental concepts of {subject}. "
                f'The topic "{prompt}" is essential for building a strong foundation in this subject area.'
            ),
            sections=[
                ArticleSection(
                    title="Definition",
                    content=f"{subject} is a fundamental concept that involves understanding key principles and their applications. This definition provides the groundwork for deeper exploration.",
                    type="definition",
                ),
                ArticleSection(
                    title="Key Concepts",
                    content=f"The main concepts include theoretical frameworks, practical applications, and real-world examples that demonstrate the importance of {subject} in various contexts.",
                    type="explanation",
                ),
                ArticleSection(
                    title="Practical Example",
                    content=f"Consider a real-world scenario where {subject} principles are applied: this demonstrates how theoretical knowledge translates into practical solutions.",
                    type="example",
                ),
                ArticleSection(
                    title="Mathematical Framework",
                    content=f"The mathematical representation often involves equations and formulas that help quantify and predict outcomes related to {subject}.",
                    type="formula",
                ),
            ],
            difficulty="intermediate",
            estimated_read_time=8,
            suggested_questions=[
                f"What are the main applications of {subject}?",
                "How does this concept relate to other topics?",
                "Can you provide more examples?",
                "What are the common misconceptions about this topic?",
            ],
        )

    async def generate_quiz(self, topic: str, subject: str, num_questions: int = 5) -> Quiz:
        await self._simulate_latency(self.QUIZ_DELAY)
        questions = [
            QuizQuestion(
                question=f"What is the fundamental principle behind {topic}?",
                options=[
                    "Conservation of energy",
                    "Quantum mechanics",
                    "Electromagnetic induction",
                    "Thermodynamic equilibrium",
                ],
                correct_answer=0,
                explanation="The fundamental principle involves the conservation of energy, which states that energy cannot be created or destroyed, only transformed from one form to another.",
                difficulty="medium",
            ),
            QuizQuestion(
                question=f"Which of the following best describes the practical application of {topic}?",
                options=[
                    "Only theoretical importance",
                    "Used in modern technology",
                    "Historical significance only",
                    "Future potential applications",
                ],
                correct_answer=1,
                explanation="This concept has significant practical applications in modern technology, from electronics to renewable energy systems.",
                difficulty="easy",
            ),
            QuizQuestion(
                question=f"What is the mathematical relationship in {topic}?",
                options=[
                    "Linear relationship",
                    "Exponential growth",
                    "Inverse proportionality",
                    "Logarithmic scale",
                ],
                correct_answer=2,
                explanation="The mathematical relationship often involves inverse proportionality, where one variable increases as another decreases.",
                difficulty="hard",
            ),
        ]
        return Quiz(
            title=f"{subject} Quiz: {topic}",
            description=f"Test your knowledge on {topic} with this comprehensive quiz covering key concepts and applications.",
            questions=questions[:max(1, num_questions)],
            estimated_time=5,
        )

    async def generate_thread_response(self, question: str, context: str, subject: str) -> str:
        await self._simulate_latency(self.THREAD_DELAY)
        return random.choice(_DEMO_THREAD_RESPONSES).format(subject=subject)

    async def get_term_definition(self, term: str) -> str:
        await self._simulate_latency(self.DEFINITION_DELAY)
        return _DEMO_DEFINITIONS.get(term.strip().lower()) or placeholder_definition(term)

    async def generate_study_plan(self, subject: str, goals: str, timeframe: str) -> StudyPlan:
        await self._simulate_latency(self.STUDY_PLAN_DELAY)
        phases = ["Foundations", "Core Concepts", "Applications", "Practice and Review"]
        total = _timeframe_weeks(timeframe)
        weeks = []
        for number in range(1, total + 1):
            phase = phases[(number - 1) * len(phases) // total]
            weeks.append(
                StudyPlanWeek(
                    week=number,
                    title=f"Week {number}: {subject} {phase}",
                    topics=[f"{subject} {phase.lower()}", f"Review of week {number - 1}" if number > 1 else f"Introduction to {subject}"],
                    goals=[f"Progress toward: {goals}", "Complete one practice quiz"],
                )
            )
        return StudyPlan(
            title=f"{subject} Study Plan ({timeframe})",
            description=f"A week-by-week plan for {subject} focused on: {goals}",
            weeks=weeks,
        )


@lru_cache
def get_content_generator() -> ContentGenerator:
    """Pick the generator once per process based on whether an API key is configured."""
    if settings.ai_demo_mode:
        logger.info("No Anthropic API key configured; using demo content generator")
        return DemoContentGenerator(latency=settings.demo_latency)
    return AnthropicContentGenerator()
