"""AI content endpoint tests (demo generator, plus a failing generator for error paths)."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from studyhub.db.models import Channel, User
from studyhub.db.storage import storage
from studyhub.schemas.content import Quiz, StudyArticle
from studyhub.services.content_generator import DemoContentGenerator, GenerationError


@pytest.mark.asyncio
class TestGenerateArticle:
    async def test_article_is_stored_as_ai_message(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        response = await client.post(
            "/api/ai/generate-article",
            json={"prompt": "Explain conservation of energy", "subject": "Physics", "channel_id": str(channel.id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        message = data["message"]
        assert message["is_ai"] is True
        assert message["author_id"] is None
        assert message["message_type"] == "article"
        assert message["ai_prompt"] == "Explain conservation of energy"
        assert "estimatedReadTime" in data["article"]

        stored = StudyArticle.from_message_content(message["content"])
        assert stored.title == data["article"]["title"]

    async def test_article_counts_as_studied_topic(
        self, client: AsyncClient, db_session: AsyncSession, user: User, channel: Channel, auth_headers: dict
    ):
        body = {"prompt": "Momentum", "subject": "Physics", "channel_id": str(channel.id)}
        for _ in range(2):
            await client.post("/api/ai/generate-article", json=body, headers=auth_headers)

        progress = await storage.get_study_progress(db_session, user.id, channel.id)

        assert progress.topics_studied == 2

    async def test_article_in_foreign_channel_is_404(self, client: AsyncClient, channel: Channel, other_headers: dict):
        response = await client.post(
            "/api/ai/generate-article",
            json={"prompt": "p", "subject": "Physics", "channel_id": str(channel.id)},
            headers=other_headers,
        )

        assert response.status_code == 404

    async def test_missing_fields_are_invalid_data(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/ai/generate-article", json={"prompt": "p"}, headers=auth_headers)

        assert response.status_code == 400


async def test_generate_quiz_stores_quiz_message(client: AsyncClient, channel: Channel, auth_headers: dict):
    response = await client.post(
        "/api/ai/generate-quiz",
        json={"topic": "projectile motion", "subject": "Physics", "channel_id": str(channel.id), "num_questions": 2},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"]["message_type"] == "quiz"
    assert data["message"]["ai_prompt"] == "Generate quiz: projectile motion"
    assert data["quiz"]["title"] == "Physics Quiz: projectile motion"
    for question in data["quiz"]["questions"]:
        assert 0 <= question["correctAnswer"] < len(question["options"])
    assert Quiz.from_message_content(data["message"]["content"]) == Quiz.model_validate(data["quiz"])


async def test_generate_study_plan(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/ai/generate-study-plan",
        json={"subject": "Calculus", "goals": "Pass the midterm", "timeframe": "3 weeks"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert [w["week"] for w in response.json()["weeks"]] == [1, 2, 3]


async def test_term_definition(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/ai/term-definition", json={"term": "velocity"}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["term"] == "velocity"
    assert data["definition"].startswith("Velocity is")


@pytest.mark.asyncio
class TestThreadResponse:
    async def test_answer_stored_as_ai_reply(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        posted = await client.post(
            f"/api/channels/{channel.id}/messages",
            json={"content": "Why does ice float?"},
            headers=auth_headers,
        )
        message_id = posted.json()["id"]

        response = await client.post(
            "/api/ai/thread-response",
            json={"question": "Explain density", "message_id": message_id, "subject": "Chemistry"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["thread"]["is_ai"] is True
        assert data["thread"]["author_id"] is None
        assert data["thread"]["content"] == data["response"]

        threads = (await client.get(f"/api/messages/{message_id}/threads", headers=auth_headers)).json()
        assert [t["is_ai"] for t in threads] == [True]
        assert threads[0]["author"] is None

    async def test_unknown_message_is_404(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/ai/thread-response",
            json={
                "question": "q",
                "message_id": "00000000-0000-0000-0000-000000000000",
                "subject": "Physics",
            },
            headers=auth_headers,
        )

        assert response.status_code == 404


async def test_generation_failure_is_500_with_reason(
    client: AsyncClient, content_generator: DemoContentGenerator, channel: Channel, auth_headers: dict
):
    content_generator.generate_quiz = AsyncMock(side_effect=GenerationError("model overloaded"))

    response = await client.post(
        "/api/ai/generate-quiz",
        json={"topic": "optics", "subject": "Physics", "channel_id": str(channel.id)},
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate quiz: model overloaded"

    feed = await client.get(f"/api/channels/{channel.id}/messages", headers=auth_headers)
    assert feed.json() == []
