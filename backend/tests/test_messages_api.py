"""Message feed, thread, bookmark and progress endpoint tests."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from studyhub.db.models import Channel, User
from studyhub.db.storage import storage


async def _post(client: AsyncClient, channel: Channel, headers: dict, content: str, **extra) -> dict:
    response = await client.post(
        f"/api/channels/{channel.id}/messages",
        json={"content": content, **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestChannelMessages:
    async def test_post_message_sets_author(self, client: AsyncClient, user: User, channel: Channel, auth_headers: dict):
        message = await _post(client, channel, auth_headers, "Anyone up for a review session?")

        assert message["author_id"] == str(user.id)
        assert message["is_ai"] is False
        assert message["message_type"] == "text"

    async def test_metadata_round_trips(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        message = await _post(
            client, channel, auth_headers, "diagram.png", message_type="image", metadata={"width": 640}
        )

        assert message["metadata"] == {"width": 640}
        fetched = await client.get(f"/api/messages/{message['id']}", headers=auth_headers)
        assert fetched.json()["metadata"] == {"width": 640}

    async def test_humans_cannot_post_articles(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        response = await client.post(
            f"/api/channels/{channel.id}/messages",
            json={"content": "{}", "message_type": "article"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_feed_is_oldest_first_within_limit(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        for i in range(4):
            await _post(client, channel, auth_headers, f"note {i}")

        response = await client.get(f"/api/channels/{channel.id}/messages?limit=3", headers=auth_headers)

        assert response.status_code == 200
        feed = response.json()
        assert [m["content"] for m in feed] == ["note 1", "note 2", "note 3"]
        assert feed[0]["author"]["first_name"] == "Ada"

    async def test_limit_out_of_range_is_invalid_data(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        response = await client.get(f"/api/channels/{channel.id}/messages?limit=0", headers=auth_headers)

        assert response.status_code == 400


@pytest.mark.asyncio
class TestThreads:
    async def test_replies_listed_oldest_first(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        parent = await _post(client, channel, auth_headers, "What is torque?")
        for text in ("Force times lever arm", "Measured in N*m"):
            response = await client.post(
                f"/api/messages/{parent['id']}/threads",
                json={"content": text},
                headers=auth_headers,
            )
            assert response.status_code == 201

        response = await client.get(f"/api/messages/{parent['id']}/threads", headers=auth_headers)

        replies = response.json()
        assert [r["content"] for r in replies] == ["Force times lever arm", "Measured in N*m"]
        assert all(r["note_type"] == "reply" for r in replies)
        assert replies[0]["author"]["email"] == "ada@example.com"

    async def test_non_member_cannot_reply(
        self, client: AsyncClient, channel: Channel, auth_headers: dict, other_headers: dict
    ):
        parent = await _post(client, channel, auth_headers, "members only")

        response = await client.post(
            f"/api/messages/{parent['id']}/threads",
            json={"content": "let me in"},
            headers=other_headers,
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestBookmarks:
    async def test_bookmark_is_idempotent(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        message = await _post(client, channel, auth_headers, "Great summary of Newton's laws")
        url = f"/api/messages/{message['id']}/bookmark"

        first = await client.post(url, headers=auth_headers)
        second = await client.post(url, headers=auth_headers)

        assert first.status_code == second.status_code == 200
        assert first.json()["id"] == second.json()["id"]

        bookmarks = (await client.get("/api/bookmarks", headers=auth_headers)).json()
        assert len(bookmarks) == 1
        assert bookmarks[0]["message"]["content"] == "Great summary of Newton's laws"

    async def test_remove_bookmark_twice_succeeds(self, client: AsyncClient, channel: Channel, auth_headers: dict):
        message = await _post(client, channel, auth_headers, "temporary")
        url = f"/api/messages/{message['id']}/bookmark"
        await client.post(url, headers=auth_headers)

        for _ in range(2):
            response = await client.delete(url, headers=auth_headers)
            assert response.status_code == 200
            assert response.json() == {"success": True}

        assert (await client.get("/api/bookmarks", headers=auth_headers)).json() == []


async def test_study_progress_lists_channel_names(
    client: AsyncClient, db_session: AsyncSession, user: User, channel: Channel, auth_headers: dict
):
    await storage.update_study_progress(db_session, user.id, channel.id, topics_studied=3, daily_goal=4)

    response = await client.get("/api/study-progress", headers=auth_headers)

    assert response.status_code == 200
    [entry] = response.json()
    assert entry["channel_name"] == "mechanics"
    assert entry["progress"]["topics_studied"] == 3
    assert entry["progress"]["daily_goal"] == 4

    channel_progress = await client.get(f"/api/channels/{channel.id}/progress", headers=auth_headers)
    assert channel_progress.json()["topics_studied"] == 3
