from datetime import datetime, timezone
from uuid import uuid4

import pytest

from app.api import comments as comments_api
from app.api import posts as posts_api
from app.domain.common.exceptions import Conflict, Forbidden, InvalidArgument, NotFound
from app.domain.feed.schemas import CommentAuthor, CommentView, FeedAuthor, FeedItem, PostDetail

USER_ID = "22222222-2222-2222-2222-222222222222"
HEADERS = {"X-User-Id": USER_ID}


def _detail(**overrides):
    now = datetime.now(timezone.utc)
    payload = {
        "id": uuid4(),
        "author_id": USER_ID,
        "content": "hello",
        "category": "general",
        "privacy": "public",
        "image_urls": [],
        "tags": [],
        "likes_count": 0,
        "comments_count": 0,
        "shares_count": 0,
        "created_at": now,
        "updated_at": now,
    }
    payload.update(overrides)
    return PostDetail(**payload)


@pytest.mark.asyncio
async def test_create_post_returns_201(monkeypatch, api_client):
    detail = _detail(content="first post")
    captured = {}

    async def fake_create(author_id, **kwargs):
        captured.update(kwargs)
        return detail

    monkeypatch.setattr(posts_api._service, "create_post", fake_create)

    response = await api_client.post("/posts", json={"content": "first post", "tags": ["intro"]}, headers=HEADERS)

    assert response.status_code == 201
    assert response.json()["post"]["content"] == "first post"
    assert captured["tags"] == ["intro"]
    assert captured["privacy"] == "public"


@pytest.mark.asyncio
async def test_create_post_rejects_unknown_privacy(api_client):
    response = await api_client.post("/posts", json={"privacy": "secret"}, headers=HEADERS)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_feed_passes_limit(monkeypatch, api_client):
    seen = {}
    item = FeedItem(
        id=uuid4(),
        user=FeedAuthor(id=uuid4(), name="Author"),
        content="hi",
        category="general",
        created_at=datetime.now(timezone.utc),
        likes=2,
        comments=0,
        shares=0,
        is_liked=True,
    )

    async def fake_feed(viewer_id, *, limit=None):
        seen["limit"] = limit
        return [item]

    monkeypatch.setattr(posts_api._service, "get_feed", fake_feed)

    response = await api_client.get("/posts/feed?limit=10", headers=HEADERS)

    assert response.status_code == 200
    assert seen["limit"] == 10
    [post] = response.json()["posts"]
    assert post["is_liked"] is True
    assert post["shared_post"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("exc,expected", [(None, 201), (Conflict("Already liked"), 409), (NotFound("Post not found"), 404)])
async def test_like_status_codes(monkeypatch, api_client, exc, expected):
    async def fake_like(post_id, user_id):
        if exc is not None:
            raise exc

    monkeypatch.setattr(posts_api._service, "like", fake_like)

    response = await api_client.post(f"/posts/{uuid4()}/like", headers=HEADERS)

    assert response.status_code == expected


@pytest.mark.asyncio
async def test_unlike_is_always_ok(monkeypatch, api_client):
    async def fake_unlike(post_id, user_id):
        return False

    monkeypatch.setattr(posts_api._service, "unlike", fake_unlike)

    response = await api_client.delete(f"/posts/{uuid4()}/like", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["ok"] is True


@pytest.mark.asyncio
async def test_share_without_body(monkeypatch, api_client):
    original_id = uuid4()
    seen = {}

    async def fake_share(post_id, user_id, content=None):
        seen["content"] = content
        return _detail(content="", shared_post_id=post_id)

    monkeypatch.setattr(posts_api._service, "share_post", fake_share)

    response = await api_client.post(f"/posts/{original_id}/share", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["post"]["shared_post_id"] == str(original_id)
    assert seen["content"] is None


@pytest.mark.asyncio
async def test_delete_post_forbidden(monkeypatch, api_client):
    async def fake_delete(post_id, user_id):
        raise Forbidden("You can only delete your own posts")

    monkeypatch.setattr(posts_api._service, "delete_post", fake_delete)

    response = await api_client.delete(f"/posts/{uuid4()}", headers=HEADERS)

    assert response.status_code == 403
    assert response.json()["error"] == "You can only delete your own posts"


@pytest.mark.asyncio
async def test_comments_roundtrip_status_codes(monkeypatch, api_client):
    post_id = uuid4()
    view = CommentView(
        id=uuid4(),
        content="nice",
        created_at=datetime.now(timezone.utc),
        user_id=USER_ID,
        profile=CommentAuthor(full_name="Commenter"),
    )

    async def fake_add(post_id, user_id, content):
        if not content.strip():
            raise InvalidArgument("Content required")
        return view

    async def fake_list(post_id):
        return [view]

    monkeypatch.setattr(comments_api._service, "add_comment", fake_add)
    monkeypatch.setattr(comments_api._service, "list_comments", fake_list)

    created = await api_client.post(f"/comments/{post_id}", json={"content": "nice"}, headers=HEADERS)
    blank = await api_client.post(f"/comments/{post_id}", json={"content": " "}, headers=HEADERS)
    listed = await api_client.get(f"/comments/{post_id}", headers=HEADERS)

    assert created.status_code == 201
    assert blank.status_code == 400
    assert listed.status_code == 200
    assert listed.json()[0]["profile"]["full_name"] == "Commenter"


@pytest.mark.asyncio
async def test_create_post_forwards_event_details(monkeypatch, api_client):
    captured = {}

    async def fake_create(author_id, **kwargs):
        captured.update(kwargs)
        return _detail(event_details=kwargs["event_details"])

    monkeypatch.setattr(posts_api._service, "create_post", fake_create)

    response = await api_client.post(
        "/posts",
        json={"content": "meetup", "event_details": {"date": "2024-05-01", "time": "18:00", "location": "Hall B"}},
        headers=HEADERS,
    )

    assert response.status_code == 201
    assert captured["event_details"] == {"date": "2024-05-01", "time": "18:00", "location": "Hall B"}
    assert response.json()["post"]["event_details"]["location"] == "Hall B"


@pytest.mark.asyncio
async def test_comment_list_does_not_require_auth(monkeypatch, api_client):
    async def fake_list(post_id):
        return []

    monkeypatch.setattr(comments_api._service, "list_comments", fake_list)

    listed = await api_client.get(f"/comments/{uuid4()}")
    posted = await api_client.post(f"/comments/{uuid4()}", json={"content": "hi"})

    assert listed.status_code == 200
    assert listed.json() == []
    assert posted.status_code == 401
