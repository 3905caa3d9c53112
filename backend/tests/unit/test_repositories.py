from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from asyncpg.exceptions import UniqueViolationError

from app.domain.chat import repo as chat_repo
from app.domain.common.exceptions import Conflict
from app.domain.feed import repo as feed_repo
from app.domain.feed.models import CounterField
from app.domain.feed.service import FeedService
from app.domain.social import repo as social_repo
from app.domain.social.models import pair_key


class RecordingConnection:
    """Stands in for an asyncpg connection; records every statement it is given."""

    def __init__(self, *, fail_on=None, rows=None, status="UPDATE 1"):
        self.fail_on = fail_on
        self.rows = rows or {}
        self.status = status
        self.statements = []
        self.in_transaction = False

    def _record(self, sql, args):
        self.statements.append((" ".join(sql.split()), args, self.in_transaction))
        if self.fail_on and self.fail_on in sql:
            raise UniqueViolationError("duplicate key value violates unique constraint")

    async def execute(self, sql, *args):
        self._record(sql, args)
        return self.status

    async def fetchrow(self, sql, *args):
        self._record(sql, args)
        for marker, row in self.rows.items():
            if marker in sql:
                return row
        return None

    async def fetch(self, sql, *args):
        self._record(sql, args)
        return []

    @asynccontextmanager
    async def transaction(self):
        self.in_transaction = True
        try:
            yield
        finally:
            self.in_transaction = False


class RecordingPool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


def _use(monkeypatch, module, conn):
    async def fake_get_pool():
        return RecordingPool(conn)

    monkeypatch.setattr(module, "get_pool", fake_get_pool)


def _post_row(post_id, author_id):
    now = datetime.now(timezone.utc)
    return {
        "id": post_id,
        "author_id": author_id,
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


@pytest.mark.asyncio
async def test_insert_pending_unique_violation_is_conflict(monkeypatch):
    conn = RecordingConnection(fail_on="INSERT INTO connections")
    _use(monkeypatch, social_repo, conn)
    alice, bob = uuid4(), uuid4()

    with pytest.raises(Conflict):
        await social_repo.ConnectionRepository().insert_pending(bob, alice)

    [(sql, args, _)] = conn.statements
    assert sql.startswith("INSERT INTO connections")
    # reversed request targets the same (user_low, user_high) key
    assert (args[3], args[4]) == pair_key(alice, bob)
    assert (args[1], args[2]) == (bob, alice)


@pytest.mark.asyncio
async def test_insert_like_unique_violation_is_conflict(monkeypatch):
    conn = RecordingConnection(fail_on="INSERT INTO likes")
    _use(monkeypatch, feed_repo, conn)

    with pytest.raises(Conflict):
        await feed_repo.PostRepository().insert_like(uuid4(), uuid4())


@pytest.mark.asyncio
async def test_duplicate_like_from_store_leaves_counter_untouched(monkeypatch, users, notification_service, notification_repo):
    author, fan = users.add("Author"), users.add("Fan")
    post_id = uuid4()
    conn = RecordingConnection(fail_on="INSERT INTO likes", rows={"FROM posts": _post_row(post_id, author)})
    _use(monkeypatch, feed_repo, conn)
    service = FeedService(repository=feed_repo.PostRepository(), users=users, notifications=notification_service)

    with pytest.raises(Conflict):
        await service.like(post_id, fan)

    assert not any(sql.startswith("UPDATE posts") for sql, _, _ in conn.statements)
    assert notification_repo.rows == []


@pytest.mark.asyncio
async def test_increment_counter_is_a_single_clamped_update(monkeypatch):
    conn = RecordingConnection()
    _use(monkeypatch, feed_repo, conn)
    post_id = uuid4()

    assert await feed_repo.PostRepository().increment_counter(post_id, CounterField.LIKES, -1) is True

    [(sql, args, _)] = conn.statements
    assert sql == "UPDATE posts SET likes_count = GREATEST(likes_count + $2, 0) WHERE id = $1"
    assert args == (post_id, -1)


@pytest.mark.asyncio
async def test_increment_counter_rejects_other_columns(monkeypatch):
    conn = RecordingConnection()
    _use(monkeypatch, feed_repo, conn)

    with pytest.raises(ValueError):
        await feed_repo.PostRepository().increment_counter(uuid4(), "content", 1)
    assert conn.statements == []


@pytest.mark.asyncio
async def test_read_conversation_marks_then_selects_in_one_transaction(monkeypatch):
    conn = RecordingConnection(status="UPDATE 2")
    _use(monkeypatch, chat_repo, conn)
    viewer, other = uuid4(), uuid4()

    messages, marked = await chat_repo.MessageRepository().read_conversation(viewer, other)

    assert messages == []
    assert marked == 2
    [(update_sql, update_args, update_tx), (select_sql, _, select_tx)] = conn.statements
    assert update_sql.startswith("UPDATE messages SET read = TRUE")
    # only the other user's messages to the viewer are flipped
    assert update_args[:2] == (other, viewer)
    assert select_sql.startswith("SELECT * FROM messages WHERE conversation_id")
    assert update_tx and select_tx
