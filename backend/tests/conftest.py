import asyncio
import itertools
import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from app import main as app_main
from app.domain.chat.models import ConversationKey, Message
from app.domain.common.exceptions import Conflict
from app.domain.feed.models import Comment, CounterField, Post, PostPrivacy
from app.domain.identity.users import UserSummary
from app.domain.social.models import Connection, ConnectionStatus, Notification, pair_key
from app.infra import postgres
from app.main import app
from app.settings import settings


# Ensure a selector-based event loop policy on Windows to avoid Proactor issues with async IO
if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
	asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
_ticks = itertools.count()


def tick() -> datetime:
	"""Strictly increasing timestamps so ordering assertions are deterministic."""
	return _BASE_TIME + timedelta(seconds=next(_ticks))


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from app.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop(*_args, **_kwargs):
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)
	monkeypatch.setattr(app_main, "ensure_schema", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via the X-User-Id header, which is only accepted in
	dev mode.
	"""
	original_env = settings.environment
	original_metrics_public = settings.obs_metrics_public
	settings.environment = "dev"
	settings.obs_metrics_public = True
	try:
		yield
	finally:
		settings.environment = original_env
		settings.obs_metrics_public = original_metrics_public


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


class InMemoryUsers:
	def __init__(self) -> None:
		self.rows: dict[UUID, UserSummary] = {}

	def add(self, full_name: str = "User", **fields) -> UUID:
		user_id = fields.pop("id", None) or uuid4()
		self.rows[user_id] = UserSummary(id=user_id, full_name=full_name, **fields)
		return user_id

	async def get_user(self, user_id):
		return self.rows.get(user_id)

	async def get_users(self, user_ids):
		return {uid: self.rows[uid] for uid in set(user_ids) if uid in self.rows}

	async def exists(self, user_id):
		return user_id in self.rows


class InMemoryNotifications:
	def __init__(self) -> None:
		self.rows: list[Notification] = []

	async def create(self, *, recipient_id, sender_id, type, message, reference_id=None, reference_type=None):
		notif = Notification(
			id=uuid4(),
			recipient_id=recipient_id,
			sender_id=sender_id,
			type=type,
			message=message,
			reference_id=reference_id,
			reference_type=reference_type,
			read=False,
			read_at=None,
			created_at=tick(),
		)
		self.rows.append(notif)
		return notif

	def for_user(self, user_id):
		return [n for n in self.rows if n.recipient_id == user_id]

	async def list_for_user(self, user_id, limit=50):
		items = sorted(self.for_user(user_id), key=lambda n: n.created_at, reverse=True)
		return items[:limit]

	async def mark_read(self, user_id, notification_id):
		for notif in self.rows:
			if notif.id == notification_id and notif.recipient_id == user_id:
				notif.read = True
				notif.read_at = notif.read_at or tick()
				return notif
		return None

	async def mark_all_read(self, user_id):
		count = 0
		for notif in self.for_user(user_id):
			if not notif.read:
				notif.read = True
				notif.read_at = tick()
				count += 1
		return count

	async def delete(self, user_id, notification_id):
		before = len(self.rows)
		self.rows = [n for n in self.rows if not (n.id == notification_id and n.recipient_id == user_id)]
		return len(self.rows) < before

	async def unread_count(self, user_id):
		return sum(1 for n in self.for_user(user_id) if not n.read)


class InMemoryConnections:
	"""Mirrors the UNIQUE (user_low, user_high) constraint with a pair index."""

	def __init__(self) -> None:
		self.rows: dict[UUID, Connection] = {}
		self.pairs: dict[tuple[UUID, UUID], UUID] = {}

	async def get(self, connection_id):
		return self.rows.get(connection_id)

	async def get_for_pair(self, user_one, user_two):
		connection_id = self.pairs.get(pair_key(user_one, user_two))
		return self.rows.get(connection_id) if connection_id else None

	async def insert_pending(self, requester_id, recipient_id):
		key = pair_key(requester_id, recipient_id)
		if key in self.pairs:
			raise Conflict("Connection already exists")
		now = tick()
		conn = Connection(
			id=uuid4(),
			requester_id=requester_id,
			recipient_id=recipient_id,
			status=ConnectionStatus.PENDING,
			created_at=now,
			updated_at=now,
		)
		self.rows[conn.id] = conn
		self.pairs[key] = conn.id
		return conn

	async def reopen_rejected(self, connection_id, requester_id, recipient_id):
		conn = self.rows.get(connection_id)
		if conn is None or conn.status is not ConnectionStatus.REJECTED:
			return None
		updated = replace(
			conn,
			requester_id=requester_id,
			recipient_id=recipient_id,
			status=ConnectionStatus.PENDING,
			updated_at=tick(),
		)
		self.rows[connection_id] = updated
		return updated

	async def transition(self, connection_id, from_status, to_status):
		conn = self.rows.get(connection_id)
		if conn is None or conn.status is not from_status:
			return None
		updated = replace(conn, status=to_status, updated_at=tick())
		self.rows[connection_id] = updated
		return updated

	async def delete(self, connection_id):
		conn = self.rows.pop(connection_id, None)
		if conn is None:
			return False
		self.pairs.pop(pair_key(conn.requester_id, conn.recipient_id), None)
		return True

	async def list_accepted(self, user_id):
		items = [c for c in self.rows.values() if c.involves(user_id) and c.status is ConnectionStatus.ACCEPTED]
		return sorted(items, key=lambda c: c.updated_at, reverse=True)

	async def list_pending_received(self, user_id):
		items = [c for c in self.rows.values() if c.recipient_id == user_id and c.status is ConnectionStatus.PENDING]
		return sorted(items, key=lambda c: c.created_at, reverse=True)


class InMemoryPosts:
	def __init__(self) -> None:
		self.posts: dict[UUID, Post] = {}
		self.likes: set[tuple[UUID, UUID]] = set()
		self.comments: list[Comment] = []

	async def create_post(
		self,
		*,
		author_id,
		content,
		category="general",
		privacy=PostPrivacy.PUBLIC,
		image_urls=(),
		feeling=None,
		tags=(),
		event_details=None,
		shared_post_id=None,
	):
		now = tick()
		post = Post(
			id=uuid4(),
			author_id=author_id,
			content=content,
			category=category,
			privacy=privacy,
			created_at=now,
			updated_at=now,
			image_urls=list(image_urls),
			feeling=feeling,
			tags=list(tags),
			event_details=dict(event_details) if event_details else None,
			shared_post_id=shared_post_id,
		)
		self.posts[post.id] = post
		return post

	async def get_post(self, post_id):
		return self.posts.get(post_id)

	async def get_posts(self, post_ids):
		return {pid: self.posts[pid] for pid in set(post_ids) if pid in self.posts}

	async def list_public(self, limit):
		items = [p for p in self.posts.values() if p.privacy is PostPrivacy.PUBLIC]
		return sorted(items, key=lambda p: p.created_at, reverse=True)[:limit]

	async def increment_counter(self, post_id, field, delta):
		column = CounterField(field).value
		post = self.posts.get(post_id)
		if post is None:
			return False
		setattr(post, column, max(getattr(post, column) + delta, 0))
		return True

	async def insert_like(self, post_id, user_id):
		if (post_id, user_id) in self.likes:
			raise Conflict("Already liked")
		self.likes.add((post_id, user_id))

	async def delete_like(self, post_id, user_id):
		if (post_id, user_id) not in self.likes:
			return False
		self.likes.discard((post_id, user_id))
		return True

	async def liked_post_ids(self, user_id, post_ids):
		wanted = set(post_ids)
		return {pid for pid, uid in self.likes if uid == user_id and pid in wanted}

	async def delete_post(self, post_id):
		if self.posts.pop(post_id, None) is None:
			return False
		self.likes = {(pid, uid) for pid, uid in self.likes if pid != post_id}
		return True

	async def create_comment(self, post_id, user_id, content):
		comment = Comment(id=uuid4(), post_id=post_id, user_id=user_id, content=content, created_at=tick())
		self.comments.append(comment)
		return comment

	async def list_comments(self, post_id):
		return sorted((c for c in self.comments if c.post_id == post_id), key=lambda c: c.created_at)


class InMemoryMessages:
	def __init__(self) -> None:
		self.rows: list[Message] = []
		self._ids = itertools.count(1)

	async def insert(self, sender_id, receiver_id, content):
		message = Message(
			id=f"msg-{next(self._ids):04d}",
			conversation_id=ConversationKey.from_participants(sender_id, receiver_id).conversation_id,
			sender_id=sender_id,
			receiver_id=receiver_id,
			content=content,
			read=False,
			read_at=None,
			created_at=tick(),
		)
		self.rows.append(message)
		return message

	async def get(self, message_id):
		return next((m for m in self.rows if m.id == message_id), None)

	async def mark_read_from(self, receiver_id, sender_id):
		count = 0
		for message in self.rows:
			if message.sender_id == sender_id and message.receiver_id == receiver_id and not message.read:
				message.read = True
				message.read_at = tick()
				count += 1
		return count

	async def read_conversation(self, viewer_id, other_user_id):
		marked = await self.mark_read_from(viewer_id, other_user_id)
		key = ConversationKey.from_participants(viewer_id, other_user_id).conversation_id
		items = sorted((m for m in self.rows if m.conversation_id == key), key=lambda m: (m.created_at, m.id))
		return items, marked

	async def list_for_user(self, user_id):
		items = [m for m in self.rows if m.is_participant(user_id)]
		return sorted(items, key=lambda m: (m.created_at, m.id), reverse=True)

	async def count_unread_from(self, receiver_id, sender_id):
		return sum(
			1 for m in self.rows if m.sender_id == sender_id and m.receiver_id == receiver_id and not m.read
		)

	async def unread_count(self, receiver_id):
		return sum(1 for m in self.rows if m.receiver_id == receiver_id and not m.read)

	async def delete(self, message_id):
		before = len(self.rows)
		self.rows = [m for m in self.rows if m.id != message_id]
		return len(self.rows) < before


@pytest.fixture
def users():
	return InMemoryUsers()


@pytest.fixture
def notification_repo():
	return InMemoryNotifications()


@pytest.fixture
def notification_service(notification_repo, users):
	from app.domain.social.notifications import NotificationService

	return NotificationService(repository=notification_repo, users=users)


@pytest.fixture
def connection_service(notification_service, users):
	from app.domain.social.service import ConnectionService

	return ConnectionService(repository=InMemoryConnections(), users=users, notifications=notification_service)


@pytest.fixture
def post_repo():
	return InMemoryPosts()


@pytest.fixture
def feed_service(post_repo, notification_service, users):
	from app.domain.feed.service import FeedService

	return FeedService(repository=post_repo, users=users, notifications=notification_service)


@pytest.fixture
def message_repo():
	return InMemoryMessages()


@pytest.fixture
def conversation_service(message_repo, notification_service, users):
	from app.domain.chat.service import ConversationService

	return ConversationService(repository=message_repo, users=users, notifications=notification_service)
