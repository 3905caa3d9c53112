"""Idempotent table bootstrap for the entity store.

``users`` is owned by the identity service; it is created here only so a fresh
database can serve the core. Uniqueness is enforced by the constraints below,
never by check-then-insert in application code.
"""

from __future__ import annotations

import asyncpg

SCHEMA_STATEMENTS: tuple[str, ...] = (
	"""
	CREATE TABLE IF NOT EXISTS users (
		id UUID PRIMARY KEY,
		email TEXT UNIQUE,
		full_name TEXT,
		avatar_url TEXT,
		department TEXT,
		title TEXT,
		batch TEXT,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS connections (
		id UUID PRIMARY KEY,
		requester_id UUID NOT NULL,
		recipient_id UUID NOT NULL,
		user_low UUID NOT NULL,
		user_high UUID NOT NULL,
		status TEXT NOT NULL CHECK (status IN ('pending', 'accepted', 'rejected')),
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		CONSTRAINT connections_pair_key UNIQUE (user_low, user_high)
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_connections_recipient_status ON connections (recipient_id, status)",
	"CREATE INDEX IF NOT EXISTS idx_connections_requester_status ON connections (requester_id, status)",
	"""
	CREATE TABLE IF NOT EXISTS posts (
		id UUID PRIMARY KEY,
		author_id UUID NOT NULL,
		content TEXT NOT NULL DEFAULT '',
		category TEXT NOT NULL DEFAULT 'general',
		privacy TEXT NOT NULL DEFAULT 'public' CHECK (privacy IN ('public', 'friends', 'private')),
		image_urls TEXT[] NOT NULL DEFAULT '{}',
		feeling TEXT,
		tags TEXT[] NOT NULL DEFAULT '{}',
		event_details JSONB,
		shared_post_id UUID,
		likes_count INTEGER NOT NULL DEFAULT 0,
		comments_count INTEGER NOT NULL DEFAULT 0,
		shares_count INTEGER NOT NULL DEFAULT 0,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_posts_privacy_created ON posts (privacy, created_at DESC)",
	"""
	CREATE TABLE IF NOT EXISTS likes (
		id UUID PRIMARY KEY,
		post_id UUID NOT NULL,
		user_id UUID NOT NULL,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		CONSTRAINT likes_post_user_key UNIQUE (post_id, user_id)
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_likes_user ON likes (user_id)",
	"""
	CREATE TABLE IF NOT EXISTS comments (
		id UUID PRIMARY KEY,
		post_id UUID NOT NULL,
		user_id UUID NOT NULL,
		content TEXT NOT NULL,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_comments_post_created ON comments (post_id, created_at)",
	"""
	CREATE TABLE IF NOT EXISTS messages (
		id TEXT PRIMARY KEY,
		conversation_id TEXT NOT NULL,
		sender_id UUID NOT NULL,
		receiver_id UUID NOT NULL,
		content TEXT NOT NULL,
		read BOOLEAN NOT NULL DEFAULT FALSE,
		read_at TIMESTAMPTZ,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_messages_conversation_created ON messages (conversation_id, created_at)",
	"CREATE INDEX IF NOT EXISTS idx_messages_receiver_unread ON messages (receiver_id, read)",
	"CREATE INDEX IF NOT EXISTS idx_messages_sender ON messages (sender_id, created_at DESC)",
	"""
	CREATE TABLE IF NOT EXISTS notifications (
		id UUID PRIMARY KEY,
		recipient_id UUID NOT NULL,
		sender_id UUID NOT NULL,
		type TEXT NOT NULL CHECK (type IN ('like', 'comment', 'message', 'connection_request', 'connection_accept')),
		message TEXT NOT NULL,
		reference_id TEXT,
		reference_type TEXT CHECK (reference_type IN ('Post', 'Comment', 'Message', 'Connection')),
		read BOOLEAN NOT NULL DEFAULT FALSE,
		read_at TIMESTAMPTZ,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS idx_notifications_recipient_created ON notifications (recipient_id, created_at DESC)",
	"CREATE INDEX IF NOT EXISTS idx_notifications_recipient_unread ON notifications (recipient_id, read)",
)


async def ensure_schema(pool: asyncpg.pool.Pool) -> None:
	async with pool.acquire() as conn:
		async with conn.transaction():
			for statement in SCHEMA_STATEMENTS:
				await conn.execute(statement)
