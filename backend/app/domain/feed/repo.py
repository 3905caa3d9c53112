"""Persistence for posts, likes and comments."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence
from uuid import UUID, uuid4

from asyncpg.exceptions import UniqueViolationError

from app.domain.common.exceptions import Conflict
from app.domain.feed.models import Comment, CounterField, Post, PostPrivacy
from app.infra.postgres import affected_rows, get_pool


class PostRepository:
	async def create_post(
		self,
		*,
		author_id: UUID,
		content: str,
		category: str = "general",
		privacy: PostPrivacy = PostPrivacy.PUBLIC,
		image_urls: Sequence[str] = (),
		feeling: Optional[str] = None,
		tags: Sequence[str] = (),
		event_details: Optional[Mapping[str, Optional[str]]] = None,
		shared_post_id: Optional[UUID] = None,
	) -> Post:
		now = datetime.now(timezone.utc)
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO posts (
					id, author_id, content, category, privacy, image_urls, feeling, tags,
					event_details, shared_post_id, created_at, updated_at
				)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb, $10, $11, $11)
				RETURNING *
				""",
				uuid4(),
				author_id,
				content,
				category,
				privacy.value,
				list(image_urls),
				feeling,
				list(tags),
				json.dumps(dict(event_details)) if event_details else None,
				shared_post_id,
				now,
			)
		return Post.from_record(dict(row))

	async def get_post(self, post_id: UUID) -> Optional[Post]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow("SELECT * FROM posts WHERE id = $1", post_id)
		return Post.from_record(dict(row)) if row else None

	async def get_posts(self, post_ids: Iterable[UUID]) -> dict[UUID, Post]:
		unique_ids = list({pid for pid in post_ids if pid is not None})
		if not unique_ids:
			return {}
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch("SELECT * FROM posts WHERE id = ANY($1::uuid[])", unique_ids)
		posts = [Post.from_record(dict(row)) for row in rows]
		return {post.id: post for post in posts}

	async def list_public(self, limit: int) -> List[Post]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM posts
				WHERE privacy = 'public'
				ORDER BY created_at DESC
				LIMIT $1
				""",
				limit,
			)
		return [Post.from_record(dict(row)) for row in rows]

	async def increment_counter(self, post_id: UUID, field: CounterField, delta: int) -> bool:
		"""Atomically add ``delta`` to a post counter, never dropping below zero."""
		# raises ValueError for anything but the three counter columns
		column = CounterField(field).value
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				f"UPDATE posts SET {column} = GREATEST({column} + $2, 0) WHERE id = $1",
				post_id,
				delta,
			)
		return affected_rows(status) > 0

	async def insert_like(self, post_id: UUID, user_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			try:
				await conn.execute(
					"INSERT INTO likes (id, post_id, user_id, created_at) VALUES ($1, $2, $3, $4)",
					uuid4(),
					post_id,
					user_id,
					datetime.now(timezone.utc),
				)
			except UniqueViolationError as exc:
				raise Conflict("Already liked") from exc

	async def delete_like(self, post_id: UUID, user_id: UUID) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				"DELETE FROM likes WHERE post_id = $1 AND user_id = $2",
				post_id,
				user_id,
			)
		return affected_rows(status) > 0

	async def liked_post_ids(self, user_id: UUID, post_ids: Iterable[UUID]) -> set[UUID]:
		ids = list(post_ids)
		if not ids:
			return set()
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"SELECT post_id FROM likes WHERE user_id = $1 AND post_id = ANY($2::uuid[])",
				user_id,
				ids,
			)
		return {UUID(str(row["post_id"])) for row in rows}

	async def delete_post(self, post_id: UUID) -> bool:
		"""Delete a post and its likes. Comments and shares referencing it stay."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				status = await conn.execute("DELETE FROM posts WHERE id = $1", post_id)
				await conn.execute("DELETE FROM likes WHERE post_id = $1", post_id)
		return affected_rows(status) > 0

	async def create_comment(self, post_id: UUID, user_id: UUID, content: str) -> Comment:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO comments (id, post_id, user_id, content, created_at)
				VALUES ($1, $2, $3, $4, $5)
				RETURNING *
				""",
				uuid4(),
				post_id,
				user_id,
				content,
				datetime.now(timezone.utc),
			)
		return Comment.from_record(dict(row))

	async def list_comments(self, post_id: UUID) -> List[Comment]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"SELECT * FROM comments WHERE post_id = $1 ORDER BY created_at ASC",
				post_id,
			)
		return [Comment.from_record(dict(row)) for row in rows]
