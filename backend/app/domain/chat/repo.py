from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

import ulid

from app.domain.chat.models import ConversationKey, Message
from app.infra.postgres import affected_rows, get_pool

_MARK_READ_SQL = """
UPDATE messages
SET read = TRUE, read_at = $3
WHERE sender_id = $1 AND receiver_id = $2 AND read = FALSE
"""


class MessageRepository:
	async def insert(self, sender_id: UUID, receiver_id: UUID, content: str) -> Message:
		key = ConversationKey.from_participants(sender_id, receiver_id)
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO messages (id, conversation_id, sender_id, receiver_id, content, read, created_at)
				VALUES ($1, $2, $3, $4, $5, FALSE, $6)
				RETURNING *
				""",
				str(ulid.new()),
				key.conversation_id,
				sender_id,
				receiver_id,
				content,
				datetime.now(timezone.utc),
			)
		return Message.from_record(dict(row))

	async def get(self, message_id: str) -> Optional[Message]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow("SELECT * FROM messages WHERE id = $1", message_id)
		return Message.from_record(dict(row)) if row else None

	async def read_conversation(self, viewer_id: UUID, other_user_id: UUID) -> Tuple[List[Message], int]:
		"""Mark the other user's messages to the viewer read, then return the pair oldest first.

		Both statements share one transaction so the returned rows already carry
		the read state; calling twice yields the same list.
		"""
		key = ConversationKey.from_participants(viewer_id, other_user_id)
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				status = await conn.execute(_MARK_READ_SQL, other_user_id, viewer_id, datetime.now(timezone.utc))
				rows = await conn.fetch(
					"""
					SELECT * FROM messages
					WHERE conversation_id = $1
					ORDER BY created_at ASC, id ASC
					""",
					key.conversation_id,
				)
		return [Message.from_record(dict(row)) for row in rows], affected_rows(status)

	async def list_for_user(self, user_id: UUID) -> List[Message]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM messages
				WHERE sender_id = $1 OR receiver_id = $1
				ORDER BY created_at DESC, id DESC
				""",
				user_id,
			)
		return [Message.from_record(dict(row)) for row in rows]

	async def count_unread_from(self, receiver_id: UUID, sender_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			value = await conn.fetchval(
				"SELECT COUNT(*) FROM messages WHERE sender_id = $1 AND receiver_id = $2 AND read = FALSE",
				sender_id,
				receiver_id,
			)
		return int(value or 0)

	async def mark_read_from(self, receiver_id: UUID, sender_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(_MARK_READ_SQL, sender_id, receiver_id, datetime.now(timezone.utc))
		return affected_rows(status)

	async def unread_count(self, receiver_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			value = await conn.fetchval(
				"SELECT COUNT(*) FROM messages WHERE receiver_id = $1 AND read = FALSE",
				receiver_id,
			)
		return int(value or 0)

	async def delete(self, message_id: str) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute("DELETE FROM messages WHERE id = $1", message_id)
		return affected_rows(status) > 0
