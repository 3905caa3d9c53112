"""Persistence for connection records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from asyncpg.exceptions import UniqueViolationError

from app.domain.common.exceptions import Conflict
from app.domain.social.models import Connection, ConnectionStatus, pair_key
from app.infra.postgres import affected_rows, get_pool


class ConnectionRepository:
	async def get(self, connection_id: UUID) -> Optional[Connection]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow("SELECT * FROM connections WHERE id = $1", connection_id)
		return Connection.from_record(dict(row)) if row else None

	async def get_for_pair(self, user_one: UUID, user_two: UUID) -> Optional[Connection]:
		low, high = pair_key(user_one, user_two)
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"SELECT * FROM connections WHERE user_low = $1 AND user_high = $2",
				low,
				high,
			)
		return Connection.from_record(dict(row)) if row else None

	async def insert_pending(self, requester_id: UUID, recipient_id: UUID) -> Connection:
		low, high = pair_key(requester_id, recipient_id)
		now = datetime.now(timezone.utc)
		pool = await get_pool()
		async with pool.acquire() as conn:
			try:
				row = await conn.fetchrow(
					"""
					INSERT INTO connections (id, requester_id, recipient_id, user_low, user_high, status, created_at, updated_at)
					VALUES ($1, $2, $3, $4, $5, 'pending', $6, $6)
					RETURNING *
					""",
					uuid4(),
					requester_id,
					recipient_id,
					low,
					high,
					now,
				)
			except UniqueViolationError as exc:
				raise Conflict("Connection already exists") from exc
		return Connection.from_record(dict(row))

	async def reopen_rejected(self, connection_id: UUID, requester_id: UUID, recipient_id: UUID) -> Optional[Connection]:
		"""Flip a rejected record back to pending with the new direction.

		Returns ``None`` when the record is no longer ``rejected`` (a concurrent
		request already reopened it).
		"""
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				UPDATE connections
				SET requester_id = $2, recipient_id = $3, status = 'pending', updated_at = $4
				WHERE id = $1 AND status = 'rejected'
				RETURNING *
				""",
				connection_id,
				requester_id,
				recipient_id,
				datetime.now(timezone.utc),
			)
		return Connection.from_record(dict(row)) if row else None

	async def transition(
		self,
		connection_id: UUID,
		from_status: ConnectionStatus,
		to_status: ConnectionStatus,
	) -> Optional[Connection]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				UPDATE connections
				SET status = $3, updated_at = $4
				WHERE id = $1 AND status = $2
				RETURNING *
				""",
				connection_id,
				from_status.value,
				to_status.value,
				datetime.now(timezone.utc),
			)
		return Connection.from_record(dict(row)) if row else None

	async def delete(self, connection_id: UUID) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute("DELETE FROM connections WHERE id = $1", connection_id)
		return affected_rows(status) > 0

	async def list_accepted(self, user_id: UUID) -> List[Connection]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM connections
				WHERE (requester_id = $1 OR recipient_id = $1) AND status = 'accepted'
				ORDER BY updated_at DESC
				""",
				user_id,
			)
		return [Connection.from_record(dict(row)) for row in rows]

	async def list_pending_received(self, user_id: UUID) -> List[Connection]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM connections
				WHERE recipient_id = $1 AND status = 'pending'
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [Connection.from_record(dict(row)) for row in rows]
