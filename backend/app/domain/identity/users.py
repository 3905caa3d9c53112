"""Read-only access to user display fields.

Accounts are owned by the identity service; the social core only checks that a
user exists and resolves the fields shown next to posts, messages and
notifications.
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID

import asyncpg
from pydantic import BaseModel

from app.infra.postgres import get_pool

_USER_COLUMNS = "id, full_name, email, avatar_url, department, title, batch"


class UserSummary(BaseModel):
	id: UUID
	full_name: Optional[str] = None
	email: Optional[str] = None
	avatar_url: Optional[str] = None
	department: Optional[str] = None
	title: Optional[str] = None
	batch: Optional[str] = None

	@property
	def display_name(self) -> str:
		return self.full_name or "User"

	@classmethod
	def from_record(cls, record: asyncpg.Record | dict) -> "UserSummary":
		return cls.model_validate(dict(record))


class UserRepository:
	async def get_user(self, user_id: UUID) -> UserSummary | None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			record = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1", user_id)
		return UserSummary.from_record(record) if record else None

	async def get_users(self, user_ids: Iterable[UUID]) -> dict[UUID, UserSummary]:
		unique_ids = list({uid for uid in user_ids if uid is not None})
		if not unique_ids:
			return {}
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::uuid[])",
				unique_ids,
			)
		return {row["id"]: UserSummary.from_record(row) for row in rows}

	async def exists(self, user_id: UUID) -> bool:
		return await self.get_user(user_id) is not None
