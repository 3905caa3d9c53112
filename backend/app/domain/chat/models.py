"""Domain models for direct messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(slots=True)
class ConversationKey:
	"""Canonical representation of a 1:1 conversation."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: UUID | str, user_two: UUID | str) -> "ConversationKey":
		ordered = tuple(sorted((str(user_one), str(user_two))))
		return cls(user_a=ordered[0], user_b=ordered[1])

	@property
	def conversation_id(self) -> str:
		return f"chat:{self.user_a}:{self.user_b}"


@dataclass(slots=True)
class Message:
	id: str
	conversation_id: str
	sender_id: UUID
	receiver_id: UUID
	content: str
	read: bool
	read_at: Optional[datetime]
	created_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Message":
		return cls(
			id=str(record["id"]),
			conversation_id=str(record["conversation_id"]),
			sender_id=UUID(str(record["sender_id"])),
			receiver_id=UUID(str(record["receiver_id"])),
			content=record["content"],
			read=bool(record["read"]),
			read_at=record.get("read_at"),
			created_at=record["created_at"],
		)

	def is_participant(self, user_id: UUID) -> bool:
		return user_id in (self.sender_id, self.receiver_id)

	def partner_of(self, user_id: UUID) -> UUID:
		return self.receiver_id if self.sender_id == user_id else self.sender_id
