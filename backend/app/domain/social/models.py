"""Domain models for the connection graph and notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID


class ConnectionStatus(str, Enum):
	"""Persisted connection states."""

	PENDING = "pending"
	ACCEPTED = "accepted"
	REJECTED = "rejected"


class NotificationType(str, Enum):
	LIKE = "like"
	COMMENT = "comment"
	MESSAGE = "message"
	CONNECTION_REQUEST = "connection_request"
	CONNECTION_ACCEPT = "connection_accept"


class ReferenceType(str, Enum):
	POST = "Post"
	COMMENT = "Comment"
	MESSAGE = "Message"
	CONNECTION = "Connection"


def pair_key(user_one: UUID, user_two: UUID) -> Tuple[UUID, UUID]:
	"""Normalised unordered pair used for uniqueness and lookups."""
	ordered = sorted((UUID(str(user_one)), UUID(str(user_two))), key=str)
	return ordered[0], ordered[1]


@dataclass(slots=True)
class Connection:
	"""Relationship record between two users; at most one per unordered pair."""

	id: UUID
	requester_id: UUID
	recipient_id: UUID
	status: ConnectionStatus
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Connection":
		return cls(
			id=UUID(str(record["id"])),
			requester_id=UUID(str(record["requester_id"])),
			recipient_id=UUID(str(record["recipient_id"])),
			status=ConnectionStatus(record["status"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)

	def involves(self, user_id: UUID) -> bool:
		return user_id in (self.requester_id, self.recipient_id)

	def other_party(self, user_id: UUID) -> UUID:
		return self.recipient_id if user_id == self.requester_id else self.requester_id


@dataclass(slots=True)
class Notification:
	id: UUID
	recipient_id: UUID
	sender_id: UUID
	type: NotificationType
	message: str
	reference_id: Optional[str]
	reference_type: Optional[ReferenceType]
	read: bool
	read_at: Optional[datetime]
	created_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Notification":
		reference_type = record.get("reference_type")
		return cls(
			id=UUID(str(record["id"])),
			recipient_id=UUID(str(record["recipient_id"])),
			sender_id=UUID(str(record["sender_id"])),
			type=NotificationType(record["type"]),
			message=record["message"],
			reference_id=record.get("reference_id"),
			reference_type=ReferenceType(reference_type) if reference_type else None,
			read=bool(record["read"]),
			read_at=record.get("read_at"),
			created_at=record["created_at"],
		)
