"""Pydantic schemas for the direct message API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.identity.users import UserSummary

from .models import Message


class SendMessageRequest(BaseModel):
	receiver_id: UUID = Field(..., description="Target user identifier")
	content: str = Field(default="", description="Message body; trimmed before storing")


class MarkReadRequest(BaseModel):
	sender_id: UUID


class MessageResponse(BaseModel):
	id: str = Field(..., examples=["01HZY5AJ6HT7PM1F8M3X2W8Z9V"])
	conversation_id: str
	sender_id: UUID
	sender_name: Optional[str] = None
	sender_avatar: Optional[str] = None
	receiver_id: UUID
	content: str
	read: bool
	read_at: Optional[datetime] = None
	created_at: datetime
	is_own: bool

	@classmethod
	def from_model(cls, message: Message, *, viewer_id: UUID, sender: UserSummary | None = None) -> "MessageResponse":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			sender_name=sender.full_name if sender else None,
			sender_avatar=sender.avatar_url if sender else None,
			receiver_id=message.receiver_id,
			content=message.content,
			read=message.read,
			read_at=message.read_at,
			created_at=message.created_at,
			is_own=message.sender_id == viewer_id,
		)


class SendMessageResponse(BaseModel):
	message: MessageResponse


class ConversationResponse(BaseModel):
	messages: List[MessageResponse]
	other_user: UserSummary


class LastMessage(BaseModel):
	content: str
	created_at: datetime
	is_own: bool
	read: bool


class ConversationSummary(BaseModel):
	user: UserSummary
	last_message: LastMessage
	unread_count: int


class ConversationListResponse(BaseModel):
	conversations: List[ConversationSummary]


class MarkReadResponse(BaseModel):
	success: bool = True
	marked_count: int


class UnreadCountResponse(BaseModel):
	unread_count: int
