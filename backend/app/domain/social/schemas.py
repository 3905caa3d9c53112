"""Pydantic schemas for connections and notifications."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.identity.users import UserSummary


class ConnectionSendRequest(BaseModel):
	recipient_id: UUID = Field(..., description="User receiving the connection request")


class ConnectionActionRequest(BaseModel):
	connection_id: UUID


class ConnectionSummary(BaseModel):
	id: UUID
	requester_id: UUID
	recipient_id: UUID
	status: Literal["pending", "accepted", "rejected"]
	created_at: datetime
	updated_at: datetime


class ConnectionResponse(BaseModel):
	success: bool = True
	connection: ConnectionSummary


class ConnectedUser(BaseModel):
	connection_id: UUID
	user: Optional[UserSummary] = None
	connected_at: datetime


class PendingRequest(BaseModel):
	connection_id: UUID
	user: Optional[UserSummary] = None
	requested_at: datetime


class ConnectionListResponse(BaseModel):
	connections: List[ConnectedUser]


class PendingListResponse(BaseModel):
	requests: List[PendingRequest]


class ConnectionStatusResponse(BaseModel):
	status: Literal["self", "none", "pending", "accepted", "rejected"]
	connection_id: Optional[UUID] = None
	is_requester: Optional[bool] = None


class SuccessResponse(BaseModel):
	success: bool = True
	message: Optional[str] = None


class NotificationSender(BaseModel):
	id: UUID
	full_name: Optional[str] = None
	email: Optional[str] = None
	avatar_url: Optional[str] = None


class NotificationResponse(BaseModel):
	id: UUID
	type: Literal["like", "comment", "message", "connection_request", "connection_accept"]
	message: str
	read: bool
	read_at: Optional[datetime] = None
	created_at: datetime
	sender: NotificationSender
	reference_id: Optional[str] = None
	reference_type: Optional[Literal["Post", "Comment", "Message", "Connection"]] = None


class NotificationListResponse(BaseModel):
	notifications: List[NotificationResponse]


class NotificationReadResponse(BaseModel):
	message: str = "Notification marked as read"
	notification: NotificationResponse


class MarkAllReadResponse(BaseModel):
	message: str = "All notifications marked as read"
	marked_count: int


class UnreadCountResponse(BaseModel):
	unread_count: int
