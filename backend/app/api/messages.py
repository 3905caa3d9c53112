"""Direct message endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.errors import to_http_error
from app.domain.chat.schemas import (
	ConversationListResponse,
	ConversationResponse,
	MarkReadRequest,
	MarkReadResponse,
	SendMessageRequest,
	SendMessageResponse,
	UnreadCountResponse,
)
from app.domain.chat.service import ConversationService
from app.domain.common.exceptions import DomainError
from app.domain.social.schemas import SuccessResponse
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/messages", tags=["messages"])

_service = ConversationService()


@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SendMessageResponse:
	try:
		message = await _service.send_message(auth_user.uuid, payload.receiver_id, payload.content)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return SendMessageResponse(message=message)


@router.get("/conversation/{other_user_id}", response_model=ConversationResponse)
async def get_conversation(
	other_user_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConversationResponse:
	try:
		messages, other_user = await _service.get_conversation(auth_user.uuid, other_user_id)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return ConversationResponse(messages=messages, other_user=other_user)


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(auth_user: AuthenticatedUser = Depends(get_current_user)) -> ConversationListResponse:
	return ConversationListResponse(conversations=await _service.list_conversations(auth_user.uuid))


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
	payload: MarkReadRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MarkReadResponse:
	return MarkReadResponse(marked_count=await _service.mark_read(auth_user.uuid, payload.sender_id))


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(auth_user: AuthenticatedUser = Depends(get_current_user)) -> UnreadCountResponse:
	return UnreadCountResponse(unread_count=await _service.unread_count(auth_user.uuid))


@router.delete("/{message_id}", response_model=SuccessResponse)
async def delete_message(
	message_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
	try:
		await _service.delete_message(message_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return SuccessResponse(message="Message deleted")
