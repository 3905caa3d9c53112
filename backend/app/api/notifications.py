"""Notification inbox endpoints."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.errors import to_http_error
from app.domain.common.exceptions import DomainError
from app.domain.social.notifications import NotificationService
from app.domain.social.schemas import (
	MarkAllReadResponse,
	NotificationListResponse,
	NotificationReadResponse,
	SuccessResponse,
	UnreadCountResponse,
)
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = NotificationService()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
	limit: Optional[int] = Query(default=None, ge=1),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationListResponse:
	items = await _service.get_my_notifications(auth_user.uuid, limit=limit)
	return NotificationListResponse(notifications=items)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(auth_user: AuthenticatedUser = Depends(get_current_user)) -> UnreadCountResponse:
	return UnreadCountResponse(unread_count=await _service.get_unread_count(auth_user.uuid))


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(auth_user: AuthenticatedUser = Depends(get_current_user)) -> MarkAllReadResponse:
	return MarkAllReadResponse(marked_count=await _service.mark_all_read(auth_user.uuid))


@router.post("/{notification_id}/read", response_model=NotificationReadResponse)
async def mark_read(
	notification_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationReadResponse:
	try:
		notification = await _service.mark_read(auth_user.uuid, notification_id)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return NotificationReadResponse(notification=notification)


@router.delete("/{notification_id}", response_model=SuccessResponse)
async def delete_notification(
	notification_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
	try:
		await _service.delete(auth_user.uuid, notification_id)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return SuccessResponse(message="Notification deleted")
