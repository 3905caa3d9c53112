"""Notification fan-out and read-state tracking.

``NotificationService.notify`` is the only way a notification row gets
written. It drops self-actions (recipient == sender) and otherwise persists
exactly one unread row per call: no batching, dedup or rate limiting, so N
likes from N users produce N notifications.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from app.domain.common.exceptions import NotFound
from app.domain.identity.users import UserRepository, UserSummary
from app.domain.social.models import Notification, NotificationType, ReferenceType
from app.domain.social.schemas import NotificationResponse, NotificationSender
from app.infra.postgres import affected_rows, get_pool
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)


class NotificationRepository:
	async def create(
		self,
		*,
		recipient_id: UUID,
		sender_id: UUID,
		type: NotificationType,
		message: str,
		reference_id: Optional[str] = None,
		reference_type: Optional[ReferenceType] = None,
	) -> Notification:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO notifications (id, recipient_id, sender_id, type, message, reference_id, reference_type, created_at)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
				RETURNING *
				""",
				uuid4(),
				recipient_id,
				sender_id,
				type.value,
				message,
				reference_id,
				reference_type.value if reference_type else None,
				datetime.now(timezone.utc),
			)
		return Notification.from_record(dict(row))

	async def list_for_user(self, user_id: UUID, limit: int = 50) -> List[Notification]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM notifications
				WHERE recipient_id = $1
				ORDER BY created_at DESC
				LIMIT $2
				""",
				user_id,
				limit,
			)
		return [Notification.from_record(dict(row)) for row in rows]

	async def mark_read(self, user_id: UUID, notification_id: UUID) -> Notification | None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				UPDATE notifications
				SET read = TRUE, read_at = COALESCE(read_at, $3)
				WHERE id = $1 AND recipient_id = $2
				RETURNING *
				""",
				notification_id,
				user_id,
				datetime.now(timezone.utc),
			)
		return Notification.from_record(dict(row)) if row else None

	async def mark_all_read(self, user_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				"""
				UPDATE notifications
				SET read = TRUE, read_at = $2
				WHERE recipient_id = $1 AND read = FALSE
				""",
				user_id,
				datetime.now(timezone.utc),
			)
		return affected_rows(status)

	async def delete(self, user_id: UUID, notification_id: UUID) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				"DELETE FROM notifications WHERE id = $1 AND recipient_id = $2",
				notification_id,
				user_id,
			)
		return affected_rows(status) > 0

	async def unread_count(self, user_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			value = await conn.fetchval(
				"SELECT COUNT(*) FROM notifications WHERE recipient_id = $1 AND read = FALSE",
				user_id,
			)
		return int(value or 0)


def _sender_view(sender_id: UUID, user: UserSummary | None) -> NotificationSender:
	if user is None:
		return NotificationSender(id=sender_id)
	return NotificationSender(id=user.id, full_name=user.full_name, email=user.email, avatar_url=user.avatar_url)


class NotificationService:
	def __init__(
		self,
		*,
		repository: NotificationRepository | None = None,
		users: UserRepository | None = None,
	) -> None:
		self._repo = repository or NotificationRepository()
		self._users = users or UserRepository()

	async def notify(
		self,
		recipient_id: UUID,
		sender_id: UUID,
		type: NotificationType,
		message: str,
		reference_id: Optional[str] = None,
		reference_type: Optional[ReferenceType] = None,
	) -> Notification | None:
		if str(recipient_id) == str(sender_id):
			obs_metrics.inc_notification(type.value, "suppressed_self")
			return None
		notif = await self._repo.create(
			recipient_id=recipient_id,
			sender_id=sender_id,
			type=type,
			message=message,
			reference_id=reference_id,
			reference_type=reference_type,
		)
		obs_metrics.inc_notification(type.value, "created")
		logger.info(
			"notification_created",
			extra={"notification_id": str(notif.id), "type": type.value, "recipient_id": str(recipient_id)},
		)
		return notif

	async def to_response(self, notif: Notification) -> NotificationResponse:
		return _build_response(notif, await self._users.get_user(notif.sender_id))

	async def get_my_notifications(self, user_id: UUID, *, limit: int | None = None) -> List[NotificationResponse]:
		bounded = max(1, min(limit or settings.notifications_list_limit, settings.notifications_list_limit))
		items = await self._repo.list_for_user(user_id, limit=bounded)
		senders = await self._users.get_users(item.sender_id for item in items)
		return [_build_response(item, senders.get(item.sender_id)) for item in items]

	async def mark_read(self, user_id: UUID, notification_id: UUID) -> NotificationResponse:
		notif = await self._repo.mark_read(user_id, notification_id)
		if notif is None:
			raise NotFound("Notification not found")
		obs_metrics.inc_read_receipts("notification", 1)
		return await self.to_response(notif)

	async def mark_all_read(self, user_id: UUID) -> int:
		count = await self._repo.mark_all_read(user_id)
		obs_metrics.inc_read_receipts("notification", count)
		return count

	async def delete(self, user_id: UUID, notification_id: UUID) -> None:
		if not await self._repo.delete(user_id, notification_id):
			raise NotFound("Notification not found")

	async def get_unread_count(self, user_id: UUID) -> int:
		return await self._repo.unread_count(user_id)


def _build_response(notif: Notification, sender: UserSummary | None) -> NotificationResponse:
	return NotificationResponse(
		id=notif.id,
		type=notif.type.value,
		message=notif.message,
		read=notif.read,
		read_at=notif.read_at,
		created_at=notif.created_at,
		sender=_sender_view(notif.sender_id, sender),
		reference_id=notif.reference_id,
		reference_type=notif.reference_type.value if notif.reference_type else None,
	)
