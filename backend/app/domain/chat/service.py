"""Direct messages and the conversation views built from them."""

from __future__ import annotations

import logging
from typing import Dict, List
from uuid import UUID

from app.domain.chat.models import Message
from app.domain.chat.repo import MessageRepository
from app.domain.chat.schemas import ConversationSummary, LastMessage, MessageResponse
from app.domain.common.exceptions import Forbidden, InvalidArgument, NotFound
from app.domain.identity.users import UserRepository, UserSummary
from app.domain.social.models import NotificationType, ReferenceType
from app.domain.social.notifications import NotificationService
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)


def _clean_content(content: str | None) -> str:
	text = (content or "").strip()
	if not text:
		raise InvalidArgument("Message content cannot be empty")
	if len(text) > settings.message_max_length:
		raise InvalidArgument(f"Message content exceeds {settings.message_max_length} characters")
	return text


class ConversationService:
	def __init__(
		self,
		*,
		repository: MessageRepository | None = None,
		users: UserRepository | None = None,
		notifications: NotificationService | None = None,
	) -> None:
		self._repo = repository or MessageRepository()
		self._users = users or UserRepository()
		self._notifications = notifications or NotificationService(users=self._users)

	async def _require_user(self, user_id: UUID, detail: str) -> UserSummary:
		user = await self._users.get_user(user_id)
		if user is None:
			raise NotFound(detail)
		return user

	async def send_message(self, sender_id: UUID, receiver_id: UUID, content: str) -> MessageResponse:
		try:
			text = _clean_content(content)
		except InvalidArgument:
			obs_metrics.inc_message("rejected")
			raise
		await self._require_user(receiver_id, "Receiver not found")
		message = await self._repo.insert(sender_id, receiver_id, text)
		obs_metrics.inc_message("sent")
		await self._notifications.notify(
			receiver_id,
			sender_id,
			NotificationType.MESSAGE,
			"sent you a message",
			reference_id=message.id,
			reference_type=ReferenceType.MESSAGE,
		)
		sender = await self._users.get_user(sender_id)
		return MessageResponse.from_model(message, viewer_id=sender_id, sender=sender)

	async def get_conversation(self, viewer_id: UUID, other_user_id: UUID) -> tuple[List[MessageResponse], UserSummary]:
		other = await self._require_user(other_user_id, "User not found")
		messages, marked = await self._repo.read_conversation(viewer_id, other_user_id)
		obs_metrics.inc_read_receipts("message", marked)
		senders = await self._users.get_users([viewer_id, other_user_id])
		views = [
			MessageResponse.from_model(m, viewer_id=viewer_id, sender=senders.get(m.sender_id))
			for m in messages
		]
		return views, other

	async def list_conversations(self, viewer_id: UUID) -> List[ConversationSummary]:
		messages = await self._repo.list_for_user(viewer_id)
		latest: Dict[UUID, Message] = {}
		for message in messages:
			# newest first, so the first message seen per partner wins
			latest.setdefault(message.partner_of(viewer_id), message)

		partners = await self._users.get_users(latest.keys())
		summaries: List[ConversationSummary] = []
		for partner_id, message in latest.items():
			unread = await self._repo.count_unread_from(viewer_id, partner_id)
			summaries.append(
				ConversationSummary(
					user=partners.get(partner_id) or UserSummary(id=partner_id),
					last_message=LastMessage(
						content=message.content,
						created_at=message.created_at,
						is_own=message.sender_id == viewer_id,
						read=message.read,
					),
					unread_count=unread,
				)
			)
		return summaries

	async def mark_read(self, viewer_id: UUID, sender_id: UUID) -> int:
		marked = await self._repo.mark_read_from(viewer_id, sender_id)
		obs_metrics.inc_read_receipts("message", marked)
		return marked

	async def unread_count(self, viewer_id: UUID) -> int:
		return await self._repo.unread_count(viewer_id)

	async def delete_message(self, message_id: str, acting_user_id: UUID) -> None:
		message = await self._repo.get(message_id)
		if message is None:
			raise NotFound("Message not found")
		if message.sender_id != acting_user_id:
			raise Forbidden("You can only delete your own messages")
		await self._repo.delete(message.id)
		obs_metrics.inc_message("deleted")
		logger.info("message_deleted", extra={"message_id": message.id})
