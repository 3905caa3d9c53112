"""Connection graph lifecycle: request, accept, reject, remove and views."""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from app.domain.common.exceptions import Conflict, FailedPrecondition, NotFound
from app.domain.identity.users import UserRepository
from app.domain.social import audit, policy
from app.domain.social.models import Connection, ConnectionStatus, NotificationType, ReferenceType
from app.domain.social.notifications import NotificationService
from app.domain.social.repo import ConnectionRepository
from app.domain.social.schemas import (
	ConnectedUser,
	ConnectionStatusResponse,
	ConnectionSummary,
	PendingRequest,
)

logger = logging.getLogger(__name__)


def _summary(connection: Connection) -> ConnectionSummary:
	return ConnectionSummary(
		id=connection.id,
		requester_id=connection.requester_id,
		recipient_id=connection.recipient_id,
		status=connection.status.value,
		created_at=connection.created_at,
		updated_at=connection.updated_at,
	)


class ConnectionService:
	def __init__(
		self,
		*,
		repository: ConnectionRepository | None = None,
		users: UserRepository | None = None,
		notifications: NotificationService | None = None,
	) -> None:
		self._repo = repository or ConnectionRepository()
		self._users = users or UserRepository()
		self._notifications = notifications or NotificationService(users=self._users)

	async def send_request(self, requester_id: UUID, recipient_id: UUID) -> ConnectionSummary:
		policy.guard_not_self(requester_id, recipient_id)
		if not await self._users.exists(recipient_id):
			raise NotFound("User not found")

		existing = await self._repo.get_for_pair(requester_id, recipient_id)
		if existing is None:
			connection = await self._repo.insert_pending(requester_id, recipient_id)
			event = "request"
		else:
			policy.guard_open_for_request(existing)
			reopened = await self._repo.reopen_rejected(existing.id, requester_id, recipient_id)
			if reopened is None:
				raise Conflict("Connection request already exists")
			connection = reopened
			event = "request_reopened"

		logger.info("connection_requested", extra={"connection_id": str(connection.id), "reopened": event != "request"})

		await audit.log_connection_event(
			event,
			{"connection_id": str(connection.id), "requester_id": str(requester_id), "recipient_id": str(recipient_id)},
		)
		await self._notifications.notify(
			recipient_id,
			requester_id,
			NotificationType.CONNECTION_REQUEST,
			"sent you a connection request",
			reference_id=str(connection.id),
			reference_type=ReferenceType.CONNECTION,
		)
		return _summary(connection)

	async def _respond(self, connection_id: UUID, acting_user_id: UUID, to_status: ConnectionStatus) -> Connection:
		connection = policy.require_found(await self._repo.get(connection_id))
		policy.guard_recipient(connection, acting_user_id)
		policy.guard_pending(connection)
		updated = await self._repo.transition(connection.id, ConnectionStatus.PENDING, to_status)
		if updated is None:
			# another response won the race
			raise FailedPrecondition("Connection request is not pending")
		await audit.log_connection_event(
			to_status.value,
			{"connection_id": str(updated.id), "acting_user_id": str(acting_user_id)},
		)
		return updated

	async def accept(self, connection_id: UUID, acting_user_id: UUID) -> ConnectionSummary:
		connection = await self._respond(connection_id, acting_user_id, ConnectionStatus.ACCEPTED)
		await self._notifications.notify(
			connection.requester_id,
			acting_user_id,
			NotificationType.CONNECTION_ACCEPT,
			"accepted your connection request",
			reference_id=str(connection.id),
			reference_type=ReferenceType.CONNECTION,
		)
		return _summary(connection)

	async def reject(self, connection_id: UUID, acting_user_id: UUID) -> ConnectionSummary:
		connection = await self._respond(connection_id, acting_user_id, ConnectionStatus.REJECTED)
		return _summary(connection)

	async def remove(self, connection_id: UUID, acting_user_id: UUID) -> None:
		connection = policy.require_found(await self._repo.get(connection_id))
		policy.guard_participant(connection, acting_user_id)
		if not await self._repo.delete(connection.id):
			raise NotFound("Connection not found")
		await audit.log_connection_event(
			"removed",
			{"connection_id": str(connection.id), "acting_user_id": str(acting_user_id)},
		)

	async def get_status(self, user_id: UUID, other_user_id: UUID) -> ConnectionStatusResponse:
		if user_id == other_user_id:
			return ConnectionStatusResponse(status="self")
		connection = await self._repo.get_for_pair(user_id, other_user_id)
		if connection is None:
			return ConnectionStatusResponse(status="none")
		return ConnectionStatusResponse(
			status=connection.status.value,
			connection_id=connection.id,
			is_requester=connection.requester_id == user_id,
		)

	async def list_accepted(self, user_id: UUID) -> List[ConnectedUser]:
		connections = await self._repo.list_accepted(user_id)
		users = await self._users.get_users(c.other_party(user_id) for c in connections)
		return [
			ConnectedUser(
				connection_id=c.id,
				user=users.get(c.other_party(user_id)),
				connected_at=c.updated_at,
			)
			for c in connections
		]

	async def list_pending_received(self, user_id: UUID) -> List[PendingRequest]:
		connections = await self._repo.list_pending_received(user_id)
		users = await self._users.get_users(c.requester_id for c in connections)
		return [
			PendingRequest(
				connection_id=c.id,
				user=users.get(c.requester_id),
				requested_at=c.created_at,
			)
			for c in connections
		]
