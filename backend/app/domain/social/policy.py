"""Guard checks for the connection lifecycle."""

from __future__ import annotations

from uuid import UUID

from app.domain.common.exceptions import Conflict, FailedPrecondition, Forbidden, InvalidArgument, NotFound
from app.domain.social.models import Connection, ConnectionStatus


def guard_not_self(user_id: UUID, target_id: UUID) -> None:
	if str(user_id) == str(target_id):
		raise InvalidArgument("Cannot send connection request to yourself")


def require_found(connection: Connection | None) -> Connection:
	if connection is None:
		raise NotFound("Connection request not found")
	return connection


def guard_recipient(connection: Connection, acting_user_id: UUID) -> None:
	if connection.recipient_id != acting_user_id:
		raise Forbidden("Not authorized to respond to this request")


def guard_participant(connection: Connection, acting_user_id: UUID) -> None:
	if not connection.involves(acting_user_id):
		raise Forbidden("Not authorized to remove this connection")


def guard_pending(connection: Connection) -> None:
	if connection.status is not ConnectionStatus.PENDING:
		raise FailedPrecondition("Connection request is not pending")


def guard_open_for_request(existing: Connection) -> None:
	"""Reject a new request when the pair already has a live record."""
	if existing.status is ConnectionStatus.ACCEPTED:
		raise Conflict("Already connected")
	if existing.status is ConnectionStatus.PENDING:
		raise Conflict("Connection request already exists")
