"""REST API surface for the connection graph."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.errors import to_http_error
from app.domain.common.exceptions import DomainError
from app.domain.social.schemas import (
	ConnectionActionRequest,
	ConnectionListResponse,
	ConnectionResponse,
	ConnectionSendRequest,
	ConnectionStatusResponse,
	PendingListResponse,
	SuccessResponse,
)
from app.domain.social.service import ConnectionService
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/connections", tags=["connections"])

_service = ConnectionService()


@router.post("/send", response_model=ConnectionResponse)
async def send_request(
	payload: ConnectionSendRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConnectionResponse:
	try:
		connection = await _service.send_request(auth_user.uuid, payload.recipient_id)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return ConnectionResponse(connection=connection)


@router.post("/accept", response_model=ConnectionResponse)
async def accept_request(
	payload: ConnectionActionRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConnectionResponse:
	try:
		connection = await _service.accept(payload.connection_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return ConnectionResponse(connection=connection)


@router.post("/reject", response_model=ConnectionResponse)
async def reject_request(
	payload: ConnectionActionRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConnectionResponse:
	try:
		connection = await _service.reject(payload.connection_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return ConnectionResponse(connection=connection)


@router.post("/remove", response_model=SuccessResponse)
async def remove_connection(
	payload: ConnectionActionRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
	try:
		await _service.remove(payload.connection_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return SuccessResponse(message="Connection removed")


@router.get("", response_model=ConnectionListResponse)
async def list_connections(auth_user: AuthenticatedUser = Depends(get_current_user)) -> ConnectionListResponse:
	return ConnectionListResponse(connections=await _service.list_accepted(auth_user.uuid))


@router.get("/pending", response_model=PendingListResponse)
async def list_pending(auth_user: AuthenticatedUser = Depends(get_current_user)) -> PendingListResponse:
	return PendingListResponse(requests=await _service.list_pending_received(auth_user.uuid))


@router.get("/status/{other_user_id}", response_model=ConnectionStatusResponse, response_model_exclude_none=True)
async def connection_status(
	other_user_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConnectionStatusResponse:
	return await _service.get_status(auth_user.uuid, other_user_id)
