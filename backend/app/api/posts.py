"""REST API surface for posts and the feed."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.errors import to_http_error
from app.domain.common.exceptions import DomainError
from app.domain.feed.schemas import FeedResponse, OkResponse, PostCreateRequest, PostEnvelope, ShareRequest
from app.domain.feed.service import FeedService
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/posts", tags=["posts"])

_service = FeedService()


@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
	payload: PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PostEnvelope:
	post = await _service.create_post(
		auth_user.uuid,
		content=payload.content,
		category=payload.category,
		privacy=payload.privacy,
		image_urls=payload.image_urls,
		feeling=payload.feeling,
		tags=payload.tags,
		event_details=payload.event_details.model_dump() if payload.event_details else None,
	)
	return PostEnvelope(post=post)


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
	limit: Optional[int] = Query(default=None, ge=1),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> FeedResponse:
	return FeedResponse(posts=await _service.get_feed(auth_user.uuid, limit=limit))


@router.post("/{post_id}/like", response_model=OkResponse, status_code=status.HTTP_201_CREATED)
async def like_post(
	post_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> OkResponse:
	try:
		await _service.like(post_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return OkResponse()


@router.delete("/{post_id}/like", response_model=OkResponse)
async def unlike_post(
	post_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> OkResponse:
	await _service.unlike(post_id, auth_user.uuid)
	return OkResponse()


@router.post("/{post_id}/share", response_model=PostEnvelope)
async def share_post(
	post_id: UUID,
	payload: Optional[ShareRequest] = None,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PostEnvelope:
	try:
		post = await _service.share_post(post_id, auth_user.uuid, payload.content if payload else None)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return PostEnvelope(post=post)


@router.delete("/{post_id}", response_model=OkResponse)
async def delete_post(
	post_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> OkResponse:
	try:
		await _service.delete_post(post_id, auth_user.uuid)
	except DomainError as exc:
		raise to_http_error(exc) from None
	return OkResponse(message="Post deleted successfully")
