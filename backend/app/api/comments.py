"""Comments on posts."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.errors import to_http_error
from app.domain.common.exceptions import DomainError
from app.domain.feed.schemas import CommentCreateRequest, CommentView
from app.domain.feed.service import FeedService
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/comments", tags=["comments"])

_service = FeedService()


@router.get("/{post_id}", response_model=List[CommentView])
async def list_comments(post_id: UUID) -> List[CommentView]:
	return await _service.list_comments(post_id)


@router.post("/{post_id}", response_model=CommentView, status_code=status.HTTP_201_CREATED)
async def add_comment(
	post_id: UUID,
	payload: CommentCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> CommentView:
	try:
		return await _service.add_comment(post_id, auth_user.uuid, payload.content)
	except DomainError as exc:
		raise to_http_error(exc) from None
