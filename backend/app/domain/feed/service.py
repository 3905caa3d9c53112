"""Feed aggregation and post interactions.

Every view is recomputed per request: public posts newest first, joined with
author display fields, the nested shared-post summary and the viewer's like
state from one batched query.

Like/comment/share each perform the durable row write, then the counter
update, then the notification as separate statements. A failure between
steps is not rolled back; counters are denormalised and may drift.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence
from uuid import UUID

from app.domain.common.exceptions import Conflict, Forbidden, InvalidArgument, NotFound
from app.domain.feed.models import CounterField, Post, PostPrivacy
from app.domain.feed.repo import PostRepository
from app.domain.feed.schemas import (
	CommentAuthor,
	CommentView,
	EventDetails,
	FeedAuthor,
	FeedItem,
	PostDetail,
	SharedPostView,
)
from app.domain.identity.users import UserRepository, UserSummary
from app.domain.social.models import NotificationType, ReferenceType
from app.domain.social.notifications import NotificationService
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENT = "Student"


def _author(user_id: UUID, user: UserSummary | None) -> FeedAuthor:
	if user is None:
		return FeedAuthor(id=user_id, department=DEFAULT_DEPARTMENT)
	return FeedAuthor(
		id=user.id,
		name=user.display_name,
		avatar_url=user.avatar_url,
		department=user.department or DEFAULT_DEPARTMENT,
		title=user.title,
		email=user.email,
	)


def to_detail(post: Post) -> PostDetail:
	return PostDetail(
		id=post.id,
		author_id=post.author_id,
		content=post.content,
		category=post.category,
		privacy=post.privacy.value,
		image_urls=post.image_urls,
		feeling=post.feeling,
		tags=post.tags,
		event_details=EventDetails(**post.event_details) if post.event_details else None,
		shared_post_id=post.shared_post_id,
		likes_count=post.likes_count,
		comments_count=post.comments_count,
		shares_count=post.shares_count,
		created_at=post.created_at,
		updated_at=post.updated_at,
	)


class FeedService:
	def __init__(
		self,
		*,
		repository: PostRepository | None = None,
		users: UserRepository | None = None,
		notifications: NotificationService | None = None,
	) -> None:
		self._repo = repository or PostRepository()
		self._users = users or UserRepository()
		self._notifications = notifications or NotificationService(users=self._users)

	async def _require_post(self, post_id: UUID) -> Post:
		post = await self._repo.get_post(post_id)
		if post is None:
			raise NotFound("Post not found")
		return post

	async def get_feed(self, viewer_id: UUID, *, limit: int | None = None) -> List[FeedItem]:
		bounded = max(1, min(limit or settings.feed_default_limit, settings.feed_max_limit))
		posts = await self._repo.list_public(bounded)
		shared = await self._repo.get_posts(p.shared_post_id for p in posts if p.shared_post_id)
		authors = await self._users.get_users(
			[p.author_id for p in posts] + [p.author_id for p in shared.values()]
		)
		liked = await self._repo.liked_post_ids(viewer_id, [p.id for p in posts])

		items: List[FeedItem] = []
		for post in posts:
			shared_view = None
			original = shared.get(post.shared_post_id) if post.shared_post_id else None
			if original is not None:
				shared_view = SharedPostView(
					id=original.id,
					user=_author(original.author_id, authors.get(original.author_id)),
					content=original.content,
					image_url=original.first_image,
					created_at=original.created_at,
				)
			items.append(
				FeedItem(
					id=post.id,
					user=_author(post.author_id, authors.get(post.author_id)),
					content=post.content,
					category=post.category,
					created_at=post.created_at,
					likes=post.likes_count,
					comments=post.comments_count,
					shares=post.shares_count,
					image_url=post.first_image,
					is_liked=post.id in liked,
					shared_post_id=post.shared_post_id,
					shared_post=shared_view,
				)
			)
		return items

	async def create_post(
		self,
		author_id: UUID,
		*,
		content: str = "",
		category: str = "general",
		privacy: str = "public",
		image_urls: Sequence[str] = (),
		feeling: Optional[str] = None,
		tags: Sequence[str] = (),
		event_details: Optional[Mapping[str, Optional[str]]] = None,
	) -> PostDetail:
		post = await self._repo.create_post(
			author_id=author_id,
			content=content,
			category=category or "general",
			privacy=PostPrivacy(privacy),
			image_urls=image_urls,
			feeling=feeling,
			tags=tags,
			event_details=event_details,
		)
		obs_metrics.inc_post("original")
		return to_detail(post)

	async def like(self, post_id: UUID, user_id: UUID) -> None:
		post = await self._require_post(post_id)
		try:
			await self._repo.insert_like(post.id, user_id)
		except Conflict:
			obs_metrics.inc_like("duplicate")
			raise
		await self._repo.increment_counter(post.id, CounterField.LIKES, 1)
		obs_metrics.inc_like("liked")
		await self._notifications.notify(
			post.author_id,
			user_id,
			NotificationType.LIKE,
			"liked your post",
			reference_id=str(post.id),
			reference_type=ReferenceType.POST,
		)

	async def unlike(self, post_id: UUID, user_id: UUID) -> bool:
		removed = await self._repo.delete_like(post_id, user_id)
		if removed:
			await self._repo.increment_counter(post_id, CounterField.LIKES, -1)
			obs_metrics.inc_like("unliked")
		else:
			obs_metrics.inc_like("noop")
		return removed

	async def share_post(self, post_id: UUID, user_id: UUID, content: Optional[str] = None) -> PostDetail:
		original = await self._require_post(post_id)
		shared = await self._repo.create_post(
			author_id=user_id,
			content=content or "",
			privacy=PostPrivacy.PUBLIC,
			shared_post_id=original.id,
		)
		await self._repo.increment_counter(original.id, CounterField.SHARES, 1)
		obs_metrics.inc_post("share")
		logger.info("post_shared", extra={"post_id": str(original.id), "share_id": str(shared.id)})
		return to_detail(shared)

	async def delete_post(self, post_id: UUID, user_id: UUID) -> None:
		post = await self._require_post(post_id)
		if post.author_id != user_id:
			raise Forbidden("You can only delete your own posts")
		if not await self._repo.delete_post(post.id):
			raise NotFound("Post not found")
		logger.info("post_deleted", extra={"post_id": str(post.id)})

	async def add_comment(self, post_id: UUID, user_id: UUID, content: str) -> CommentView:
		text = (content or "").strip()
		if not text:
			raise InvalidArgument("Content required")
		post = await self._require_post(post_id)
		comment = await self._repo.create_comment(post.id, user_id, text)
		await self._repo.increment_counter(post.id, CounterField.COMMENTS, 1)
		obs_metrics.inc_comment()
		await self._notifications.notify(
			post.author_id,
			user_id,
			NotificationType.COMMENT,
			"commented on your post",
			reference_id=str(post.id),
			reference_type=ReferenceType.POST,
		)
		user = await self._users.get_user(user_id)
		return CommentView(
			id=comment.id,
			content=comment.content,
			created_at=comment.created_at,
			user_id=comment.user_id,
			profile=_comment_author(user),
		)

	async def list_comments(self, post_id: UUID) -> List[CommentView]:
		comments = await self._repo.list_comments(post_id)
		users = await self._users.get_users(c.user_id for c in comments)
		return [
			CommentView(
				id=c.id,
				content=c.content,
				created_at=c.created_at,
				user_id=c.user_id,
				profile=_comment_author(users.get(c.user_id)),
			)
			for c in comments
		]


def _comment_author(user: UserSummary | None) -> CommentAuthor:
	if user is None:
		return CommentAuthor()
	return CommentAuthor(full_name=user.display_name, avatar_url=user.avatar_url)
