"""Domain models for posts, likes and comments."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID


class PostPrivacy(str, Enum):
	PUBLIC = "public"
	FRIENDS = "friends"
	PRIVATE = "private"


class CounterField(str, Enum):
	"""Denormalised post counters; the only columns ``increment_counter`` touches."""

	LIKES = "likes_count"
	COMMENTS = "comments_count"
	SHARES = "shares_count"


@dataclass(slots=True)
class Post:
	id: UUID
	author_id: UUID
	content: str
	category: str
	privacy: PostPrivacy
	created_at: datetime
	updated_at: datetime
	image_urls: List[str] = field(default_factory=list)
	feeling: Optional[str] = None
	tags: List[str] = field(default_factory=list)
	event_details: Optional[Dict[str, Optional[str]]] = None
	shared_post_id: Optional[UUID] = None
	likes_count: int = 0
	comments_count: int = 0
	shares_count: int = 0

	@classmethod
	def from_record(cls, record: dict) -> "Post":
		shared = record.get("shared_post_id")
		event = record.get("event_details")
		if isinstance(event, str):
			event = json.loads(event)
		return cls(
			id=UUID(str(record["id"])),
			author_id=UUID(str(record["author_id"])),
			content=record.get("content") or "",
			category=record.get("category") or "general",
			privacy=PostPrivacy(record.get("privacy") or "public"),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
			image_urls=list(record.get("image_urls") or []),
			feeling=record.get("feeling"),
			tags=list(record.get("tags") or []),
			event_details=event or None,
			shared_post_id=UUID(str(shared)) if shared else None,
			likes_count=int(record.get("likes_count") or 0),
			comments_count=int(record.get("comments_count") or 0),
			shares_count=int(record.get("shares_count") or 0),
		)

	@property
	def first_image(self) -> Optional[str]:
		return self.image_urls[0] if self.image_urls else None


@dataclass(slots=True)
class Comment:
	id: UUID
	post_id: UUID
	user_id: UUID
	content: str
	created_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Comment":
		return cls(
			id=UUID(str(record["id"])),
			post_id=UUID(str(record["post_id"])),
			user_id=UUID(str(record["user_id"])),
			content=record["content"],
			created_at=record["created_at"],
		)
