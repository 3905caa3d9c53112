"""Pydantic schemas for the feed, posts and comments."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class EventDetails(BaseModel):
	date: Optional[str] = Field(default=None, max_length=64)
	time: Optional[str] = Field(default=None, max_length=64)
	location: Optional[str] = Field(default=None, max_length=256)


class PostCreateRequest(BaseModel):
	content: str = Field(default="", max_length=10_000)
	category: str = Field(default="general", max_length=64)
	privacy: Literal["public", "friends", "private"] = "public"
	image_urls: List[str] = Field(default_factory=list)
	feeling: Optional[str] = Field(default=None, max_length=64)
	tags: List[str] = Field(default_factory=list)
	event_details: Optional[EventDetails] = None


class ShareRequest(BaseModel):
	content: Optional[str] = Field(default=None, max_length=10_000)


class CommentCreateRequest(BaseModel):
	content: str = Field(default="", max_length=5_000)


class PostDetail(BaseModel):
	id: UUID
	author_id: UUID
	content: str
	category: str
	privacy: str
	image_urls: List[str]
	feeling: Optional[str] = None
	tags: List[str]
	event_details: Optional[EventDetails] = None
	shared_post_id: Optional[UUID] = None
	likes_count: int
	comments_count: int
	shares_count: int
	created_at: datetime
	updated_at: datetime


class PostEnvelope(BaseModel):
	post: PostDetail


class FeedAuthor(BaseModel):
	id: Optional[UUID] = None
	name: str = "User"
	avatar_url: Optional[str] = None
	department: Optional[str] = None
	title: Optional[str] = None
	email: Optional[str] = None


class SharedPostView(BaseModel):
	id: UUID
	user: FeedAuthor
	content: str
	image_url: Optional[str] = None
	created_at: datetime


class FeedItem(BaseModel):
	id: UUID
	user: FeedAuthor
	content: str
	category: str
	created_at: datetime
	likes: int
	comments: int
	shares: int
	image_url: Optional[str] = None
	is_liked: bool
	shared_post_id: Optional[UUID] = None
	shared_post: Optional[SharedPostView] = None


class FeedResponse(BaseModel):
	posts: List[FeedItem]


class CommentAuthor(BaseModel):
	full_name: str = "User"
	avatar_url: Optional[str] = None


class CommentView(BaseModel):
	id: UUID
	content: str
	created_at: datetime
	user_id: UUID
	profile: CommentAuthor


class OkResponse(BaseModel):
	ok: bool = True
	message: Optional[str] = None
