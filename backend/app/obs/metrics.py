"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge, Histogram

log = logging.getLogger(__name__)


REQUEST_COUNTER = Counter(
	"social_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"social_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

CONNECTION_EVENTS = Counter(
	"social_connection_events_total",
	"Connection graph lifecycle transitions",
	["event"],
)

LIKES = Counter(
	"social_likes_total",
	"Like/unlike attempts by outcome",
	["result"],
)

POSTS = Counter(
	"social_posts_total",
	"Posts written by kind",
	["kind"],
)

COMMENTS = Counter(
	"social_comments_total",
	"Comments created",
)

NOTIFICATIONS = Counter(
	"social_notifications_total",
	"Notification fan-out outcomes",
	["type", "result"],
)

MESSAGES = Counter(
	"social_messages_total",
	"Direct message operations",
	["result"],
)

READ_RECEIPTS = Counter(
	"social_read_receipts_total",
	"Items flipped from unread to read",
	["surface"],
)

AUDIT_FAILURES = Counter(
	"social_audit_stream_failures_total",
	"Audit stream appends that failed",
	["stream"],
)

POSTGRES_UP = Gauge(
	"social_postgres_up",
	"Whether the last Postgres health probe succeeded",
)

REDIS_UP = Gauge(
	"social_redis_up",
	"Whether the last Redis health probe succeeded",
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_connection_event(event: str) -> None:
	CONNECTION_EVENTS.labels(event=event).inc()


def inc_like(result: str) -> None:
	LIKES.labels(result=result).inc()


def inc_post(kind: str) -> None:
	POSTS.labels(kind=kind).inc()


def inc_comment() -> None:
	COMMENTS.inc()


def inc_notification(type: str, result: str) -> None:
	NOTIFICATIONS.labels(type=type, result=result).inc()


def inc_message(result: str) -> None:
	MESSAGES.labels(result=result).inc()


def inc_read_receipts(surface: str, count: int) -> None:
	if count > 0:
		READ_RECEIPTS.labels(surface=surface).inc(count)


def inc_audit_failure(stream: str) -> None:
	AUDIT_FAILURES.labels(stream=stream).inc()


def mark_postgres(ok: bool) -> None:
	POSTGRES_UP.set(1 if ok else 0)


def mark_redis(ok: bool) -> None:
	REDIS_UP.set(1 if ok else 0)
