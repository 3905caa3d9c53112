"""Audit helpers for connection lifecycle events."""

from __future__ import annotations

import logging
from typing import Dict

from redis.exceptions import RedisError

from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

CONNECTION_STREAM = "x:connections.events"


async def log_connection_event(event: str, fields: Dict[str, str]) -> None:
	"""Append a lifecycle event to the audit stream and count it.

	The stream is best-effort: the durable write has already happened, so a
	redis failure is logged and counted but never raised to the caller.
	"""
	obs_metrics.inc_connection_event(event)
	payload = {"event": event, **{key: str(value) for key, value in fields.items()}}
	try:
		await redis_client.xadd(
			CONNECTION_STREAM,
			payload,
			maxlen=settings.audit_stream_maxlen,
			approximate=True,
		)
	except (RedisError, OSError):
		obs_metrics.inc_audit_failure(CONNECTION_STREAM)
		logger.warning("audit_append_failed", extra={"stream": CONNECTION_STREAM, "event": event}, exc_info=True)
