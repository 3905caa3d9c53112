"""Centralised JWT helpers for access tokens.

Tokens are issued by the identity service with HS256 and the shared secret;
this core only verifies them. The subject lives in ``sub`` (or the legacy
``id`` claim).
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from app.settings import settings


def encode_access(payload: dict[str, object], *, ttl_seconds: int = 7 * 24 * 3600) -> str:
    """Encode an access token; used by tests and local tooling."""
    now = int(time.time())
    body: Dict[str, Any] = {"iat": now, "exp": now + ttl_seconds}
    body.update(payload)
    return jwt.encode(body, settings.secret_key, algorithm="HS256")


def decode_access(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=["HS256"],
        leeway=5,
        options={"require": ["exp"]},
    )
    if not (payload.get("sub") or payload.get("id")):
        raise InvalidTokenError("missing_claim:sub")
    return payload  # type: ignore[return-value]
