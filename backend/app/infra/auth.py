"""Authentication helpers for FastAPI endpoints.

The core consumes authentication as a capability: a bearer token resolves to a
user id or the request is rejected with 401. Dev environments also accept the
``X-User-Id`` header for local tooling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.infra import jwt as jwt_helper
from app.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None

	@property
	def uuid(self) -> UUID:
		return UUID(self.id)


_bearer_scheme = HTTPBearer(auto_error=False)


def _parse_user_id(raw: object) -> str:
	try:
		return str(UUID(str(raw).strip()))
	except (TypeError, ValueError):
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode an access JWT and return the AuthenticatedUser it names."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None

	user_id = _parse_user_id(payload.get("sub") or payload.get("id"))
	email = payload.get("email")
	return AuthenticatedUser(id=user_id, email=str(email) if email is not None else None)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow the X-User-Id header. In all other environments a
	valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id:
		return AuthenticatedUser(id=_parse_user_id(x_user_id))

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
