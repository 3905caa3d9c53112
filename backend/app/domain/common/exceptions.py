"""Domain-level exceptions shared by the social core services."""

from __future__ import annotations

from fastapi import status


class DomainError(Exception):
	"""Base class for errors raised by the domain services."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "Request failed"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class InvalidArgument(DomainError):
	"""Malformed or missing required input."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "Invalid request"


class FailedPrecondition(DomainError):
	"""The target exists but is not in a state that allows the operation."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "Operation not allowed in current state"


class Forbidden(DomainError):
	"""Authenticated but not entitled to the target resource."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "Forbidden"


class NotFound(DomainError):
	"""Referenced entity is absent."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "Not found"


class Conflict(DomainError):
	"""Uniqueness violation reported by the store."""

	status_code = status.HTTP_409_CONFLICT
	detail = "Conflict"
