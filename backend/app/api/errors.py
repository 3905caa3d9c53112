"""Global error handlers rendering every failure as ``{"error": ..., "request_id": ...}``."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.request_id import get_request_id
from app.domain.common.exceptions import DomainError

logger = logging.getLogger(__name__)

_INTERNAL_ERROR = "Internal server error"


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, DomainError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	logger.error("unhandled_service_error", exc_info=exc)
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=_INTERNAL_ERROR)


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {"error": exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = {
			"error": "Invalid request",
			"errors": exc.errors(),
			"request_id": get_request_id(request),
		}
		return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=jsonable_encoder(payload))

	@app.exception_handler(DomainError)
	async def domain_exc_handler(request: Request, exc: DomainError):  # type: ignore[override]
		payload = {"error": exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(Exception)
	async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
		logger.exception("unhandled_error", extra={"path": request.url.path})
		payload = {"error": _INTERNAL_ERROR, "request_id": get_request_id(request)}
		return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
