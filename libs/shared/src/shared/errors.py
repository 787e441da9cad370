from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger

from .schemas import ErrorResponse


def _serialize_detail(detail: str | dict | None) -> str | None:
    if detail is None:
        return None
    return str(detail)


def error_response(
    status_code: int,
    error: str,
    detail: str | dict | None,
    request_id: str | None,
    *,
    action: str | None = None,
    context: dict[str, Any] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=error,
        detail=_serialize_detail(detail),
        request_id=request_id,
        action=action,
        context=context or None,
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return error_response(exc.status_code, error=str(exc.detail) if exc.detail else exc.__class__.__name__, detail=exc.detail, request_id=request_id)


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an exception carrying ``status_code``/``error``/``detail`` attributes."""
    request_id = getattr(request.state, "request_id", None)
    status_code = getattr(exc, "status_code", 400)
    logger.bind(request_id=request_id).info(
        "{} {} rejected: {} ({})", request.method, request.url.path, exc.__class__.__name__, exc
    )
    return error_response(
        status_code,
        error=getattr(exc, "error", exc.__class__.__name__),
        detail=getattr(exc, "detail", str(exc)),
        request_id=request_id,
        action=getattr(exc, "action", None),
        context=getattr(exc, "context", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.bind(request_id=request_id).opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return error_response(500, error="Internal Server Error", detail=str(exc), request_id=request_id)


def register_error_handlers(app: FastAPI, *domain_errors: type[Exception]) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    for error_cls in domain_errors:
        app.add_exception_handler(error_cls, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
