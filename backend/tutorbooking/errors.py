"""
Unified error envelope.

Every error response has the shape
``{"status": int, "message": str, "code": str, "details": {...}}``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException
from .core.request_context import get_request_id

logger = logging.getLogger(__name__)


def _code_from_status(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_ERROR",
    }
    return mapping.get(status_code, "ERROR")


def _envelope(
    *,
    status: int,
    message: Optional[str],
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    payload_details = jsonable_encoder(details) if details is not None else {}
    if not isinstance(payload_details, dict):
        payload_details = {"errors": payload_details}
    return {
        "status": status,
        "message": message or "",
        "code": code or _code_from_status(status),
        "details": payload_details,
    }


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        details = detail.get("details") or detail.get("errors")
        return detail_text, code, details
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _response(payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    merged = dict(headers or {})
    request_id = get_request_id()
    if request_id:
        merged.setdefault("X-Request-ID", request_id)
    return JSONResponse(payload, status_code=payload["status"], headers=merged or None)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return _response(
            _envelope(
                status=exc.status_code,
                message=exc.message,
                code=exc.code,
                details=exc.details,
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail_text, code, details = _parse_detail(exc.detail)
        return _response(
            _envelope(status=exc.status_code, message=detail_text, code=code, details=details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _response(
            _envelope(
                status=422,
                message="Request validation failed",
                code="VALIDATION_ERROR",
                details={"errors": exc.errors()},
            )
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _response(
            _envelope(status=500, message="Internal server error", code="INTERNAL_ERROR")
        )
