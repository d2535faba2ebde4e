"""
Domain error taxonomy and its HTTP mapping.

Services raise these; the handlers registered in main.py turn them into
`{"code": ..., "detail": ...}` responses with a distinct status per kind.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(DomainError):
    status_code = 404
    code = "not_found"


class Forbidden(DomainError):
    status_code = 403
    code = "forbidden"


class InvalidState(DomainError):
    status_code = 409
    code = "invalid_state"


class InvalidRequest(DomainError):
    status_code = 400
    code = "invalid_request"


class UnsupportedType(DomainError):
    status_code = 415
    code = "unsupported_type"


INTERNAL_MESSAGE = "Internal server error"


def _internal_response(exc: Exception) -> JSONResponse:
    detail = INTERNAL_MESSAGE
    if settings.EXPOSE_INTERNAL_ERRORS:
        detail = f"{INTERNAL_MESSAGE}: {exc}"
    return JSONResponse(status_code=500, content={"code": "internal", "detail": detail})


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"[Store] {request.method} {request.url.path} failed")
    return _internal_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
