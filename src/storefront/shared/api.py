"""Response envelope and exception translation shared by every router.

Successful responses are ``{"success": true, "data": ..., "message"?: ...}``;
failures are ``{"success": false, "error": ..., "message"?: ...}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.shared.pagination import page_window

logger = structlog.get_logger(__name__)


class AuthenticationFailed(Exception):
    """The request carries no usable credentials (401)."""


class PermissionDenied(Exception):
    """The caller is known but may not do this (403)."""


def envelope(data=None, message: str | None = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def paginated(items, total: int, page: int, limit: int | None) -> dict:
    _, limit = page_window(page, limit)
    return envelope(
        {
            "items": items,
            "pagination": {
                "page": max(1, page or 1),
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        }
    )


def _failure(status_code: int, error: str, message=None) -> JSONResponse:
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return _failure(400, "Validation failed", exc.messages)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return _failure(422, "Invalid request", exc.errors())

    @app.exception_handler(ObjectNotFoundError)
    async def _not_found(request: Request, exc: ObjectNotFoundError):
        return _failure(404, "Resource not found", str(exc))

    @app.exception_handler(AuthenticationFailed)
    async def _unauthenticated(request: Request, exc: AuthenticationFailed):
        return _failure(401, "Not authorized", str(exc) or None)

    @app.exception_handler(PermissionDenied)
    async def _forbidden(request: Request, exc: PermissionDenied):
        return _failure(403, "Forbidden", str(exc) or None)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, method=request.method)
        return _failure(500, "Server error")
