# famfin/errors.py
"""
Domain errors and the handlers that turn them into the JSON envelope.

Services raise these; routers never build error responses themselves.
Every failure leaves the API as {"error": "<message>"}.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("famfin.errors")


class DomainError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DomainError):
    status_code = 401
    default_message = "Not authenticated. Please sign in to continue."


class Forbidden(DomainError):
    status_code = 403
    default_message = "You do not have permission to do this"


class NotFound(DomainError):
    # also used when a row exists but is not visible to the caller
    status_code = 404
    default_message = "Not found"


class InvalidInput(DomainError):
    status_code = 400
    default_message = "Invalid input"


class Conflict(DomainError):
    status_code = 400
    default_message = "Conflicts with existing data"


class InvalidAmount(InvalidInput):
    default_message = "Amount must be greater than zero"


class InvitationExpired(InvalidInput):
    default_message = "This invitation has expired"


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    # drop the "body"/"query" prefix, keep the field path
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc)
    msg = first.get("msg", "invalid value")
    return f"{field}: {msg}" if field else msg


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _domain_error(request: Request, exc: DomainError):
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return error_response(_format_validation_error(exc), 400)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response("Internal server error", 500)


__all__ = [
    "DomainError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "InvalidInput",
    "Conflict",
    "InvalidAmount",
    "InvitationExpired",
    "register_error_handlers",
]
