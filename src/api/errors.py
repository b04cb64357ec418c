"""
Exception handlers - translate domain errors into HTTP responses.

Routes never catch domain exceptions themselves; every error reaches one
of the handlers registered here and leaves as {"error": "..."}.
Unclassified failures are logged with traceback and reported as a generic
server error.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.domain.exceptions import (
    AccountConflict,
    AccountError,
    AccountNotFound,
    AlreadyVerified,
    DeliveryError,
    InvalidCode,
    InvalidCredentials,
    StoreError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"

_ERROR_RESPONSES: dict[type[AccountError], tuple[int, str]] = {
    AccountNotFound: (status.HTTP_404_NOT_FOUND, "Account not found"),
    AlreadyVerified: (status.HTTP_400_BAD_REQUEST, "Account already verified"),
    InvalidCode: (status.HTTP_400_BAD_REQUEST, "Invalid verification code"),
    InvalidCredentials: (status.HTTP_401_UNAUTHORIZED, "Invalid credentials"),
    DeliveryError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send verification email"),
    StoreError: (status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR),
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Map an AccountError subclass to its status and public message."""
    if isinstance(exc, ValidationFailed):
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    if isinstance(exc, AccountConflict):
        message = "Email already exists" if exc.field == "email" else "Username already exists"
        return error_response(status.HTTP_409_CONFLICT, message)

    for exc_type in type(exc).__mro__:
        if exc_type in _ERROR_RESPONSES:
            status_code, message = _ERROR_RESPONSES[exc_type]
            break
    else:
        status_code, message = status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR

    if status_code >= 500:
        logger.error("%s on %s: %r", type(exc).__name__, request.url.path, exc)
    return error_response(status_code, message)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle Pydantic validation errors as 400 instead of FastAPI's 422.

    Absent, null or empty fields report "Missing fields"; anything else
    (malformed JSON, wrong types, bad email syntax) reports "Invalid request".
    """
    errors = exc.errors()
    missing = any(
        err["type"] == "missing" or ("input" in err and err["input"] in (None, "")) for err in errors
    )
    message = "Missing fields" if missing else "Invalid request"
    logger.info("Rejected request to %s: %s", request.url.path, message)
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework errors (unknown route, wrong method) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on the application."""
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
