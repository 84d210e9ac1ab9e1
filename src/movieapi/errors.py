"""Error taxonomy and its HTTP translation.

Learn: Services and repositories raise these domain errors; they never
build HTTP responses themselves. register_exception_handlers() is the
single place where an error becomes a status code and a JSON envelope:

    {"success": false, "message": "Movie not found"}

Only the message string crosses the API boundary. Driver errors and
tracebacks stay in the logs.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class ApiError(Exception):
    """Base class for every error that maps to an API response."""

    status_code = 500
    default_message = "Server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    """Missing, malformed, invalid, or expired bearer token."""

    status_code = 401
    default_message = "Unauthorized"


class InvalidPayload(ApiError):
    """Request body violates a domain rule."""

    status_code = 400
    default_message = "Invalid payload."


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found."


class DuplicateKey(ApiError):
    """Unique-constraint violation on create."""

    status_code = 409
    default_message = "Resource already exists."


class StorageError(ApiError):
    """Unclassified persistence failure."""

    status_code = 500
    default_message = "Storage error."


class InternalError(ApiError):
    status_code = 500
    default_message = "Server error."


def error_response(exc: ApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "JWT"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "api.error",
            error_type=type(exc).__name__,
            message=exc.message,
            path=request.url.path,
        )
    return error_response(exc)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first['msg']}" if field else first["msg"]
    else:
        message = None
    return error_response(InvalidPayload(message))


async def _handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Routing misses (404, 405) raised by Starlette itself
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.unhandled_error", path=request.url.path)
    return error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-to-response translation on an app."""
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
