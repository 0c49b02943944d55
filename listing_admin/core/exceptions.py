# listing_admin/core/exceptions.py
import logging

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class ListingError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ListingError):
    status_code = HTTP_400_BAD_REQUEST


class AuthError(ListingError):
    status_code = HTTP_401_UNAUTHORIZED


class NotFoundError(ListingError):
    status_code = HTTP_404_NOT_FOUND


class StorageWriteError(ListingError):
    pass


class RecordStoreError(ListingError):
    pass


def _error(status_code: int, message, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def listing_exception_handler(request, exc: ListingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


async def validation_exception_handler(request, exc: RequestValidationError):
    errors = exc.errors()
    logger.info("Request validation failed on %s: %s", request.url.path, errors)
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error(HTTP_400_BAD_REQUEST, "; ".join(parts) or "Invalid request")


async def http_exception_handler(request, exc: StarletteHTTPException):
    return _error(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or exc.__class__.__name__)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(ListingError, listing_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
