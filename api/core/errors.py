"""
Error kinds shared by every feature, and the handlers that turn them into
`{"error": "<message>"}` responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import messages

logger = logging.getLogger(__name__)


# Storage failures are explicit and separable from request errors.
class StorageError(RuntimeError):
    pass


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnsupportedMediaType(ApiError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("request_validation_failed path=%s errors=%s", request.url.path, exc.errors())
    # Body problems are reported as invalid data; query/path problems as a bad request.
    if any(err.get("loc", ("",))[0] == "body" for err in exc.errors()):
        return error_response(status.HTTP_400_BAD_REQUEST, messages.INVALID_DATA)
    return error_response(status.HTTP_400_BAD_REQUEST, messages.BAD_REQUEST)


async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("storage_failed path=%s error=%s", request.url.path, exc, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, messages.DB_OPERATION_FAILED)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
