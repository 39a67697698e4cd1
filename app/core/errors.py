# Error types and FastAPI exception handlers.
# Every error leaves the API as {"error": "<message>"} with the matching status.

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.messages import get_message

logger = logging.getLogger("app")


class APIError(HTTPException):
    """HTTPException whose detail is resolved from a message code"""

    def __init__(self, status_code: int, code: str, **params: Any):
        self.code = code
        self.params = params
        super().__init__(status_code=status_code, detail=get_message(code, **params))


class AlreadyExistsError(Exception):
    """Raised by services when a uniqueness constraint rejects an insert"""


def bad_request(code: str, **params: Any) -> APIError:
    return APIError(status.HTTP_400_BAD_REQUEST, code, **params)


def unauthorized() -> APIError:
    return APIError(status.HTTP_401_UNAUTHORIZED, "unauthorized")


def forbidden(code: str) -> APIError:
    return APIError(status.HTTP_403_FORBIDDEN, code)


def not_found(code: str) -> APIError:
    return APIError(status.HTTP_404_NOT_FOUND, code)


def conflict(code: str) -> APIError:
    return APIError(status.HTTP_409_CONFLICT, code)


def internal_error(code: str = "internal_error") -> APIError:
    return APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = get_message("invalid_request")
    if errors:
        first = errors[0]
        field = str(first.get("loc", ["", "field"])[-1])
        if first.get("type") == "missing":
            message = get_message("field_required", field=field)
        else:
            message = f"{field}: {first.get('msg', message)}"
    logger.info(f"Validation error on {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": get_message("internal_error")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
