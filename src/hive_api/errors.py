"""Error types and FastAPI error handling for the Hive API."""

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from hive_api.monitoring.logger import log_response_info

__all__ = [
    "HiveError",
    "HiveValidationError",
    "UnauthorizedError",
    "HiveNotFoundError",
    "HiveClosedError",
    "NotClosedError",
    "AlreadyHarvestedError",
    "StoreError",
    "handle_broad_exceptions",
    "handle_hive_errors",
    "handle_store_errors",
    "handle_pydantic_validation_errors",
]


class HiveError(Exception):
    """Base class for expected, caller-recoverable hive errors."""

    http_status: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Hive request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class HiveValidationError(HiveError):
    """Malformed or missing input."""

    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid hive request."


class UnauthorizedError(HiveError):
    """Missing, invalid or mismatched token on a privileged operation."""

    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized."


class HiveNotFoundError(HiveError):
    """Hive id does not resolve."""

    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Hive not found."


class HiveClosedError(HiveError):
    """Write attempted after closure."""

    http_status = status.HTTP_409_CONFLICT
    default_message = "This Hive is closed. No new honey can be added."


class NotClosedError(HiveError):
    """Harvest attempted before closure."""

    http_status = status.HTTP_409_CONFLICT
    default_message = "Hive is not closed yet."


class AlreadyHarvestedError(HiveError):
    """Second harvest attempt."""

    http_status = status.HTTP_409_CONFLICT
    default_message = "This Hive has already been harvested and notifications were sent."


class StoreError(Exception):
    """Hive store infrastructure failure (connection loss, write conflict, pool not ready)."""


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        logger.opt(exception=True).error(
            "Unhandled exception: {}: {}",
            type(err).__name__,
            str(err),
            http_status=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error_message=str(err),
            request_body=getattr(request.state, "request_body", None),
        )

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


async def handle_hive_errors(request: Request, exc: HiveError) -> JSONResponse:
    """Render domain errors with their status code and a human readable message."""
    error_type = type(exc).__name__
    error_response = {"detail": exc.message, "error_type": error_type}

    logger.warning(
        "Hive request rejected: {}: {}",
        error_type,
        exc.message,
        http_status=exc.http_status,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type=error_type,
    )

    response = JSONResponse(status_code=exc.http_status, content=error_response)
    log_response_info(response)
    return response


async def handle_store_errors(request: Request, exc: StoreError) -> JSONResponse:
    """Render store failures as 503 so callers can tell them apart from invalid requests."""
    error_response = {"detail": "Hive store unavailable. Please try again later.", "error_type": "StoreError"}

    logger.error(
        "Hive store error: {}",
        exc,
        http_status=503,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="StoreError",
        error_message=str(exc),
    )

    response = JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=error_response)
    log_response_info(response)
    return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error["input"],
            }
            for error in errors
        ]
    }

    logger.warning(
        f"Validation error: {len(errors)} validation errors",
        http_status=422,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="ValidationError",
        validation_errors=errors,
    )

    response = JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_response,
    )
    log_response_info(response)

    return response
