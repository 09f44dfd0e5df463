"""Application error taxonomy and exception handlers with request_id in responses."""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.core.config import get_settings
from src.app.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        message: Human readable message returned as ``detail``.
        code: Stable machine readable discriminator returned as ``error``.
        details: Extra diagnostic data, only exposed outside production.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "InternalError"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        details: Any = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "ValidationError"
    default_message = "Invalid input"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "AuthenticationError"
    default_message = "Authentication required"


class TokenExpiredError(AuthenticationError):
    default_code = "TokenExpired"
    default_message = "Token has expired"


class TokenMalformedError(AuthenticationError):
    default_code = "TokenMalformed"
    default_message = "Invalid token"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "AuthorizationError"
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NotFound"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "Conflict"
    default_message = "Resource already exists"


class LockedError(AppError):
    status_code = status.HTTP_423_LOCKED
    default_code = "AccountLocked"
    default_message = "Account is temporarily locked"


class ServiceUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "ServiceUnavailable"
    default_message = "Service temporarily unavailable"


class HashingError(AppError):
    default_code = "HashingError"
    default_message = "Password hashing failed"


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        request_id = correlation_id.get()
        content: dict[str, Any] = {
            "detail": exc.message,
            "error": exc.code,
            "request_id": request_id,
        }
        if exc.details is not None and not get_settings().is_production:
            content["details"] = exc.details

        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed",
                error=exc.code,
                message=exc.message,
                path=request.url.path,
            )
        else:
            logger.info("Request rejected", error=exc.code, path=request.url.path)

        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": f"{field}: {message}" if field else message,
                "error": ValidationError.default_code,
                "request_id": correlation_id.get(),
                "errors": errors,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        content: dict[str, Any] = {
            "detail": "Internal server error",
            "request_id": request_id,
        }
        if not get_settings().is_production:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)
