import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError

from storefront.exceptions import BaseCustomException, RateLimitError, convert_to_http_exception
from storefront.utils.logger import get_logger

logger = get_logger("error_handler")


def _error_response(status_code: int, message: str, error_type: str, details: dict, headers: dict = None):
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"message": message, "error_type": error_type, "details": details}),
        headers=headers,
    )


def setup_error_handlers(app: FastAPI):
    """
    Register exception handlers that render every error as
    ``{"message", "error_type", "details"}``

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(BaseCustomException)
    async def custom_exception_handler(request: Request, exc: BaseCustomException):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        http_exception = convert_to_http_exception(exc)
        headers = None
        if isinstance(exc, RateLimitError) and "retry_after_seconds" in exc.details:
            headers = {"Retry-After": str(exc.details["retry_after_seconds"])}
        return JSONResponse(
            status_code=http_exception.status_code,
            content=jsonable_encoder(http_exception.detail),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            "ValidationError",
            {"errors": exc.errors(), "body": exc.body},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error: {str(exc)}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Database error occurred",
            "DatabaseError",
            {"operation": "database_operation", "original_error": str(exc)},
        )

    @app.exception_handler(JWTError)
    async def jwt_exception_handler(request: Request, exc: JWTError):
        logger.error(f"JWT error: {str(exc)}")
        return _error_response(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid token",
            "TokenError",
            {"original_error": str(exc)},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "InternalServerError",
            {
                "original_error": str(exc),
                "traceback": traceback.format_exc() if logger.isEnabledFor(logging.DEBUG) else None,
            },
        )
