# modelchat/core/middleware.py
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.errors import APIError, InternalError, ValidationError

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Maps unhandled exceptions to a 500 without internal details."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except APIError as e:
            logger.error(f"API Error: {e.error_message}")
            return api_error_response(e)
        except SQLAlchemyError:
            logger.exception(f"Database Error on {request.method} {request.url.path}")
            return api_error_response(InternalError("Database operation failed"))
        except Exception:
            logger.exception(f"Unexpected Error on {request.method} {request.url.path}")
            return api_error_response(InternalError())


def api_error_response(exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if not isinstance(exc, APIError):
        exc = APIError(f"HTTP_{exc.status_code}", str(exc.detail), exc.status_code, headers=exc.headers)
    if exc.status_code >= 500:
        logger.error(f"API Error: {exc.error_message}")
    return api_error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {len(exc.errors())} validation issue(s)")
    issues = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return api_error_response(ValidationError(details={"issues": issues}))
