"""Global error handling middleware and exception handlers"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import traceback
import logging

from forms_api.routers.responses import InvalidJSON, invalid_json_response

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Global error handler middleware"""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
            logger.error(traceback.format_exc())

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "message": UNEXPECTED_ERROR_MESSAGE,
                }
            )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTPException in the {success, message} shape"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def invalid_json_handler(request: Request, exc: InvalidJSON):
    logger.info(f"Rejected malformed JSON on {request.url.path}: {exc}")
    return invalid_json_response()


def setup_error_handlers(app):
    """
    Register error handling on the application

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(InvalidJSON, invalid_json_handler)
    app.add_middleware(ErrorHandlerMiddleware)
