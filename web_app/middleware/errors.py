"""
Exception handlers rendering errors in the API envelope.

Known link errors keep their status code and message. Anything else is
logged with its traceback and answered with a generic 500 that carries no
internal detail.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkmon.errors import LinkError
from linkmon.common.logging_config import get_logger
from ..api.schemas import ApiResponse

logger = get_logger("web")


def _envelope(response: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=response.statusCode, content=response.model_dump())


async def link_error_handler(request: Request, exc: LinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Error in {request.url.path}: {exc.message}", exc_info=exc)
        return _envelope(ApiResponse.fail("Internal Server Error", exc.status_code))

    logger.warning(f"API error in {request.url.path}: {exc.message}")
    errors = [exc.details] if exc.details else []
    return _envelope(ApiResponse.fail(exc.message, exc.status_code, errors))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _envelope(ApiResponse.fail("Invalid request", status.HTTP_400_BAD_REQUEST, errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(ApiResponse.fail(str(exc.detail), exc.status_code))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled Error in {request.url.path}: {exc}", exc_info=exc)
    return _envelope(ApiResponse.fail("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope handlers to an app."""
    app.add_exception_handler(LinkError, link_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
