"""
Exception Handlers & Request Logging
"""
import time
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger


def _error_body(message: str, errors):
    return {"success": False, "message": message, "errors": errors}


async def value_error_handler(request: Request, exc: ValueError):
    """Bad input that got past schema validation (unknown location, size, ...)."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request", [str(exc)]),
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return structured error."""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "Internal server error",
            [str(exc)] if request.app.state.debug else ["An unexpected error occurred"],
        ),
    )


async def request_logging_middleware(request: Request, call_next):
    """Log method, path, status and duration for every request."""
    start_time = time.time()
    response = await call_next(request)
    duration_ms = int((time.time() - start_time) * 1000)
    logger.info(f"{request.method} {request.url.path} → {response.status_code} ({duration_ms}ms)")
    return response
