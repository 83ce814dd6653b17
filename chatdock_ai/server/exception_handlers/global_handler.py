"""
Global Exception Handlers for the FastAPI Application.

Unhandled exceptions are logged with request context and answered with a
JSON body carrying an error id. Backend failures get their own 502 response
so clients can tell "the model is unreachable" from a server bug.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chatdock_ai.agent_core.backend.base import LLMBackendError
from chatdock_ai.core.logging_config import get_logger

logger = get_logger(__name__)


async def backend_error_handler(request: Request, exc: LLMBackendError) -> JSONResponse:
    logger.error(f"LLM backend failure in {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "error_type": type(exc).__name__, "status_code": exc.status_code},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception and return a 500 response with an error id.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id, "error_type": type(exc).__name__},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(LLMBackendError, backend_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
