"""Exception handlers turning unexpected failures into 500 plain-text responses."""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Malformed requests get the same 500 + message contract as every other failure."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning(f"Invalid request to {request.url.path}: {details}")
    return PlainTextResponse(f"invalid request: {details}", status_code=500)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates during request processing."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return PlainTextResponse(str(e) or "Internal server error", status_code=500)
