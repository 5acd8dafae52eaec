"""Exception handlers translating domain errors into HTTP responses.

The mapping keys on ``DomainError.kind`` only, never on message text.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from patient_registry.domain.ports import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.UNAUTHORIZED: 401,
}

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Translate a domain error into its HTTP status.

    Parameters:
        request: Request that failed
        exc: Classified domain failure

    Returns:
        JSONResponse: ``{"error": <message>}`` with the status mapped from ``exc.kind``
    """
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code == 500:
        logger.error(f"Unmapped domain error kind {exc.kind} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    logger.info(f"{request.method} {request.url.path} rejected ({exc.kind.value}): {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide internals from the client; keep the traceback in the log."""
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain and catch-all handlers on ``app``."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
