"""Middleware configuration for the registry API."""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from patient_registry.api.security import SecurityHeadersMiddleware, TokenAuthMiddleware

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "client_ip": client_ip,
            },
        )
        return response


def setup_middleware(app: FastAPI, enable_hsts: bool = False) -> None:
    """Install the application middleware.

    Starlette runs the most recently added middleware first, so requests
    pass through logging, then security headers, then token checks:
        1. LoggingMiddleware - logs every request, including rejected ones
        2. SecurityHeadersMiddleware - adds security headers
        3. TokenAuthMiddleware - enforces bearer tokens outside /public/
    """
    app.add_middleware(TokenAuthMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=enable_hsts)
    app.add_middleware(LoggingMiddleware)
