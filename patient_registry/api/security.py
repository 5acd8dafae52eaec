"""Security middleware for the registry API.

Security Impact:
    - Every path outside /public/ requires a valid bearer token
    - Security headers are added to every response
"""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from patient_registry.domain.ports import UnauthorizedError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/public/"
BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str) -> str:
    """Return the token part of an Authorization header ("" when absent)."""
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip()
    return ""


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests outside /public/ that lack a valid bearer token.

    CORS preflight requests pass through untouched.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(PUBLIC_PREFIX) or request.method == "OPTIONS":
            return await call_next(request)

        auth_service = request.app.state.container.auth
        token = extract_bearer_token(request.headers.get("Authorization", ""))
        try:
            auth_service.verify_token(token)
        except UnauthorizedError as e:
            logger.info(f"{request.method} {request.url.path} - Unauthorized: {e.message}")
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses.

    Parameters:
        app: ASGI application
        enable_hsts: Send Strict-Transport-Security (only behind HTTPS)
    """

    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Cache-Control": "no-store",
        }
        # Swagger UI loads its assets from a CDN
        if not request.url.path.startswith("/public/docs"):
            security_headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if self.enable_hsts:
            security_headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        for header, value in security_headers.items():
            response.headers[header] = value

        return response
