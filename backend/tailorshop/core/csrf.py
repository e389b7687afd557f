"""CSRF protection using double-submit cookie pattern.

When using HttpOnly cookie auth, state-changing requests (POST, PUT, PATCH,
DELETE) need CSRF protection. GET/HEAD/OPTIONS are safe.

The client reads the csrf_token cookie (not HttpOnly) and sends it back
as the X-CSRF-Token header. The server compares the two values.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from tailorshop.core.config import settings
from tailorshop.core.security import COOKIE_ACCESS_NAME, COOKIE_CSRF_NAME

logger = logging.getLogger(__name__)

UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

CSRF_EXEMPT_PATHS = {
    "/health",
    "/health/ready",
    f"{settings.api_v1_prefix}/auth/login",
}


class CSRFMiddleware(BaseHTTPMiddleware):
    """Double-submit cookie CSRF protection.

    Only enforced when the request is authenticated via cookies
    (has an access_token cookie but no Authorization header).
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method not in UNSAFE_METHODS or request.url.path in CSRF_EXEMPT_PATHS:
            return await call_next(request)

        has_cookie_auth = COOKIE_ACCESS_NAME in request.cookies
        has_bearer_auth = request.headers.get("Authorization", "").startswith("Bearer ")

        if has_cookie_auth and not has_bearer_auth:
            cookie_csrf = request.cookies.get(COOKIE_CSRF_NAME, "")
            header_csrf = request.headers.get("X-CSRF-Token", "")

            if not cookie_csrf or not header_csrf or cookie_csrf != header_csrf:
                logger.warning(
                    f"CSRF validation failed: path={request.url.path} "
                    f"method={request.method} cookie={'set' if cookie_csrf else 'missing'} "
                    f"header={'set' if header_csrf else 'missing'}"
                )
                # Middleware exceptions bypass FastAPI handlers, so answer directly
                return JSONResponse(
                    status_code=status.HTTP_403_FORBIDDEN,
                    content={"detail": "CSRF validation failed"},
                )

        return await call_next(request)
