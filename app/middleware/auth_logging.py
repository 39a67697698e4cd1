from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.security import parse_bearer_token

logger = logging.getLogger("app")

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_token = parse_bearer_token(request.headers.get("Authorization")) is not None

        # Every mutation needs a signed-in caller
        if not has_token and request.method in MUTATING_METHODS:
            logger.warning(f"{request.method} {path} called without a bearer token")

        response = await call_next(request)

        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
