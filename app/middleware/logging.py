import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("access")

class AccessLogMiddleware(BaseHTTPMiddleware):
    """Logs each API call with the caller resolved by the auth dependency"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        user = getattr(request.state, "current_user", None)
        caller = f"{user.role.value}:{user.uid}" if user is not None else "anonymous"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"[{caller}] {elapsed * 1000:.1f}ms"
        )
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response
