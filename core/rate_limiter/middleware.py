import math
from typing import Callable, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.log import logger
from core.rate_limiter.key_builder import RateLimitKeyBuilder
from core.rate_limiter.memory import InMemoryRateLimiter


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed ``limit`` requests per ``window`` seconds"""

    def __init__(
        self,
        app,
        limiter: Optional[InMemoryRateLimiter] = None,
        enabled: bool = True,
        limit: int = 60,
        window: int = 60,
        key_func: Optional[Callable[[Request], str]] = None,
        exclude_paths: Optional[list[str]] = None,
    ):
        super().__init__(app)
        self.limiter = limiter or InMemoryRateLimiter()
        self.enabled = enabled
        self.limit = limit
        self.window = window
        self.key_func = key_func or RateLimitKeyBuilder.build_key
        self.exclude_paths = exclude_paths or []

    def _should_exclude(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or request.method == "OPTIONS":
            return await call_next(request)

        if self._should_exclude(request.url.path):
            return await call_next(request)

        key = self.key_func(request)
        decision = await self.limiter.hit(key, self.limit, self.window)

        if not decision.allowed:
            retry_after = math.ceil(decision.retry_after or 0)
            logger.warning(f"Rate limit exceeded for {key} on {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "message": "Too many requests, please try again later",
                    "retry_after": retry_after,
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Window"] = str(self.window)
        return response
