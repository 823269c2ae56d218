# ===== app/api/middleware/rate_limit_middleware.py =====
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import time


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client-IP rate limiting on the public booking routes.

    Sliding one-second window kept in process memory, so the limit applies
    per API instance. The key is the peer address; behind a proxy, uvicorn's
    proxy_headers / forwarded_allow_ips rewrite it from trusted hops only.
    """

    def __init__(self, app, requests_per_second: int = 10, path_prefix: str = "/api/v1/public/"):
        super().__init__(app)
        self.requests_per_second = requests_per_second
        self.path_prefix = path_prefix
        self.request_times = {}
        self.last_eviction = 0.0

    @staticmethod
    def client_key(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def evict_idle(self, current_time: float) -> None:
        """Drop clients with no request inside the window"""
        if current_time - self.last_eviction < 1.0:
            return
        self.last_eviction = current_time
        idle = [key for key, times in self.request_times.items()
                if not times or current_time - times[-1] >= 1.0]
        for key in idle:
            del self.request_times[key]

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self.client_key(request)
        current_time = time.time()
        self.evict_idle(current_time)

        # Remove old timestamps (older than 1 second)
        recent = [t for t in self.request_times.get(key, []) if current_time - t < 1.0]

        if len(recent) >= self.requests_per_second:
            self.request_times[key] = recent
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limited",
                    "detail": "Rate limit exceeded. Too many requests per second.",
                    "retry_after": 1
                },
                headers={"Retry-After": "1"}
            )

        recent.append(current_time)
        self.request_times[key] = recent
        return await call_next(request)
