import os
import time
import uuid
from typing import Dict, Tuple
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

def _now() -> float:
    return time.time()

def _now_ms() -> int:
    return int(time.time() * 1000)

def _get_ip(request: Request) -> str:
    # Behind a proxy set CHEMSIM_TRUST_X_FORWARDED_FOR=1 and make sure the proxy sets X-Forwarded-For.
    trust = os.getenv("CHEMSIM_TRUST_X_FORWARDED_FOR", "").strip() in ("1", "true", "TRUE", "yes", "YES")
    if trust:
        xff = request.headers.get("x-forwarded-for", "")
        if xff:
            return xff.split(",")[0].strip() or "unknown"
    client = request.client
    return (client.host if client else "unknown") or "unknown"

class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        cl = request.headers.get("content-length")
        if cl:
            try:
                too_large = int(cl) > self.max_bytes
            except ValueError:
                # Malformed content-length; body validation rejects it later if needed.
                too_large = False
            if too_large:
                return JSONResponse(
                    status_code=413,
                    content={"ok": False, "error": "PAYLOAD_TOO_LARGE"},
                )
        return await call_next(request)

class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every response with x-request-id and x-elapsed-ms."""

    async def dispatch(self, request: Request, call_next):
        request.state.request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = _now_ms()
        response = await call_next(request)
        response.headers["x-request-id"] = request.state.request_id
        response.headers["x-elapsed-ms"] = str(_now_ms() - start)
        return response

class InMemoryRateLimiter:
    """Simple fixed-window limiter (single instance; sessions live in memory anyway)."""

    def __init__(self):
        self._buckets: Dict[str, Tuple[float, int]] = {}

    def allow(self, key: str, window_sec: int, limit: int) -> bool:
        now = _now()
        ts, count = self._buckets.get(key, (now, 0))
        if now - ts >= window_sec:
            self._buckets[key] = (now, 1)
            return True
        if count >= limit:
            return False
        self._buckets[key] = (ts, count + 1)
        return True

class SessionCreateRateLimitMiddleware(BaseHTTPMiddleware):
    """Every simulation session owns a ticker thread, so creation is throttled per IP."""

    def __init__(self, app, window_sec: int, limit: int, path: str = "/api/state-change/sessions"):
        super().__init__(app)
        self.window_sec = window_sec
        self.limit = limit
        self.path = path.rstrip("/")
        self._limiter = InMemoryRateLimiter()

    async def dispatch(self, request: Request, call_next):
        path = (request.url.path or "").rstrip("/")
        if request.method != "POST" or path != self.path:
            return await call_next(request)

        ip = _get_ip(request)
        if not self._limiter.allow(f"ip:{ip}", self.window_sec, self.limit):
            return JSONResponse(status_code=429, content={"ok": False, "error": "RATE_LIMITED"})
        return await call_next(request)
