# storefront/api/middleware.py
import threading
import time
from typing import Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# localhost na dowolnym porcie (vite itp.) i domeny hostingu render
ALLOWED_ORIGIN_REGEX = r"^(http://localhost:\d{4,5}|https://.*\.onrender\.com)$"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def allowed_origins() -> list[str]:
    origins = [settings.FRONTEND_URL, "http://localhost:3000", "http://localhost:5173"]
    return [o for o in origins if o]


class FixedWindowRateLimiter:
    """Budzet zadan na okno czasowe per klient (adres IP)."""

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._next_sweep = 0.0
        self._lock = threading.Lock()

    def hit(self, client: str, now: float | None = None) -> Tuple[bool, int, float]:
        """Zwraca (dozwolone, pozostalo, sekundy do resetu)."""
        now = time.monotonic() if now is None else now
        with self._lock:
            self._evict_expired(now)
            started, count = self._windows.get(client, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[client] = (started, count)
        reset_in = max(0.0, self.window_seconds - (now - started))
        return count <= self.max_requests, max(0, self.max_requests - count), reset_in

    def _evict_expired(self, now: float) -> None:
        # wywolywane pod lockiem, najwyzej raz na okno
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.window_seconds
        expired = [c for c, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for client in expired:
            del self._windows[client]


def install_middleware(app: FastAPI, limiter: FixedWindowRateLimiter | None = None) -> None:
    limiter = limiter or FixedWindowRateLimiter(
        settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS
    )
    app.state.rate_limiter = limiter

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(int(reset_in)),
        }
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client}")
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Too many requests, please try again later."},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def product_cache_headers(request: Request, call_next):
        response = await call_next(request)
        if request.method == "GET" and request.url.path.startswith("/api/products"):
            if settings.IS_PRODUCTION:
                response.headers["Cache-Control"] = f"public, max-age={settings.PRODUCTS_CACHE_SECONDS}"
            else:
                response.headers["Cache-Control"] = "no-store"
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_origin_regex=ALLOWED_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
