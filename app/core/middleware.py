import logging
import time
from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Registra método, ruta, código y duración de cada request."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        res = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {res.status_code} ({elapsed_ms:.1f} ms)")
        return res


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts
        # Swagger/Redoc cargan assets externos, no aplicar CSP ahí
        self._docs_paths = ("/docs", "/redoc", "/openapi.json")

    async def dispatch(self, request, call_next):
        res = await call_next(request)

        res.headers["X-Content-Type-Options"] = "nosniff"
        res.headers["X-Frame-Options"] = "DENY"
        res.headers["Referrer-Policy"] = "no-referrer"

        # HSTS solo si sirves por HTTPS y en producción
        if self.enable_hsts and request.url.scheme == "https":
            res.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # La API solo devuelve JSON
        if not request.url.path.startswith(self._docs_paths):
            res.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        return res


def setup_middlewares(app: FastAPI, *, prod: bool = False) -> None:
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=prod)
    app.add_middleware(RequestLoggingMiddleware)
