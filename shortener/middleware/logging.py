"""
Request Logging Middleware

One access-log line per request:
METHOD PATH STATUS LATENCY_MS IP:CLIENT_IP

Processing time is also returned in the X-Process-Time header.
"""

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("shortener.access")


def get_client_ip(request: Request) -> str:
    """
    Client IP address, honouring the first X-Forwarded-For hop set by a
    proxy or load balancer.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status code, latency and client IP."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"{request.method} {request.url.path} failed "
                f"IP:{get_client_ip(request)}"
            )
            raise

        process_time = time.perf_counter() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{get_client_ip(request)}"
        )

        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response


def add_logging_middleware(app: FastAPI) -> None:
    app.add_middleware(LoggingMiddleware)
