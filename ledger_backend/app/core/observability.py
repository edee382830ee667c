"""
Logging setup and request observability middleware.

Adds correlation IDs and structured logging context to requests.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Configure structured logger
logger = logging.getLogger("commerce_ledger")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def request_context(request: Request, status_code: int, duration_ms: float) -> dict:
    """Fields attached to the per-request log line."""
    context = {
        "correlation_id": request.state.correlation_id,
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    # Filled in by the router once the request has been matched
    account_id = request.path_params.get("account_id")
    if account_id is not None:
        context["account_id"] = account_id
    return context


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Correlation id and timing for every request.

    The caller's ``X-Correlation-ID`` is reused when present; both it and
    ``X-Process-Time`` (ms) are echoed on the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        started = time.perf_counter()

        response = await call_next(request)

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Correlation-ID"] = request.state.correlation_id
        response.headers["X-Process-Time"] = str(duration_ms)

        context = request_context(request, response.status_code, duration_ms)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, "%s %s -> %s", request.method, request.url.path, response.status_code, extra=context)

        return response
