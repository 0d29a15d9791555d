from __future__ import annotations

import time
from typing import Any
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from supplier_api.core.logging import get_logger, request_id_var
from supplier_api.core.metrics import normalize_path, record_request_metrics

_WRITE_METHODS = {"POST", "PUT", "DELETE"}
REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id; collects latency metrics; logs failed requests and completed writes."""

    def __init__(self, app, *, log_4xx: bool = True, log_5xx: bool = True, log_writes: bool = True) -> None:
        super().__init__(app)
        self.logger = get_logger("supplier_api.requests")
        self.log_4xx = log_4xx
        self.log_5xx = log_5xx
        self.log_writes = log_writes

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        token = request_id_var.set(request_id)
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                duration = time.perf_counter() - start
                record_request_metrics(request, 500, duration)
                self._log(request, 500, duration, "Unhandled server error", "error")
                raise

            duration = time.perf_counter() - start
            status_code = response.status_code
            record_request_metrics(request, status_code, duration)

            if status_code >= 500 and self.log_5xx:
                self._log(request, status_code, duration, "Server error response", "error")
            elif status_code >= 400 and self.log_4xx:
                self._log(request, status_code, duration, "Client error response", "warning")
            elif self.log_writes and request.method in _WRITE_METHODS:
                self._log(request, status_code, duration, "Write request completed", "info")

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)

    def _log(
        self,
        request: Request,
        status_code: int,
        duration: float,
        message: str,
        level: str,
    ) -> None:
        payload: dict[str, Any] = {
            "method": request.method,
            "path": normalize_path(request),
            "status_code": status_code,
            "duration_ms": round(duration * 1000, 3),
            "client_ip": self._client_ip(request),
            "user_agent": request.headers.get("user-agent"),
        }
        log_func = getattr(self.logger, level, self.logger.error)
        log_func(message, extra=payload)

    @staticmethod
    def _client_ip(request: Request) -> str | None:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        client = request.client
        return client.host if client else None
