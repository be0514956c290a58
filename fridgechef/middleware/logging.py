"""Request/response logging middleware."""

import logging
import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from fridgechef.core.request_id import bind_request_id, new_request_id

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ("api_key", "password", "token", "secret", "auth")


def mask_sensitive(params: Dict[str, Any]) -> Dict[str, Any]:
    """Hide values whose key looks like a credential."""
    masked: Dict[str, Any] = {}
    for key, value in params.items():
        if any(word in key.lower() for word in SENSITIVE_KEYS):
            masked[key] = "***"
        else:
            masked[key] = value
    return masked


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request and its outcome with timing.

    Only the query string is logged; bodies (uploaded photos, chat messages)
    are left for the route handlers to read.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        bind_request_id(request_id)
        request.state.request_id = request_id

        start_time = time.time()
        method = request.method
        path = request.url.path

        logger.info(
            f"API Request: {method} {path}",
            extra={
                "method": method,
                "path": path,
                "query": mask_sensitive(dict(request.query_params)),
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"API Error: {method} {path} - {str(e)}",
                extra={
                    "method": method,
                    "path": path,
                    "process_time_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            raise

        logger.info(
            f"API Response: {method} {path} - {response.status_code}",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "process_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response
