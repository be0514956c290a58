"""Rate limiting for the AI-backed routes, using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from fridgechef.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_hour}/hour"],
    storage_uri="memory://",
)


def get_rate_limit_exceeded_handler():
    return _rate_limit_exceeded_handler


def rate_limit_dependency(request: Request) -> None:
    """
    Count the request against the hourly limit of its client.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    if not limiter.enabled:
        return
    # The limiter is evaluated by hand because only some routes are limited;
    # `_check_request_limit` raises RateLimitExceeded when the limit is hit.
    limiter._check_request_limit(request, endpoint_func=None)
