"""Infrastructure utilities (rate limiting, Redis)."""

from .rate_limiter import check_rate_limit, get_client_ip, get_user_key, rate_limit
from .redis_pool import get_redis, close_redis

__all__ = [
    # Rate limiting
    "check_rate_limit",
    "get_client_ip",
    "get_user_key",
    "rate_limit",
    # Redis
    "get_redis",
    "close_redis",
]
