from .decorators import require_role, rate_limit, json_body

from .phone import to_e164

from .rate_limit import (
    InMemoryCounter,
    RedisCounter,
    RateLimiter,
    init_rate_limiters,
    get_limiter,
)

__all__ = [
    # Decorators
    "require_role",
    "rate_limit",
    "json_body",
    # Phone
    "to_e164",
    # Rate limiting
    "InMemoryCounter",
    "RedisCounter",
    "RateLimiter",
    "init_rate_limiters",
    "get_limiter",
]
