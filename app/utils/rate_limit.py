"""
Fixed-window rate limiting.

A RateLimiter counts hits per key through a counter backend. The in-memory
counter keeps state in this process only; point RATELIMIT_STORAGE_URL at
Redis to share windows between workers.
"""
import logging
import time
from threading import Lock

import redis

logger = logging.getLogger(__name__)


class InMemoryCounter:
    """Process-local fixed-window counter."""

    def __init__(self, window_seconds, clock=time.monotonic):
        self.window_seconds = window_seconds
        self.clock = clock
        self._entries = {}  # key -> [count, reset_at]
        self._lock = Lock()

    def _cleanup(self, now):
        expired = [k for k, (_, reset_at) in self._entries.items() if reset_at <= now]
        for k in expired:
            del self._entries[k]

    def increment(self, key):
        """Count one hit for key and return the total within the current window."""
        now = self.clock()
        with self._lock:
            self._cleanup(now)
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [0, now + self.window_seconds]
            entry[0] += 1
            return entry[0]

    def reset_in(self, key):
        entry = self._entries.get(key)
        if entry is None:
            return 0
        return max(0, int(entry[1] - self.clock()) + 1)


class RedisCounter:
    """Fixed-window counter shared through Redis (SET NX EX + INCR in one MULTI)."""

    def __init__(self, client, window_seconds, prefix='ratelimit'):
        self.client = client
        self.window_seconds = window_seconds
        self.prefix = prefix

    def increment(self, key):
        redis_key = f"{self.prefix}:{key}"
        # The key is created with its TTL, so it can never outlive the window
        pipe = self.client.pipeline(transaction=True)
        pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
        pipe.incr(redis_key)
        _, count = pipe.execute()
        return int(count)

    def reset_in(self, key):
        ttl = self.client.ttl(f"{self.prefix}:{key}")
        return max(0, int(ttl or 0))


class RateLimiter:
    def __init__(self, counter, limit, scope):
        self.counter = counter
        self.limit = limit
        self.scope = scope

    def hit(self, identifier):
        """
        Record a request for identifier.

        Returns:
            tuple: (allowed, remaining)
        """
        key = f"{self.scope}:{identifier}"
        count = self.counter.increment(key)
        return count <= self.limit, max(0, self.limit - count)

    def retry_after(self, identifier):
        return self.counter.reset_in(f"{self.scope}:{identifier}")


def build_counter(storage_url, window_seconds):
    """Create the counter backend named by RATELIMIT_STORAGE_URL."""
    if not storage_url or storage_url.startswith('memory://'):
        return InMemoryCounter(window_seconds)
    client = redis.from_url(storage_url, decode_responses=True, socket_connect_timeout=5, socket_timeout=5)
    logger.info("Rate limiting backed by Redis")
    return RedisCounter(client, window_seconds)


def init_rate_limiters(app):
    """Attach the API and sign-in limiters to the app."""
    storage_url = app.config.get('RATELIMIT_STORAGE_URL', 'memory://')
    app.extensions['rate_limiters'] = {
        'api': RateLimiter(
            build_counter(storage_url, app.config['API_RATE_WINDOW']),
            app.config['API_RATE_LIMIT'],
            scope='api',
        ),
        'auth': RateLimiter(
            build_counter(storage_url, app.config['AUTH_RATE_WINDOW']),
            app.config['AUTH_RATE_LIMIT'],
            scope='auth',
        ),
    }


def get_limiter(app, name):
    return app.extensions['rate_limiters'][name]
