"""Rate limiting implementation using Redis with fixed window algorithm."""

import redis

from yolcu.core.config import settings
from yolcu.core.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Redis-based rate limiter using fixed window algorithm."""

    def __init__(self, redis_client=None):
        self.redis_client = redis_client or redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=0,
            decode_responses=True,
        )

    def _get_user_key(self, user_id: str, endpoint: str) -> str:
        """Get rate limit key based on user ID."""
        return f"rate_limit:user:{user_id}:{endpoint}"

    async def check_rate_limit(self, key: str, limit: int, window: int) -> bool:
        """Check if request is within rate limit using fixed window algorithm."""
        try:
            pipe = self.redis_client.pipeline()
            pipe.incr(key)
            pipe.ttl(key)
            current_count, ttl = pipe.execute()

            # Start the window on the first request only
            if ttl == -1:
                self.redis_client.expire(key, window)

            return bool(current_count <= limit)

        except redis.RedisError as e:
            # If Redis is down, allow request (fail open)
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return True

    async def check_user_rate_limit(
        self, user_id: str, endpoint: str, limit: int, window: int = 60
    ) -> bool:
        """Check rate limit based on user ID."""
        key = self._get_user_key(user_id, endpoint)
        return await self.check_rate_limit(key, limit, window)


# Global rate limiter instance
rate_limiter = RateLimiter()
