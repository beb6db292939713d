import json
import logging
from typing import Any, Dict, Iterable, Optional

import redis

from trade_index import config

logger = logging.getLogger(__name__)


class RedisService:
    """
    Best-effort JSON cache. Every failure is logged and treated as a miss, so
    callers never depend on Redis being up.
    """

    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url or config.REDIS_URL
        self.client = None
        if self.redis_url:
            try:
                self.client = redis.from_url(self.redis_url, decode_responses=True)
                self.client.ping()
                logger.info("Connected to Redis for caching.")
            except redis.RedisError as e:
                logger.warning(f"Failed to connect to Redis: {e}. Caching disabled.")
                self.client = None
        else:
            logger.info("REDIS_URL not set. Caching disabled.")

    def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Fetches all keys with one MGET; misses are left out of the result."""
        keys = list(keys)
        if not self.client or not keys:
            return {}
        try:
            values = self.client.mget(keys)
        except redis.RedisError as e:
            logger.warning(f"Redis mget error: {e}")
            return {}

        found = {}
        for key, data in zip(keys, values):
            if data is None:
                continue
            try:
                found[key] = json.loads(data)
            except ValueError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")
        return found

    def set_many(self, values: Dict[str, Any], ttl_seconds: int = 60):
        if not self.client or not values:
            return
        try:
            pipe = self.client.pipeline()
            for key, value in values.items():
                pipe.setex(key, ttl_seconds, json.dumps(value, default=str))
            pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Redis set error: {e}")

