import json
import hashlib
import logging
from typing import Dict, Optional

import redis

from weekplanner.config.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class ScheduleCache:
    def __init__(self, redis_url: str = settings.redis_url, ttl_seconds: int = settings.cache_ttl_seconds):
        self.redis_client = redis.from_url(redis_url, decode_responses=True)
        self.ttl_seconds = ttl_seconds

    def get(self, request_hash: str) -> Optional[Dict]:
        """Retrieve cached placement by request hash; unreachable Redis is a miss."""
        try:
            cached = self.redis_client.get(f"autoschedule:{request_hash}")
        except redis.RedisError as exc:
            logger.warning(f"Cache read failed: {exc}")
            return None
        if cached:
            return json.loads(cached)
        return None

    def set(self, request_hash: str, result: Dict) -> None:
        """Cache placement result with TTL."""
        try:
            self.redis_client.setex(
                f"autoschedule:{request_hash}",
                self.ttl_seconds,
                json.dumps(result, default=str)
            )
        except redis.RedisError as exc:
            logger.warning(f"Cache write failed: {exc}")

    @staticmethod
    def hash_request(payload: Dict) -> str:
        """Generate hash from a JSON-serialisable scheduling request."""
        data = json.dumps(payload, sort_keys=True, default=str)
        return hashlib.sha256(data.encode()).hexdigest()[:16]

    def health_check(self) -> bool:
        """Check Redis connection."""
        try:
            self.redis_client.ping()
            return True
        except redis.RedisError:
            return False
