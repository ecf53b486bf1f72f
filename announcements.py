"""Redis broadcast of queue calls and dashboard caching.

Redis is optional.  When ``REDIS_URL`` is unset or the server cannot be
reached, ``get_redis`` returns ``None`` and nothing is broadcast.  Failures
while talking to Redis are logged; they never undo a queue call.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import redis

from config import CALL_CHANNEL, DASHBOARD_CACHE_KEY, DASHBOARD_CACHE_TTL, REDIS_URL

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis() -> Optional[redis.Redis]:
    """Get the Redis client if configured and reachable."""
    global _redis_client
    if not REDIS_URL:
        return None

    if _redis_client is None:
        try:
            client = redis.from_url(REDIS_URL, decode_responses=True)
            client.ping()
            _redis_client = client
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}")
            return None

    return _redis_client


class RedisCallPublisher:
    """Queue-engine listener that publishes each call to a Redis channel."""

    def __init__(self, client: redis.Redis, channel: str = CALL_CHANNEL) -> None:
        self.client = client
        self.channel = channel

    def __call__(self, room_id: str, queue_number: int) -> None:
        message = json.dumps({
            "type": "queue_called",
            "room_id": room_id,
            "queue_number": queue_number,
            "timestamp": datetime.utcnow().isoformat(),
        })
        try:
            self.client.publish(self.channel, message)
        except redis.RedisError as e:
            logger.warning(f"Redis publish error: {e}")


def cache_dashboard(client: redis.Redis, payload: Dict[str, Any]) -> None:
    try:
        client.setex(DASHBOARD_CACHE_KEY, DASHBOARD_CACHE_TTL, json.dumps(payload))
    except redis.RedisError as e:
        logger.warning(f"Redis cache error: {e}")


def get_cached_dashboard(client: redis.Redis) -> Optional[Dict[str, Any]]:
    try:
        cached = client.get(DASHBOARD_CACHE_KEY)
    except redis.RedisError as e:
        logger.warning(f"Redis get error: {e}")
        return None
    return json.loads(cached) if cached else None
