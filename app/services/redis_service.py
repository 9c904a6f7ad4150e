# app/services/redis_service.py

import json
import redis
from typing import Optional, Dict, Any
from datetime import datetime
from app.config.redis_config import get_redis_client, redis_config
import logging

logger = logging.getLogger("redis")

class RedisService:
    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client: redis.Redis = client or get_redis_client()

    def enqueue_event(self, queue: str, event: Dict[str, Any]) -> bool:
        try:
            event.setdefault('queued_at', datetime.now().isoformat())
            self.redis_client.lpush(queue, json.dumps(event, default=str))
            logger.debug(f"✓ Queued {event.get('type')} on {queue}")
            return True
        except redis.RedisError as e:
            logger.error(f"❌ Error queuing event on {queue}: {e}")
            return False


def get_notification_queue_name() -> str:
    return redis_config.notification_queue
