import os
import redis
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class RedisConfig:
    """Where appointment notification events are queued."""

    def __init__(self):
        self.url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.socket_timeout = int(os.getenv("REDIS_SOCKET_TIMEOUT", 5))
        self.notification_queue = os.getenv("REDIS_NOTIFICATION_QUEUE", "notifications:appointments")

        self._client: Optional[redis.Redis] = None

    def get_client(self) -> redis.Redis:
        """Client is created on first use; no connection is opened until a command runs."""
        if not self._client:
            self._client = redis.Redis.from_url(
                self.url,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
                decode_responses=True
            )
        return self._client

    def close(self):
        if self._client:
            self._client.close()
            self._client = None


redis_config = RedisConfig()


def get_redis_client() -> redis.Redis:
    return redis_config.get_client()
