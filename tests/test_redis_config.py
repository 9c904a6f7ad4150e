"""Tests for the notification queue's Redis settings."""

from app.config.redis_config import RedisConfig


class TestRedisConfig:
    def test_defaults(self, monkeypatch):
        for name in ("REDIS_URL", "REDIS_SOCKET_TIMEOUT", "REDIS_NOTIFICATION_QUEUE"):
            monkeypatch.delenv(name, raising=False)

        config = RedisConfig()

        assert config.url == "redis://localhost:6379/0"
        assert config.notification_queue == "notifications:appointments"

    def test_client_built_from_environment(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache.internal:6380/2")
        monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "3")
        monkeypatch.setenv("REDIS_NOTIFICATION_QUEUE", "notifications:test")

        config = RedisConfig()
        client = config.get_client()
        kwargs = client.connection_pool.connection_kwargs

        assert config.notification_queue == "notifications:test"
        assert kwargs["host"] == "cache.internal"
        assert kwargs["port"] == 6380
        assert kwargs["db"] == 2
        assert kwargs["socket_timeout"] == 3
        assert config.get_client() is client

    def test_close_drops_client(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
        config = RedisConfig()
        client = config.get_client()

        config.close()

        assert config.get_client() is not client
