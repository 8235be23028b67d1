"""Redis connection and the JSON cache used for caller profiles."""

import json
from typing import Any, cast

import redis
import structlog

from app.config import settings

logger = structlog.get_logger()

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Shared client, created on first use."""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username or None,
            password=settings.redis_password or None,
            decode_responses=True,
            socket_connect_timeout=settings.redis_timeout_seconds,
            socket_timeout=settings.redis_timeout_seconds,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    try:
        return bool(get_redis_client().ping())
    except redis.RedisError:
        return False


def close_redis_connection() -> None:
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """
    JSON values under namespaced keys.

    Redis is an optimization here, never a dependency: a failed read is a
    miss and a failed write is reported as ``False``.
    """

    def __init__(self, redis_client: redis.Redis, namespace: str | None = None):
        self.redis = redis_client
        self.namespace = namespace if namespace is not None else settings.cache_namespace

    def key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def get_json(self, key: str) -> Any | None:
        try:
            value = cast(str | None, self.redis.get(self.key(key)))
        except redis.RedisError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None
        if not value:
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("cache_entry_corrupt", key=key)
            return None

    def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Serialize and store a value.

        Dates and UUIDs are stored as strings.

        Args:
            key: Key within the namespace
            value: JSON-serializable value
            ttl: Time to live in seconds, None for no expiry
        """
        payload = json.dumps(value, default=str)
        try:
            if ttl:
                self.redis.setex(self.key(key), ttl, payload)
            else:
                self.redis.set(self.key(key), payload)
        except redis.RedisError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    def delete(self, key: str) -> bool:
        try:
            self.redis.delete(self.key(key))
        except redis.RedisError as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
            return False
        return True
