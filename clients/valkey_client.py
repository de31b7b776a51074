"""
Valkey (Redis-compatible) client backing the notes list cache.

Thin wrapper around redis-py with string values, JSON helpers for cached note
lists, and an atomic counter for per-organization cache generations. The
connection is verified on construction; later failures raise redis errors
and the cache layer decides how to degrade.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    String/JSON key-value access to Valkey.

    Usage:
        valkey = ValkeyClient("redis://localhost:6379/0")
        valkey.set_json("notes:list:org:0:member", [...], expire_seconds=30)
        valkey.incr("notes:generation:org")
    """

    def __init__(self, url: str, socket_timeout: float = 2.0):
        """
        Connect and ping.

        Args:
            url: Connection URL, e.g. redis://localhost:6379/0
            socket_timeout: Seconds before a cache call gives up

        Raises:
            redis.ConnectionError: Valkey unreachable at startup
        """
        self._client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._client.ping()
        logger.info("Valkey connected")

    def ping(self) -> bool:
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Value at key, or None when absent."""
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        if expire_seconds is None:
            self._client.set(key, value)
        else:
            self._client.set(key, value, ex=expire_seconds)

    def delete(self, key: str) -> bool:
        """True if the key existed."""
        return self._client.delete(key) > 0

    def incr(self, key: str) -> int:
        """Atomically increment a counter (missing counts as 0); returns the new value."""
        return int(self._client.incr(key))

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Decoded JSON at key, or None when absent.

        Raises:
            ValueError: Stored value is not JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Key '{key}' does not hold JSON: {e}")

    def close(self) -> None:
        self._client.close()
        logger.info("Valkey connection closed")
