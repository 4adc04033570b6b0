"""Redis-backed key-value storage shared between processes."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

import redis

from storefront.core.constants import DEFAULT_KEY_PREFIX
from storefront.core.exceptions import StorageException

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str], None]


class RedisStorage:
    """Storage persisted in Redis under a key prefix.

    Keys never expire unless ``ttl_seconds`` is given. Every write publishes
    ``<origin>|<key>`` on ``changes_channel`` so other processes sharing the
    same Redis can resync; a storage instance ignores its own publications.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: int | None = None,
        client: Any = None,
    ):
        self._redis_url = redis_url
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds
        self._client = client if client is not None else self._init_client()
        self.origin = uuid.uuid4().hex
        self.changes_channel = f"{key_prefix}changes"

    def _init_client(self):
        if not self._redis_url:
            raise StorageException("REDIS_URL is not set")
        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
        except redis.RedisError as exc:
            raise StorageException(f"Redis storage init failed: {exc}") from exc
        logger.info("Redis storage enabled")
        return client

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _publish(self, key: str) -> None:
        try:
            self._client.publish(self.changes_channel, f"{self.origin}|{key}")
        except redis.RedisError as exc:
            # The value itself is stored; only the cross-process hint is lost
            logger.warning("Failed to publish storage change for %s: %s", key, exc)

    def get_item(self, key: str) -> str | None:
        return self._client.get(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        if self._ttl_seconds:
            self._client.setex(self._key(key), self._ttl_seconds, value)
        else:
            self._client.set(self._key(key), value)
        self._publish(key)

    def remove_item(self, key: str) -> None:
        self._client.delete(self._key(key))
        self._publish(key)

    def parse_change(self, message: Any) -> str | None:
        """Return the changed key from a pub/sub message written by another origin."""
        if not isinstance(message, dict) or message.get("type") != "message":
            return None
        data = message.get("data")
        if not isinstance(data, str) or "|" not in data:
            return None
        origin, key = data.split("|", 1)
        if origin == self.origin:
            return None
        return key

    def listen_changes(self, handler: ChangeHandler):
        """Call ``handler(key)`` for writes made by other processes.

        Returns the pub/sub worker thread; stop it with ``thread.stop()``.
        """

        def _on_message(message: Any) -> None:
            key = self.parse_change(message)
            if key is not None:
                handler(key)

        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(**{self.changes_channel: _on_message})
        return pubsub.run_in_thread(sleep_time=0.1, daemon=True)
