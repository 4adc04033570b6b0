"""Shared pytest fixtures for store-backed tests."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from storefront.core.branch_context import BranchContext
from storefront.core.cart_store import CartStore, create_cart_store
from storefront.core.session import AuthSession
from storefront.core.storage import MemoryStorage


@dataclass
class FakeWorkerThread:
    stopped: bool = False

    def stop(self) -> None:
        self.stopped = True


@dataclass
class FakePubSub:
    """Records subscriptions; tests deliver messages through ``handlers``."""

    handlers: dict[str, Any] = field(default_factory=dict)
    threads: list[FakeWorkerThread] = field(default_factory=list)

    def subscribe(self, **handlers: Any) -> None:
        self.handlers.update(handlers)

    def run_in_thread(self, sleep_time: float = 0.0, daemon: bool = False) -> FakeWorkerThread:
        thread = FakeWorkerThread()
        self.threads.append(thread)
        return thread


@dataclass
class FakeRedisClient:
    """In-process stand-in for the redis client methods the storage uses."""

    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    published: list[tuple[str, str]] = field(default_factory=list)
    pubsubs: list[FakePubSub] = field(default_factory=list)

    def ping(self) -> bool:
        return True

    def get(self, key: str):
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.data[key] = value
        self.expiry[key] = ttl
        return True

    def delete(self, key: str) -> int:
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1

    def pubsub(self, ignore_subscribe_messages: bool = False) -> FakePubSub:
        pubsub = FakePubSub()
        self.pubsubs.append(pubsub)
        return pubsub


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def cart(storage: MemoryStorage) -> CartStore:
    return create_cart_store(storage)


@pytest.fixture()
def branches(storage: MemoryStorage) -> BranchContext:
    return BranchContext(storage)


@pytest.fixture()
def session(storage: MemoryStorage) -> AuthSession:
    return AuthSession(storage)


@pytest.fixture()
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    """Keep developer env vars from leaking into config tests."""
    for name in (
        "REDIS_URL",
        "STOREFRONT_STORAGE",
        "STOREFRONT_KEY_PREFIX",
        "STOREFRONT_API_URL",
        "STOREFRONT_API_TIMEOUT",
        "SENTRY_DSN",
        "ENVIRONMENT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
