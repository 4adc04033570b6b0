from __future__ import annotations

import pytest
import redis

from storefront.core.cart_store import create_cart_store
from storefront.core.exceptions import StorageException
from storefront.integrations.redis_storage import RedisStorage


@pytest.fixture
def patched_from_url(monkeypatch, fake_redis):
    import storefront.integrations.redis_storage as redis_storage_module

    monkeypatch.setattr(
        redis_storage_module.redis, "from_url", lambda *args, **kwargs: fake_redis, raising=False
    )
    return fake_redis


def test_cart_is_shared_between_instances(patched_from_url) -> None:
    cart_a = create_cart_store(RedisStorage(redis_url="redis://fake"))
    cart_b = create_cart_store(RedisStorage(redis_url="redis://fake"))

    cart_a.add_item({"id": "p1", "name": "Son", "price": 100000}, 2)

    items = cart_b.get_cart()
    assert len(items) == 1
    assert items[0].id == "p1"
    assert items[0].qty == 2
    assert "storefront:baoan_cart_v1" in patched_from_url.data


def test_keys_never_expire_by_default(fake_redis) -> None:
    storage = RedisStorage(client=fake_redis)
    storage.set_item("activeBranchId", "b1")
    assert fake_redis.expiry == {}


def test_ttl_uses_setex(fake_redis) -> None:
    storage = RedisStorage(client=fake_redis, key_prefix="shop:", ttl_seconds=60)
    storage.set_item("token", "abc")
    assert fake_redis.data["shop:token"] == "abc"
    assert fake_redis.expiry["shop:token"] == 60


def test_writes_publish_changes(fake_redis) -> None:
    storage = RedisStorage(client=fake_redis)
    storage.set_item("token", "abc")
    storage.remove_item("token")

    assert fake_redis.published == [
        ("storefront:changes", f"{storage.origin}|token"),
        ("storefront:changes", f"{storage.origin}|token"),
    ]
    assert storage.get_item("token") is None


def test_parse_change_ignores_own_writes(fake_redis) -> None:
    mine = RedisStorage(client=fake_redis)
    other = RedisStorage(client=fake_redis)

    message = {"type": "message", "data": f"{other.origin}|baoan_cart_v1"}
    assert mine.parse_change(message) == "baoan_cart_v1"
    assert other.parse_change(message) is None
    assert mine.parse_change({"type": "subscribe", "data": 1}) is None
    assert mine.parse_change({"type": "message", "data": "garbage"}) is None


def test_read_errors_degrade_to_empty_cart(fake_redis, monkeypatch) -> None:
    def _boom(key):
        raise redis.ConnectionError("down")

    monkeypatch.setattr(fake_redis, "get", _boom)
    cart = create_cart_store(RedisStorage(client=fake_redis))
    assert cart.get_cart() == []


def test_write_errors_propagate(fake_redis, monkeypatch) -> None:
    def _boom(key, value):
        raise redis.ConnectionError("down")

    monkeypatch.setattr(fake_redis, "set", _boom)
    cart = create_cart_store(RedisStorage(client=fake_redis))
    with pytest.raises(redis.ConnectionError):
        cart.clear_cart()


def test_missing_url_raises() -> None:
    with pytest.raises(StorageException):
        RedisStorage(redis_url=None)


def test_unreachable_redis_raises(monkeypatch) -> None:
    class _Down:
        def ping(self):
            raise redis.ConnectionError("refused")

    monkeypatch.setattr(redis, "from_url", lambda *args, **kwargs: _Down())
    with pytest.raises(StorageException):
        RedisStorage(redis_url="redis://nowhere")


def test_changes_from_other_origins_notify_cart_subscribers(fake_redis) -> None:
    storage = RedisStorage(client=fake_redis)
    other = RedisStorage(client=fake_redis)
    cart = create_cart_store(storage)
    notified = []
    cart.subscribe_cart(lambda: notified.append(len(cart.get_cart())))

    thread = storage.listen_changes(cart.handle_storage_event)
    create_cart_store(other).add_item({"id": "p1", "name": "Son", "price": 100000})
    handler = fake_redis.pubsubs[0].handlers["storefront:changes"]

    handler({"type": "message", "data": fake_redis.published[-1][1]})
    assert notified == [1]

    handler({"type": "message", "data": f"{storage.origin}|baoan_cart_v1"})
    handler({"type": "message", "data": f"{other.origin}|token"})
    assert notified == [1]
    assert thread is fake_redis.pubsubs[0].threads[0]
