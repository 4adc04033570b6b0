"""Persisted shopping cart with synchronous change notification."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

from storefront.core.constants import CART_STORAGE_KEY
from storefront.core.sentry_integration import capture_exception
from storefront.core.storage import KeyValueStorage
from storefront.domain.entities.cart_item import CartItem, CartItemInput, clamp_qty

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class CartStore:
    """Cart kept as one JSON array under a single storage key.

    Every mutation is a whole-list read-modify-write followed by a synchronous
    notification of all subscribers, in subscription order.
    """

    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0

    @property
    def key(self) -> str:
        return self._key

    # ----- listeners -------------------------------------------------

    def subscribe_cart(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable removes exactly it."""
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener()
            except Exception as exc:
                logger.warning("Cart listener %r failed: %s", listener, exc)
                capture_exception(exc, cart_key=self._key)

    # ----- persistence -----------------------------------------------

    def _load_raw(self) -> list[dict[str, Any]]:
        try:
            raw = self._storage.get_item(self._key)
        except Exception as exc:
            logger.warning("Cart read failed, treating cart as empty: %s", exc)
            return []
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Cart payload under %s is not valid JSON", self._key)
            return []
        if not isinstance(payload, list):
            return []
        return [entry for entry in payload if isinstance(entry, dict) and entry.get("id") is not None]

    def _save(self, items: list[CartItem]) -> None:
        serialized = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        self._storage.set_item(self._key, serialized)
        self._emit()

    def get_cart(self) -> list[CartItem]:
        """Current line items, newest first. Never raises."""
        return [CartItem.from_dict(entry) for entry in self._load_raw()]

    @staticmethod
    def _index_of(items: list[CartItem], item_id: Any) -> int:
        item_id = str(item_id)
        for idx, item in enumerate(items):
            if item.id == item_id:
                return idx
        return -1

    # ----- mutations -------------------------------------------------

    def add_item(self, item: CartItemInput | dict[str, Any], qty: Any = 1) -> CartItem:
        """Add ``qty`` of an item, merging into an existing line with the same id."""
        data = CartItemInput.parse(item)
        qty = clamp_qty(qty)

        items = self.get_cart()
        idx = self._index_of(items, data.id)
        if idx >= 0:
            existing = items[idx]
            existing.qty += qty
            self._save(items)
            return existing

        new_item = data.to_cart_item(qty)
        items.insert(0, new_item)
        self._save(items)
        return new_item

    def set_qty(self, item_id: Any, qty: Any) -> bool:
        items = self.get_cart()
        idx = self._index_of(items, item_id)
        if idx < 0:
            return False
        items[idx].qty = clamp_qty(qty)
        self._save(items)
        return True

    def inc_qty(self, item_id: Any) -> bool:
        items = self.get_cart()
        idx = self._index_of(items, item_id)
        if idx < 0:
            return False
        items[idx].qty += 1
        self._save(items)
        return True

    def dec_qty(self, item_id: Any) -> bool:
        """Decrease by one; the quantity never drops below 1."""
        items = self.get_cart()
        idx = self._index_of(items, item_id)
        if idx < 0:
            return False
        items[idx].qty = clamp_qty(items[idx].qty - 1)
        self._save(items)
        return True

    def remove_item(self, item_id: Any) -> bool:
        items = self.get_cart()
        idx = self._index_of(items, item_id)
        if idx < 0:
            return False
        del items[idx]
        self._save(items)
        return True

    def clear_cart(self) -> None:
        self._save([])

    def replace_cart(self, items: Iterable[CartItem | CartItemInput | dict[str, Any]]) -> list[CartItem]:
        """Overwrite the cart, merging duplicate ids and clamping quantities."""
        merged: list[CartItem] = []
        for raw in items:
            if isinstance(raw, CartItem):
                item = CartItem.from_dict(raw.to_dict())
            else:
                qty = raw.get("qty", 1) if isinstance(raw, dict) else 1
                item = CartItemInput.parse(raw).to_cart_item(qty)
            idx = self._index_of(merged, item.id)
            if idx >= 0:
                merged[idx].qty += item.qty
            else:
                merged.append(item)
        self._save(merged)
        return merged

    # ----- queries ---------------------------------------------------

    def find_cart_item(self, item_id: Any) -> CartItem | None:
        items = self.get_cart()
        idx = self._index_of(items, item_id)
        return items[idx] if idx >= 0 else None

    def get_cart_count(self) -> int:
        return sum(item.qty for item in self.get_cart())

    def get_cart_total(self) -> float:
        return sum(item.price * item.qty for item in self.get_cart())

    # ----- cross-context resync --------------------------------------

    def handle_storage_event(self, key: str | None) -> bool:
        """Re-emit a change made through another handle on the same storage.

        ``key`` None means the whole storage was cleared.
        """
        if key is not None and key != self._key:
            return False
        self._emit()
        return True


def create_cart_store(storage: KeyValueStorage, key: str = CART_STORAGE_KEY) -> CartStore:
    """Build an independent cart store over ``storage``."""
    return CartStore(storage, key=key)
