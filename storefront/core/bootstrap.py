"""Application bootstrap wiring storage, stores, session and API client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from storefront.core.branch_context import BranchContext
from storefront.core.cart_store import CartStore, create_cart_store
from storefront.core.config import Settings
from storefront.core.exceptions import StorageException
from storefront.core.logging_config import setup_logging
from storefront.core.sentry_integration import init_sentry
from storefront.core.session import AuthSession
from storefront.core.storage import KeyValueStorage, MemoryStorage
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.redis_storage import RedisStorage
from storefront.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)


@dataclass
class Storefront:
    storage: KeyValueStorage
    cart: CartStore
    branches: BranchContext
    session: AuthSession
    api: StorefrontApiClient
    checkout: CheckoutService
    watcher: Any = None

    async def close(self) -> None:
        """Stop the change watcher and release the HTTP session."""
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None
        await self.api.close()


def create_storage(settings: Settings) -> KeyValueStorage:
    """Redis when configured and reachable, memory otherwise."""
    if settings.storage.backend == "redis":
        try:
            storage = RedisStorage(settings.storage.redis_url, key_prefix=settings.storage.key_prefix)
            logger.info("Using Redis storage")
            return storage
        except StorageException as e:
            logger.warning("Failed to initialize Redis storage, using MemoryStorage: %s", e)
    logger.info("Using MemoryStorage (state is lost on restart)")
    return MemoryStorage()


def build_storefront(
    settings: Settings,
    storage: KeyValueStorage | None = None,
    watch_changes: bool = False,
) -> Storefront:
    """Create runtime components from configuration.

    With ``watch_changes`` and a Redis backend, cart writes made by other
    processes are re-emitted to local cart subscribers.
    """
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)

    storage = storage if storage is not None else create_storage(settings)
    cart = create_cart_store(storage)
    branches = BranchContext(storage)
    session = AuthSession(storage)
    api = StorefrontApiClient(
        settings.api.base_url, session, branches, timeout=settings.api.timeout
    )

    watcher = None
    if watch_changes and isinstance(storage, RedisStorage):
        watcher = storage.listen_changes(cart.handle_storage_event)

    return Storefront(
        storage=storage,
        cart=cart,
        branches=branches,
        session=session,
        api=api,
        checkout=CheckoutService(cart, api, storage=storage),
        watcher=watcher,
    )
