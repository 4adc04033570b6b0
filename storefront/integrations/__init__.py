"""Integrations package - remote API and shared storage backends."""

from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.redis_storage import RedisStorage

__all__ = [
    "RedisStorage",
    "StorefrontApiClient",
]
