"""Environment-driven configuration objects for the storefront core."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import DEFAULT_API_TIMEOUT, DEFAULT_API_URL, DEFAULT_KEY_PREFIX
from .exceptions import ConfigurationException

STORAGE_BACKENDS = ("memory", "redis")


def _str_to_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationException(f"{name} must be an integer, got {value!r}") from e


@dataclass(slots=True)
class StorageConfig:
    backend: str
    redis_url: str | None
    key_prefix: str


@dataclass(slots=True)
class ApiConfig:
    base_url: str
    timeout: int


@dataclass(slots=True)
class Settings:
    storage: StorageConfig
    api: ApiConfig
    sentry_dsn: str | None
    environment: str
    log_level: str


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    redis_url = os.getenv("REDIS_URL") or None
    backend = os.getenv("STOREFRONT_STORAGE", "").strip().lower()

    # Redis is picked automatically when a URL is provided and no backend is forced
    if not backend:
        backend = "redis" if redis_url else "memory"
    if backend not in STORAGE_BACKENDS:
        raise ConfigurationException(
            f"STOREFRONT_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )
    if backend == "redis" and not redis_url:
        raise ConfigurationException("STOREFRONT_STORAGE=redis requires REDIS_URL")

    storage = StorageConfig(
        backend=backend,
        redis_url=redis_url,
        key_prefix=os.getenv("STOREFRONT_KEY_PREFIX", DEFAULT_KEY_PREFIX),
    )
    api = ApiConfig(
        base_url=os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=_str_to_int(
            "STOREFRONT_API_TIMEOUT", os.getenv("STOREFRONT_API_TIMEOUT", str(DEFAULT_API_TIMEOUT))
        ),
    )

    return Settings(
        storage=storage,
        api=api,
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "production"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
