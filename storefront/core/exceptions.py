"""Custom exceptions for the storefront core."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class StorageException(StorefrontException):
    """Storage backend could not be configured."""

    pass


class ValidationException(StorefrontException):
    """Input validation errors."""

    pass


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class ApiException(StorefrontException):
    """Remote API call failed or answered with an error."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"API error {status}: {message}")
        self.status = status
        self.detail = message
