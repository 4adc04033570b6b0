"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """User roles."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"

    @classmethod
    def normalize(cls, role: object) -> str:
        """Upper-case a raw role value; None becomes an empty string."""
        if role is None:
            return ""
        if isinstance(role, cls):
            return role.value
        return str(role).strip().upper()


class VoucherType(str, Enum):
    """Checkout voucher kinds."""

    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"
    SHIP = "SHIP"


class PaymentMethod(str, Enum):
    """Payment methods accepted by the public order endpoint."""

    COD = "COD"
    BANK = "BANK"
