"""Domain package."""

from .entities import CartItem, CartItemInput, SessionUser
from .value_objects import PaymentMethod, UserRole, VoucherType

__all__ = [
    # Entities
    "CartItem",
    "CartItemInput",
    "SessionUser",
    # Value Objects
    "PaymentMethod",
    "UserRole",
    "VoucherType",
]
