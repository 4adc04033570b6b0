"""Domain entities."""

from .cart_item import CartItem, CartItemInput
from .user import SessionUser

__all__ = ["CartItem", "CartItemInput", "SessionUser"]
