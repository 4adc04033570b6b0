"""Business services built on top of the stores."""

from .checkout_service import CheckoutQuote, CheckoutService, CustomerInfo, OrderHistory, OrderResult
from .flash_sale import apply_flash_sale_map, build_cart_input

__all__ = [
    "CheckoutQuote",
    "CheckoutService",
    "CustomerInfo",
    "OrderHistory",
    "OrderResult",
    "apply_flash_sale_map",
    "build_cart_input",
]
