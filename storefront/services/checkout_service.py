"""Checkout: price the cart and submit it as a public online order."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable
from urllib.parse import quote as url_quote

from pydantic import BaseModel, Field, field_validator

from storefront.core.cart_store import CartStore
from storefront.core.constants import (
    DELIVERY_METHOD,
    LAST_ORDER_PHONE_KEY,
    ORDER_CHANNEL,
    ORDER_ENDPOINT,
    ORDER_INITIAL_STATUS,
    ORDER_TRACK_ENDPOINT,
)
from storefront.core.exceptions import ApiException, ValidationException
from storefront.core.storage import KeyValueStorage
from storefront.core.order_math import (
    DEFAULT_VOUCHERS,
    Voucher,
    calc_shipping_fee,
    calc_subtotal,
    calc_total,
    calc_voucher_discount,
    find_voucher,
)
from storefront.domain.entities.cart_item import CartItem
from storefront.domain.value_objects import PaymentMethod
from storefront.integrations.api_client import StorefrontApiClient

logger = logging.getLogger(__name__)


class CustomerInfo(BaseModel):
    """Delivery details entered on the checkout form."""

    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    email: str = ""
    note: str = ""

    @field_validator("full_name", "phone", "address", "email", "note", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return str(v or "").strip()


@dataclass
class CheckoutQuote:
    items: list[CartItem]
    subtotal: float
    shipping_fee: int
    discount: int
    total: float
    voucher_code: str | None = None
    buy_now: bool = False


@dataclass
class OrderResult:
    code: str
    order: dict[str, Any] = field(default_factory=dict)


@dataclass
class OrderHistory:
    """Orders placed with one phone number, newest first as the API returns them."""

    phone: str
    orders: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0


class CheckoutService:
    """Builds quotes from the cart (or a single buy-now item) and places orders."""

    def __init__(
        self,
        cart: CartStore,
        api: StorefrontApiClient | None = None,
        vouchers: Iterable[Voucher] = DEFAULT_VOUCHERS,
        storage: KeyValueStorage | None = None,
    ):
        self._cart = cart
        self._api = api
        self._vouchers = tuple(vouchers)
        self._storage = storage

    @property
    def vouchers(self) -> tuple[Voucher, ...]:
        return self._vouchers

    def quote(self, voucher_code: str | None = None, buy_now_item: CartItem | None = None) -> CheckoutQuote:
        """Price the cart. A buy-now item is priced alone and never touches the cart."""
        items = [buy_now_item] if buy_now_item is not None else self._cart.get_cart()
        voucher = find_voucher(voucher_code, self._vouchers)
        if voucher_code and voucher is None:
            logger.info("Unknown voucher code %r ignored", voucher_code)

        subtotal = calc_subtotal(items)
        shipping_fee = calc_shipping_fee(subtotal, len(items), voucher)
        discount = calc_voucher_discount(subtotal, voucher)
        return CheckoutQuote(
            items=items,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            discount=discount,
            total=calc_total(subtotal, shipping_fee, discount),
            voucher_code=voucher.code if voucher else None,
            buy_now=buy_now_item is not None,
        )

    @staticmethod
    def build_order_payload(
        customer: CustomerInfo,
        quote: CheckoutQuote,
        payment_method: PaymentMethod | str = PaymentMethod.COD,
    ) -> dict[str, Any]:
        method = payment_method.value if isinstance(payment_method, PaymentMethod) else str(payment_method)
        payload: dict[str, Any] = {
            "channel": ORDER_CHANNEL,
            "status": ORDER_INITIAL_STATUS,
            "customer": {
                "name": customer.full_name,
                "phone": customer.phone,
                "email": customer.email,
            },
            "delivery": {
                "method": DELIVERY_METHOD,
                "address": customer.address,
                "receiverName": customer.full_name,
                "receiverPhone": customer.phone,
                "note": customer.note,
            },
            "payment": {"method": method or PaymentMethod.COD.value, "amount": 0},
            "items": [
                {"productId": item.variant_id or item.id, "qty": int(item.qty)}
                for item in quote.items
            ],
            "extraFee": quote.shipping_fee,
            "discount": quote.discount,
        }
        if quote.voucher_code:
            payload["voucherCode"] = quote.voucher_code
        return payload

    async def submit_order(
        self,
        customer: CustomerInfo,
        voucher_code: str | None = None,
        payment_method: PaymentMethod | str = PaymentMethod.COD,
        buy_now_item: CartItem | None = None,
    ) -> OrderResult:
        """Post the order; the cart is cleared only after a successful cart checkout."""
        api = self._require_api("Checkout")

        quote = self.quote(voucher_code, buy_now_item)
        if not quote.items:
            raise ValidationException("Cart is empty")

        payload = self.build_order_payload(customer, quote, payment_method)
        response = await api.post(ORDER_ENDPOINT, payload)
        if not isinstance(response, dict) or not response.get("ok"):
            message = response.get("message") if isinstance(response, dict) else None
            raise ApiException(200, str(message or "ORDER_FAILED"))

        order = response.get("order") or {}
        result = OrderResult(code=str(order.get("code", "")), order=order)
        logger.info("Order %s placed with %s line(s)", result.code, len(quote.items))

        if not quote.buy_now:
            self._cart.clear_cart()
        self._remember_phone(customer.phone)
        return result

    def _remember_phone(self, phone: str) -> None:
        if self._storage is None or not phone:
            return
        try:
            self._storage.set_item(LAST_ORDER_PHONE_KEY, phone)
        except Exception as e:
            logger.warning("Could not save last order phone: %s", e)

    def last_order_phone(self) -> str | None:
        if self._storage is None:
            return None
        return (self._storage.get_item(LAST_ORDER_PHONE_KEY) or "").strip() or None

    def _require_api(self, action: str) -> StorefrontApiClient:
        if self._api is None:
            raise ValidationException(f"{action} requires an API client")
        return self._api

    async def track_orders(self, phone: str | None = None) -> OrderHistory | None:
        """Orders placed with ``phone``, or with the phone of the last order.

        Returns None when no phone is given and none was saved.
        """
        phone = (phone or "").strip() or self.last_order_phone()
        if not phone:
            return None
        api = self._require_api("Order tracking")
        response = await api.get(
            f"{ORDER_TRACK_ENDPOINT}/{url_quote(phone, safe='')}", branch_scoped=False
        )
        if not isinstance(response, dict) or not response.get("ok"):
            message = response.get("message") if isinstance(response, dict) else None
            raise ApiException(200, str(message or "TRACK_FAILED"))
        orders = [o for o in response.get("orders") or [] if isinstance(o, dict)]
        total = response.get("total")
        return OrderHistory(phone=phone, orders=orders, total=int(total) if total is not None else len(orders))

    async def get_order(self, code: str) -> dict[str, Any] | None:
        """Public order detail by order code."""
        api = self._require_api("Order lookup")
        response = await api.get(f"{ORDER_ENDPOINT}/{url_quote(str(code), safe='')}", branch_scoped=False)
        if not isinstance(response, dict):
            return None
        order = response.get("order")
        return order if isinstance(order, dict) else None
