"""Shared helpers for checkout totals, shipping and vouchers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from storefront.core.constants import (
    FREE_SHIPPING_THRESHOLD,
    FREESHIP_VOUCHER_MIN,
    SHIPPING_FEE,
)
from storefront.domain.entities.cart_item import CartItem
from storefront.domain.value_objects import VoucherType


@dataclass(frozen=True)
class Voucher:
    """Checkout voucher. ``value`` is a percent for PERCENT, VND for AMOUNT."""

    code: str
    type: VoucherType
    value: int = 0
    min_amount: int = 0
    description: str = ""


DEFAULT_VOUCHERS: tuple[Voucher, ...] = (
    Voucher("BA10", VoucherType.PERCENT, 10, 199_000, "Giảm 10%"),
    Voucher("BA20", VoucherType.PERCENT, 20, 499_000, "Giảm 20%"),
    Voucher("BA30K", VoucherType.AMOUNT, 30_000, 149_000, "Giảm 30K"),
    Voucher("FREESHIP", VoucherType.SHIP, 0, FREESHIP_VOUCHER_MIN, "Freeship toàn quốc"),
)


def find_voucher(code: str | None, vouchers: Iterable[Voucher] = DEFAULT_VOUCHERS) -> Voucher | None:
    if not code:
        return None
    code = code.strip().upper()
    for voucher in vouchers:
        if voucher.code == code:
            return voucher
    return None


def calc_subtotal(items: Iterable[CartItem]) -> float:
    return sum(item.line_total for item in items)


def calc_shipping_fee(subtotal: float, item_count: int, voucher: Voucher | None = None) -> int:
    if voucher is not None and voucher.type == VoucherType.SHIP and subtotal >= voucher.min_amount:
        return 0
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0
    return SHIPPING_FEE if item_count else 0


def is_voucher_applicable(voucher: Voucher, subtotal: float) -> bool:
    return subtotal >= voucher.min_amount


def calc_voucher_discount(subtotal: float, voucher: Voucher | None) -> int:
    """Discount on the goods; SHIP vouchers act on the fee instead."""
    if voucher is None or not is_voucher_applicable(voucher, subtotal):
        return 0
    if voucher.type == VoucherType.PERCENT:
        return math.floor(subtotal * voucher.value / 100)
    if voucher.type == VoucherType.AMOUNT:
        return int(voucher.value)
    return 0


def calc_total(subtotal: float, shipping_fee: float, discount: float) -> float:
    return max(0, subtotal + shipping_fee - discount)
