"""Merge server flash-sale prices into products and build cart inputs from them."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from storefront.core.constants import PLACEHOLDER_IMAGE
from storefront.domain.entities.cart_item import CartItemInput


def _product_id(product: Mapping[str, Any]) -> str:
    return str(product.get("_id") or product.get("id") or "")


def _first_present(product: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if product.get(key) is not None:
            return product[key]
    return 0


def _to_millis(value: Any) -> int | None:
    if not value:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return int(parsed.timestamp() * 1000)


def apply_flash_sale_map(
    products: list[Mapping[str, Any]] | None,
    flash_map: Mapping[str, Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Override prices of products that are in an active flash sale.

    ``flash_map`` is keyed by product id, as returned by the flash-sale apply
    endpoint. Products without an active sale are returned unchanged.
    """
    flash_map = flash_map or {}
    merged: list[dict[str, Any]] = []
    for product in products or []:
        info = flash_map.get(_product_id(product))
        if not info or not info.get("isFlashSale") or not info.get("flashSalePrice"):
            merged.append(dict(product))
            continue

        original = float(_first_present(product, "basePrice", "originalPrice", "price"))
        flash_price = float(info["flashSalePrice"])
        merged.append(
            {
                **product,
                "originalPrice": original,
                "price": flash_price,
                "flashSale": {
                    "flashSaleId": str(info.get("flashSaleId") or ""),
                    "endAt": _to_millis(info.get("flashSaleEndDate")),
                    "price": flash_price,
                    "badge": str(info.get("badge") or ""),
                    "maxDiscount": float(info.get("maxDiscount") or 0),
                },
            }
        )
    return merged


def pick_image(product: Mapping[str, Any]) -> str:
    """Thumbnail, then the primary image, then the first image."""
    if product.get("thumbnail"):
        return str(product["thumbnail"])
    images = product.get("images") if isinstance(product.get("images"), list) else []
    for image in images:
        if isinstance(image, Mapping) and image.get("isPrimary") and image.get("url"):
            return str(image["url"])
    if images and isinstance(images[0], Mapping) and images[0].get("url"):
        return str(images[0]["url"])
    return PLACEHOLDER_IMAGE


def build_cart_input(
    product: Mapping[str, Any],
    variant: Mapping[str, Any] | None = None,
    price: float | None = None,
    attrs_text: str | None = None,
    image: str | None = None,
) -> CartItemInput:
    """Line item for "add to cart" / "buy now" on a product or one of its variants."""
    variant = variant or {}
    product_id = _product_id(product)
    variant_id = _product_id(variant) or None
    if price is None:
        price = float(
            variant["price"] if variant.get("price") is not None
            else _first_present(product, "price", "basePrice")
        )
    original = product.get("originalPrice")
    return CartItemInput.parse(
        {
            "id": variant_id or product_id,
            "name": product.get("name") or "",
            "price": price,
            "image": image or pick_image(product),
            "productId": product_id or None,
            "variantId": variant_id,
            "sku": variant.get("sku") or product.get("sku") or None,
            "variantName": variant.get("name") or None,
            "attrsText": attrs_text,
            "originalPrice": float(original) if original is not None else None,
        }
    )
