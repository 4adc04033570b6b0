"""Cart line item and the validated input used to add one."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.core.constants import MIN_QUANTITY
from storefront.core.exceptions import ValidationException

# Persisted JSON name -> attribute name for optional metadata
_METADATA_FIELDS = {
    "sku": "sku",
    "productId": "product_id",
    "variantId": "variant_id",
    "variantName": "variant_name",
    "attrsText": "attrs_text",
    "originalPrice": "original_price",
}


def clamp_qty(qty: Any) -> int:
    """Coerce a quantity to an int >= 1."""
    try:
        value = int(qty)
    except (TypeError, ValueError, OverflowError):
        return MIN_QUANTITY
    return max(MIN_QUANTITY, value)


@dataclass
class CartItem:
    """Single line item in the cart."""

    id: str
    name: str
    price: float
    qty: int
    image: Any = None
    sku: Any = None
    product_id: Any = None
    variant_id: Any = None
    variant_name: Any = None
    attrs_text: Any = None
    original_price: Any = None

    @property
    def line_total(self) -> float:
        return self.price * self.qty

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "qty": int(self.qty),
        }
        if self.image is not None:
            data["image"] = self.image
        for wire_name, attr in _METADATA_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[wire_name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartItem:
        try:
            price = float(data.get("price") or 0)
        except (TypeError, ValueError):
            price = 0.0
        if price.is_integer():
            price = int(price)
        metadata = {attr: data.get(wire_name) for wire_name, attr in _METADATA_FIELDS.items()}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            price=price,
            qty=clamp_qty(data.get("qty")),
            image=data.get("image"),
            **metadata,
        )


class CartItemInput(BaseModel):
    """Fields accepted by ``CartStore.add_item``.

    ``id``, ``name`` and ``price`` are required; metadata defaults to None
    and is carried through without further checks.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    price: float = Field(..., ge=0)
    image: Any = None
    sku: Any = None
    product_id: Any = Field(None, alias="productId")
    variant_id: Any = Field(None, alias="variantId")
    variant_name: Any = Field(None, alias="variantName")
    attrs_text: Any = Field(None, alias="attrsText")
    original_price: Any = Field(None, alias="originalPrice")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("id")
    @classmethod
    def require_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id must not be empty")
        return v

    @classmethod
    def parse(cls, item: CartItemInput | dict[str, Any]) -> CartItemInput:
        """Validate raw input, raising ValidationException on bad shape."""
        if isinstance(item, cls):
            return item
        try:
            return cls.model_validate(item)
        except ValidationError as e:
            raise ValidationException(f"Invalid cart item: {e}") from e

    def to_cart_item(self, qty: int) -> CartItem:
        price = self.price
        if float(price).is_integer():
            price = int(price)
        return CartItem(
            id=self.id,
            name=self.name,
            price=price,
            qty=clamp_qty(qty),
            image=self.image,
            sku=self.sku,
            product_id=self.product_id,
            variant_id=self.variant_id,
            variant_name=self.variant_name,
            attrs_text=self.attrs_text,
            original_price=self.original_price,
        )
