"""
Pydantic Models - catalog snapshots and checkout schemas

Contains the Pydantic models shared by the cart and checkout:
- ProductSnapshot: the product fields the cart keeps for display
- Checkout request models sent to the order-placement backend
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from medstore.money import MAX_PRICE


# ============================================================
# Enums
# ============================================================

class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""
    COD = "cod"  # Cash on delivery
    ONLINE = "online"
    WALLET = "wallet"


# ============================================================
# Catalog
# ============================================================

class ProductSnapshot(BaseModel):
    """
    Product fields captured when an item is added to the cart.

    Accepts catalog records as returned by the products API
    (``_id``, ``imageUrl``) as well as snake_case keys. Unknown
    catalog fields are dropped. ``product_ref`` is kept exactly as
    given so callers can look the row up with their own identifier.
    """
    model_config = ConfigDict(extra="ignore")

    product_ref: str = Field(
        min_length=1,
        validation_alias=AliasChoices("product_ref", "_id", "productRef"),
    )
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0, le=MAX_PRICE, validation_alias=AliasChoices("price", "unit_price"))
    image: str = Field(validation_alias=AliasChoices("image", "imageUrl"))
    stock: Optional[int] = None  # None = not tracked

    @field_validator("product_ref")
    @classmethod
    def product_ref_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("product_ref must not be blank")
        return v

    @field_validator("name", "image")
    @classmethod
    def strip_display_text(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        if info.field_name == "name" and not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def price_must_be_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("price must be a finite number")
        return v


# ============================================================
# Checkout
# ============================================================

class ShippingAddress(BaseModel):
    """Delivery address collected on the checkout page."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1, alias="postalCode")
    phone: str = Field(min_length=1, pattern=r"^[0-9]{10}$")
    country: str = "India"


class OrderLine(BaseModel):
    """One product reference and quantity in an order request."""
    product: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class OrderRequest(BaseModel):
    """Order payload built from the cart at checkout."""
    items: List[OrderLine] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.COD
    expected_total: Decimal

    def to_payload(self) -> dict:
        """Render the JSON body for POST /api/orders."""
        return {
            "items": [line.model_dump() for line in self.items],
            "shippingAddress": self.shipping_address.model_dump(by_alias=True),
            "paymentMethod": self.payment_method.value,
            "expectedTotal": str(self.expected_total),
        }


__all__ = [
    "PaymentMethod",
    "ProductSnapshot",
    "ShippingAddress",
    "OrderLine",
    "OrderRequest",
]
