"""Cart line items and the persisted slot format."""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from medstore.errors import CartDataError
from medstore.models import ProductSnapshot
from medstore.money import MAX_PRICE, multiply, parse_decimal, round_money, to_decimal

# Units of one product a single cart row may hold
MAX_LINE_QUANTITY = 9999


@dataclass
class LineItem:
    """Single product row in the cart."""
    product_ref: str
    name: str
    unit_price: Decimal
    quantity: int
    image: str = ""
    stock: Optional[int] = None  # Stock seen when the product was added
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()
        self.unit_price = to_decimal(self.unit_price)

    @classmethod
    def from_snapshot(cls, product: ProductSnapshot, quantity: int) -> "LineItem":
        return cls(
            product_ref=product.product_ref,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            image=product.image,
            stock=product.stock,
        )

    def refresh(self, product: ProductSnapshot) -> None:
        """Replace display fields with a newer snapshot of the same product."""
        self.name = product.name
        self.unit_price = product.price
        self.image = product.image
        self.stock = product.stock

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return round_money(multiply(self.unit_price, self.quantity))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "product_ref": self.product_ref,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "image": self.image,
            "stock": self.stock,
            "added_at": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from a persisted record.

        Raises:
            CartDataError: If the record is not item-shaped
        """
        if not isinstance(data, dict):
            raise CartDataError(f"line item must be an object, got {type(data).__name__}")

        product_ref = data.get("product_ref")
        if not isinstance(product_ref, str) or not product_ref.strip():
            raise CartDataError("line item has no product_ref")

        quantity = data.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise CartDataError(f"invalid quantity for {product_ref}: {quantity!r}")
        if not 1 <= quantity <= MAX_LINE_QUANTITY:
            raise CartDataError(f"invalid quantity for {product_ref}: {quantity!r}")

        try:
            unit_price = parse_decimal(data.get("unit_price"))
        except ValueError as e:
            raise CartDataError(f"invalid unit_price for {product_ref}: {e}")
        if unit_price < 0 or unit_price > MAX_PRICE:
            raise CartDataError(f"unit_price out of range for {product_ref}: {unit_price}")

        stock = data.get("stock")
        if stock is not None and (isinstance(stock, bool) or not isinstance(stock, int)):
            raise CartDataError(f"invalid stock for {product_ref}: {stock!r}")

        name = data.get("name", "")
        image = data.get("image", "")
        if not isinstance(name, str) or not isinstance(image, str):
            raise CartDataError(f"invalid display fields for {product_ref}")

        return cls(
            product_ref=product_ref,
            name=name,
            unit_price=unit_price,
            quantity=quantity,
            image=image,
            stock=stock,
            added_at=str(data.get("added_at") or ""),
        )


def serialize_items(items: Iterable[LineItem]) -> str:
    """Render line items as the exact string stored in the cart slot."""
    return json.dumps(
        [item.to_dict() for item in items],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def deserialize_items(raw: str) -> List[LineItem]:
    """
    Parse a cart slot value.

    Raises:
        CartDataError: If the payload is not a JSON array of unique line items
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        # Deeply nested arrays exhaust the decoder stack
        raise CartDataError(f"cart payload is not valid JSON: {e}")

    if not isinstance(data, list):
        raise CartDataError(f"cart payload must be an array, got {type(data).__name__}")

    items = [LineItem.from_dict(record) for record in data]

    seen = set()
    for item in items:
        if item.product_ref in seen:
            raise CartDataError(f"duplicate line item for {item.product_ref}")
        seen.add(item.product_ref)

    return items
