"""Cart store: the session's line items, mirrored into a durable slot."""
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from medstore.config import get_cart_settings
from medstore.errors import (
    ERROR_CART_CLEAR_FAILED,
    ERROR_CART_LOAD_FAILED,
    ERROR_CART_SAVE_FAILED,
    ERROR_INVALID_PRODUCT,
    ERROR_INVALID_QUANTITY,
    ERROR_QUANTITY_NOT_INT,
    ERROR_QUANTITY_TOO_LARGE,
    CartDataError,
    CartValidationError,
    StorageError,
)
from medstore.logging import describe_product_for_logging, get_logger, sanitize_string_for_logging
from medstore.models import ProductSnapshot
from medstore.money import format_money, round_money
from medstore.notifications import LogNotifier, NoticeLevel, Notifier
from .models import MAX_LINE_QUANTITY, LineItem, deserialize_items, serialize_items
from .storage import CartStorage, get_storage

logger = get_logger(__name__)

ProductInput = Union[ProductSnapshot, Mapping]


@dataclass(frozen=True)
class SyncResult:
    """Outcome of mirroring the cart into storage after a mutation."""
    ok: bool
    error: Optional[StorageError] = None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CartStore:
    """
    Line items for one shopping session.

    Every mutation finishes its storage write before returning, so the
    slot always holds ``serialize_items(store.items)``. Storage failures
    never reach the caller: they are logged, shown as an error notice
    and reported in the returned SyncResult. Mutations that change
    nothing return None.

    Usage:
        store = create_cart_store(notifier=notices)
        store.add_to_cart(product, 2)
        store.update_quantity(product["_id"], 0)  # removes the row
        total = store.get_total_price()
    """

    def __init__(
        self,
        storage: CartStorage,
        notifier: Optional[Notifier] = None,
        storage_key: Optional[str] = None,
    ):
        self.storage = storage
        self.notifier = notifier or LogNotifier()
        self.storage_key = storage_key or get_cart_settings().storage_key
        self.is_open = False
        self.last_error: Optional[str] = None
        self._items: List[LineItem] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def items(self) -> Tuple[LineItem, ...]:
        """Copies of the current line items, in insertion order."""
        return tuple(replace(item) for item in self._items)

    def get_item(self, product_ref: str) -> Optional[LineItem]:
        item = self._find(product_ref)
        return replace(item) if item else None

    def get_total_price(self) -> Decimal:
        """Sum of unit price times quantity over all line items."""
        total = sum((item.unit_price * item.quantity for item in self._items), Decimal("0"))
        return round_money(total)

    def get_item_count(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self._items)

    def get_summary(self) -> dict:
        """Cart summary for header badges and the cart drawer."""
        if not self._items:
            return {
                "is_empty": True,
                "total_items": 0,
                "items": [],
                "total": 0.0,
                "total_display": format_money(0),
            }

        total = self.get_total_price()
        return {
            "is_empty": False,
            "total_items": self.get_item_count(),
            "items": [
                {
                    "product_ref": item.product_ref,
                    "name": item.name,
                    "image": item.image,
                    "quantity": item.quantity,
                    "unit_price": float(item.unit_price),
                    "total": float(item.total_price),
                    "total_display": format_money(item.total_price),
                }
                for item in self._items
            ],
            "total": float(total),
            "total_display": format_money(total),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def hydrate(self) -> None:
        """Load the saved cart, starting empty when it is missing or unreadable."""
        self._items = []

        try:
            raw = self.storage.read(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to read saved cart: {e}")
            self.last_error = ERROR_CART_LOAD_FAILED
            self._notify(NoticeLevel.ERROR, ERROR_CART_LOAD_FAILED)
            return

        if raw is None:
            return

        try:
            self._items = deserialize_items(raw)
        except CartDataError as e:
            # Corrupted data - drop it and start over
            logger.warning(
                f"Discarding corrupted cart data under {self.storage_key!r}: "
                f"{sanitize_string_for_logging(str(e), max_length=120)}"
            )
            try:
                self.storage.delete(self.storage_key)
            except StorageError as delete_error:
                logger.warning(f"Could not remove corrupted cart data: {delete_error}")
            return

        logger.info(f"Cart hydrated with {len(self._items)} line items")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_to_cart(self, product: ProductInput, quantity: int = 1) -> Optional[SyncResult]:
        """
        Add ``quantity`` units of a product, merging with an existing row.

        Args:
            product: ProductSnapshot or catalog record (``_id``, ``name``, ``price``, ``imageUrl``, ``stock``)
            quantity: Units to add (positive integer)

        Returns:
            SyncResult, or None when stock limits left the cart unchanged

        Raises:
            CartValidationError: If the product or quantity is invalid
        """
        snapshot = self._coerce_product(product)
        if not _is_int(quantity) or quantity < 1:
            raise CartValidationError(ERROR_INVALID_QUANTITY)

        stock = snapshot.stock
        if stock is not None and stock <= 0:
            self._notify(NoticeLevel.ERROR, f"{snapshot.name} is out of stock!")
            return None

        existing = self._find(snapshot.product_ref)
        current = existing.quantity if existing else 0
        if current + quantity > MAX_LINE_QUANTITY:
            raise CartValidationError(f"{ERROR_QUANTITY_TOO_LARGE} ({MAX_LINE_QUANTITY})")

        to_add = quantity
        if stock is not None and current + quantity > stock:
            self._notify(NoticeLevel.WARNING, f"Cannot add more than available stock ({stock} items)")
            to_add = stock - current
            if to_add <= 0:
                self._notify(NoticeLevel.INFO, "Item already at maximum available quantity")
                return None

        if existing:
            existing.refresh(snapshot)
            existing.quantity += to_add
        else:
            self._items.append(LineItem.from_snapshot(snapshot, to_add))

        logger.info(
            f"Added {to_add} x {describe_product_for_logging(snapshot.product_ref, snapshot.name)} to cart"
        )

        if to_add == quantity:
            label = f"{quantity} items" if quantity > 1 else snapshot.name
            self._notify(NoticeLevel.SUCCESS, f"{label} added to cart!")
        else:
            noun = "items" if to_add > 1 else "item"
            self._notify(NoticeLevel.INFO, f"Added {to_add} {noun} to cart (maximum available)")

        return self._persist()

    def remove_from_cart(self, product_ref: str) -> Optional[SyncResult]:
        """Remove the row for ``product_ref``. Unknown refs are ignored."""
        item = self._find(product_ref)
        if item is None:
            return None

        self._items = [i for i in self._items if i.product_ref != product_ref]
        logger.info(f"Removed {describe_product_for_logging(product_ref, item.name)} from cart")
        self._notify(NoticeLevel.INFO, f"{item.name or 'Item'} removed from cart")
        return self._persist()

    def update_quantity(self, product_ref: str, quantity: int) -> Optional[SyncResult]:
        """
        Set the quantity of an existing row.

        Quantities below 1 remove the row. Quantities above the stock
        recorded for the item are clamped to it.

        Raises:
            CartValidationError: If quantity is not an integer or exceeds MAX_LINE_QUANTITY
        """
        if not _is_int(quantity):
            raise CartValidationError(ERROR_QUANTITY_NOT_INT)

        if quantity < 1:
            return self.remove_from_cart(product_ref)
        if quantity > MAX_LINE_QUANTITY:
            raise CartValidationError(f"{ERROR_QUANTITY_TOO_LARGE} ({MAX_LINE_QUANTITY})")

        item = self._find(product_ref)
        if item is None:
            return None

        final_quantity = quantity
        if item.stock is not None and quantity > item.stock:
            self._notify(NoticeLevel.WARNING, f"Cannot add more than available stock ({item.stock} items)")
            final_quantity = item.stock
            if final_quantity < 1:
                return self.remove_from_cart(product_ref)

        diff = final_quantity - item.quantity
        if diff == 0:
            return None

        item.quantity = final_quantity
        if diff > 0:
            self._notify(NoticeLevel.SUCCESS, f"Added {diff} more to cart")
        else:
            self._notify(NoticeLevel.INFO, f"Removed {abs(diff)} from cart")

        return self._persist()

    def clear_cart(self) -> SyncResult:
        """Empty the cart and remove the saved slot."""
        self._items = []
        self._notify(NoticeLevel.INFO, "Cart cleared")

        try:
            self.storage.delete(self.storage_key)
        except StorageError as e:
            return self._sync_failed(e, ERROR_CART_CLEAR_FAILED)

        self.last_error = None
        return SyncResult(ok=True)

    def toggle_cart(self) -> bool:
        """Show or hide the cart drawer. Returns the new visibility."""
        self.is_open = not self.is_open
        return self.is_open

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, product_ref: str) -> Optional[LineItem]:
        return next((item for item in self._items if item.product_ref == product_ref), None)

    def _coerce_product(self, product: ProductInput) -> ProductSnapshot:
        if isinstance(product, ProductSnapshot):
            return product
        if not isinstance(product, Mapping):
            raise CartValidationError(ERROR_INVALID_PRODUCT)
        try:
            return ProductSnapshot.model_validate(dict(product))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "product"
            raise CartValidationError(f"{ERROR_INVALID_PRODUCT}: {field}: {first['msg']}")

    def _persist(self) -> SyncResult:
        try:
            self.storage.write(self.storage_key, serialize_items(self._items))
        except StorageError as e:
            return self._sync_failed(e, ERROR_CART_SAVE_FAILED)

        self.last_error = None
        return SyncResult(ok=True)

    def _sync_failed(self, error: StorageError, message: str) -> SyncResult:
        logger.error(f"{message}: {error}")
        self.last_error = message
        self._notify(NoticeLevel.ERROR, message)
        return SyncResult(ok=False, error=error)

    def _notify(self, level: NoticeLevel, message: str) -> None:
        try:
            self.notifier.notify(level, message)
        except Exception as e:
            # Notices are best effort
            logger.warning(f"Notifier failed for {level.value} notice: {e}")


def create_cart_store(
    storage: Optional[CartStorage] = None,
    notifier: Optional[Notifier] = None,
    storage_key: Optional[str] = None,
) -> CartStore:
    """
    Create and hydrate the cart store for one session.

    Storage defaults to the backend named by CART_STORAGE_BACKEND.
    """
    store = CartStore(storage or get_storage(), notifier=notifier, storage_key=storage_key)
    store.hydrate()
    return store
