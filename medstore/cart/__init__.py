"""Cart package: line items, storage backends, the cart store and checkout."""
from .models import MAX_LINE_QUANTITY, LineItem, serialize_items, deserialize_items
from .storage import CartStorage, MemoryStorage, FileStorage, RedisStorage, get_storage
from .service import CartStore, SyncResult, create_cart_store
from .checkout import build_order_request

__all__ = [
    "MAX_LINE_QUANTITY",
    "LineItem",
    "serialize_items",
    "deserialize_items",
    "CartStorage",
    "MemoryStorage",
    "FileStorage",
    "RedisStorage",
    "get_storage",
    "CartStore",
    "SyncResult",
    "create_cart_store",
    "build_order_request",
]
