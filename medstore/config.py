"""
Cart configuration read from the environment.

Variables:
- CART_STORAGE_BACKEND: memory | file | redis (default: file)
- CART_STORAGE_KEY: slot name the cart is stored under (default: cart)
- CART_STORAGE_DIR: directory for the file backend (default: .medstore)
- CART_TTL_SECONDS: expiry for the redis backend, 0 disables (default: 86400)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_STORAGE_BACKEND = "file"
DEFAULT_STORAGE_KEY = "cart"
DEFAULT_STORAGE_DIR = ".medstore"
DEFAULT_CART_TTL = 86400  # 24 hours

STORAGE_BACKENDS = ("memory", "file", "redis")


@dataclass(frozen=True)
class CartSettings:
    """Resolved cart settings."""
    storage_backend: str = DEFAULT_STORAGE_BACKEND
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_dir: Path = Path(DEFAULT_STORAGE_DIR)
    ttl_seconds: Optional[int] = DEFAULT_CART_TTL


def _get_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def get_cart_settings() -> CartSettings:
    """Read cart settings from the environment. Not cached: tests change env vars."""
    backend = os.environ.get("CART_STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND).strip().lower()
    ttl = _get_int("CART_TTL_SECONDS", DEFAULT_CART_TTL)
    return CartSettings(
        storage_backend=backend,
        storage_key=os.environ.get("CART_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
        storage_dir=Path(os.environ.get("CART_STORAGE_DIR") or DEFAULT_STORAGE_DIR),
        ttl_seconds=ttl if ttl > 0 else None,
    )
