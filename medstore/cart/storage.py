"""
Durable key-value slots for the cart.

Backends:
- MemoryStorage: process memory (tests, previews)
- FileStorage: one file per key on local disk
- RedisStorage: Upstash Redis with TTL

Every backend raises StorageError for its own failures.
"""
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from medstore.config import STORAGE_BACKENDS, get_cart_settings
from medstore.db import TTL, RedisKeys, get_redis_sync
from medstore.errors import ERROR_STORAGE_UNAVAILABLE, StorageError
from medstore.logging import get_logger

logger = get_logger(__name__)


class CartStorage(Protocol):
    """A durable slot holding one serialized cart per key."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    """
    Dict-backed storage.

    ``fail_reads`` / ``fail_writes`` make the next operations raise
    StorageError, mimicking a disabled or full storage quota.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    def read(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: read of {key!r} refused")
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: quota exceeded writing {key!r}")
        self.data[key] = value

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: delete of {key!r} refused")
        self.data.pop(key, None)


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileStorage:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key) or "_"
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: cannot read {path}: {e}")

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and swap it in so readers never see half a cart
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".cart-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: cannot write {path}: {e}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: cannot delete {path}: {e}")


class RedisStorage:
    """Upstash Redis storage; keys live under ``cart:``."""

    def __init__(self, redis=None, ttl_seconds: Optional[int] = TTL.CART):
        self._redis = redis  # Lazy initialization
        self.ttl_seconds = ttl_seconds

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis_sync()
            except ValueError as e:
                raise StorageError(f"Redis not available: {e}")
        return self._redis

    def read(self, key: str) -> Optional[str]:
        try:
            data = self.redis.get(RedisKeys.cart_key(key))
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to read cart from Redis: {e}")
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: {e}")
        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return str(data)

    def write(self, key: str, value: str) -> None:
        try:
            if self.ttl_seconds:
                self.redis.set(RedisKeys.cart_key(key), value, ex=self.ttl_seconds)
            else:
                self.redis.set(RedisKeys.cart_key(key), value)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to save cart to Redis: {e}")
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: {e}")

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(RedisKeys.cart_key(key))
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to clear cart from Redis: {e}")
            raise StorageError(f"{ERROR_STORAGE_UNAVAILABLE}: {e}")


def get_storage(backend: Optional[str] = None) -> CartStorage:
    """
    Build the storage backend named by ``backend`` or CART_STORAGE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown
    """
    settings = get_cart_settings()
    name = (backend or settings.storage_backend).strip().lower()

    if name == "memory":
        return MemoryStorage()
    if name == "file":
        return FileStorage(settings.storage_dir)
    if name == "redis":
        return RedisStorage(ttl_seconds=settings.ttl_seconds)

    raise ValueError(
        f"Unknown cart storage backend {name!r}; expected one of {', '.join(STORAGE_BACKENDS)}"
    )


__all__ = [
    "CartStorage",
    "MemoryStorage",
    "FileStorage",
    "RedisStorage",
    "get_storage",
]
