"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock

# Set test environment variables
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("CART_STORAGE_KEY", "cart")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")


@pytest.fixture
def memory_storage():
    """Empty in-memory cart slot"""
    from medstore.cart import MemoryStorage

    return MemoryStorage()


@pytest.fixture
def notices():
    """Collects notices emitted by the store"""
    from medstore.notifications import NoticeBuffer

    return NoticeBuffer()


@pytest.fixture
def store(memory_storage, notices):
    """Hydrated cart store over an empty memory slot"""
    from medstore.cart import create_cart_store

    return create_cart_store(storage=memory_storage, notifier=notices)


@pytest.fixture
def mock_redis_client():
    """Mock Upstash sync Redis client backed by a dict"""
    data = {}
    client = Mock()
    client.get.side_effect = lambda key: data.get(key)
    client.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value)
    client.delete.side_effect = lambda *keys: sum(1 for k in keys if data.pop(k, None) is not None)
    client.data = data
    return client


@pytest.fixture
def sample_product():
    """Catalog product as returned by the products API"""
    return {
        "_id": "665f1c2ab3e4d5f6a7b8c901",
        "name": "Paracetamol 500mg (Strip of 10)",
        "description": "Fever and pain relief",
        "price": 100,
        "mrp": 120,
        "discount": 16,
        "stock": 50,
        "imageUrl": "https://res.cloudinary.com/demo/paracetamol.jpg",
        "requiresPrescription": False,
    }


@pytest.fixture
def second_product():
    """Another catalog product"""
    return {
        "_id": "665f1c2ab3e4d5f6a7b8c902",
        "name": "Vitamin C Chewable",
        "price": "45.50",
        "stock": 20,
        "imageUrl": "",
    }


@pytest.fixture
def limited_product():
    """Product with only three units left"""
    return {
        "_id": "665f1c2ab3e4d5f6a7b8c903",
        "name": "Digital Thermometer",
        "price": 250,
        "stock": 3,
        "imageUrl": "https://res.cloudinary.com/demo/thermometer.jpg",
    }


@pytest.fixture
def shipping_address():
    """Valid checkout address"""
    return {
        "name": "Asha Verma",
        "street": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "postalCode": "411001",
        "phone": "9876543210",
    }
