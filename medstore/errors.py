"""
Common Errors

Centralized error messages and the exception types raised across the store.
"""

# Cart validation errors
ERROR_INVALID_PRODUCT = "Cannot add invalid product to cart"
ERROR_INVALID_QUANTITY = "quantity must be a positive integer"
ERROR_QUANTITY_NOT_INT = "quantity must be an integer"
ERROR_QUANTITY_TOO_LARGE = "quantity exceeds the per-product limit"

# Cart persistence errors
ERROR_CART_SAVE_FAILED = "Failed to save cart"
ERROR_CART_CLEAR_FAILED = "Failed to clear cart"
ERROR_CART_LOAD_FAILED = "Saved cart could not be loaded"

# Checkout errors
ERROR_CART_EMPTY = "Your cart is empty"
ERROR_INVALID_PHONE = "Please enter a valid 10-digit phone number"

# Storage errors
ERROR_STORAGE_UNAVAILABLE = "Cart storage unavailable"


class MedstoreError(Exception):
    """Base class for all medstore errors."""


class CartValidationError(MedstoreError, ValueError):
    """Invalid product snapshot or quantity passed to a cart operation."""


class CartDataError(MedstoreError):
    """Persisted cart payload is not a valid line-item sequence."""


class StorageError(MedstoreError):
    """Durable slot read, write or delete failed."""


class CheckoutError(MedstoreError):
    """Cart cannot be turned into an order request."""
