"""
medstore - storefront state for the medical store

Modules:
- cart: session cart store, durable storage backends, checkout request builder
- models: Pydantic product snapshot and checkout schemas
- notifications: toast-style user notices
- logging, errors, money, config, db: shared infrastructure
"""

__version__ = "1.0.0"
