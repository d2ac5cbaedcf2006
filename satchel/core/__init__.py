"""Core domain logic for the Satchel cart system.

This package contains zero external dependencies and represents
the pure business logic of the application. All storage backends and
user-facing wrappers are handled by the adapters package.
"""

from .cart import Cart
from .errors import (
    CartError,
    CartRestoreError,
    InvalidItemError,
    ItemNotFoundError,
    StoreIOError,
)
from .identity import ItemIdentity
from .models import CartItem, CartSummary, ItemField
from .ports import StorePort

__all__ = [
    "Cart",
    "CartError",
    "CartItem",
    "CartRestoreError",
    "CartSummary",
    "InvalidItemError",
    "ItemField",
    "ItemIdentity",
    "ItemNotFoundError",
    "StorePort",
    "StoreIOError",
]
