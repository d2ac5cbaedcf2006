"""Error taxonomy for the Satchel cart domain.

Every error raised by the core derives from CartError so callers can
catch domain failures in one place. Each subclass also inherits from the
closest built-in exception, so generic handlers (ValueError, LookupError,
OSError) keep working.
"""


class CartError(Exception):
    """Base class for all cart domain errors."""


class InvalidItemError(CartError, ValueError):
    """A cart item attribute failed validation.

    Raised for negative quantity, price or tax, for attempts to set the
    read-only ``id`` attribute, and for attempts to remove a core field.
    The item is left unmodified.
    """

    @classmethod
    def negative(cls, field_name: str, value: object) -> "InvalidItemError":
        return cls(f"{field_name} must be non-negative, got {value!r}")

    @classmethod
    def read_only(cls, field_name: str) -> "InvalidItemError":
        return cls(f"Cannot modify read-only property: {field_name}")

    @classmethod
    def required(cls, field_name: str) -> "InvalidItemError":
        return cls(f"Cannot remove required property: {field_name}")


class ItemNotFoundError(CartError, LookupError):
    """An update referenced an item identity that is not in the cart."""

    def __init__(self, identity: str, cart_id: str):
        super().__init__(f"Item [{identity}] does not exist in cart [{cart_id}]")
        self.identity = identity
        self.cart_id = cart_id


class CartRestoreError(CartError):
    """The persisted cart blob exists but is structurally unusable."""

    def __init__(self, cart_id: str, reason: str):
        super().__init__(f"Failed to restore cart [{cart_id}]: {reason}")
        self.cart_id = cart_id
        self.reason = reason


class StoreIOError(CartError, OSError):
    """A store backend failed to read, write or delete a cart blob."""


__all__ = [
    "CartError",
    "CartRestoreError",
    "InvalidItemError",
    "ItemNotFoundError",
    "StoreIOError",
]
