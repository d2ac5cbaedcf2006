"""Domain models for the Satchel cart system.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

import copy as _copy
import math
from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from .errors import InvalidItemError
from .identity import ItemIdentity


class ItemField(Enum):
    """Core attributes every cart item carries.

    Anything outside this set is an extension attribute (sku, category,
    colour...) stored in the item's open attribute bag.
    """

    ID = "id"
    NAME = "name"
    QUANTITY = "quantity"
    PRICE = "price"
    TAX = "tax"

    @classmethod
    def lookup(cls, key: str) -> "ItemField | None":
        """Return the core field for key, or None for extension attributes."""
        try:
            return cls(key)
        except ValueError:
            return None

    def is_read_only(self) -> bool:
        """Only the derived identity is read-only."""
        return self is ItemField.ID

    def is_required(self) -> bool:
        """Core fields can never be removed from an item."""
        return True


DEFAULTS: dict[str, Any] = {
    ItemField.NAME.value: "",
    ItemField.QUANTITY.value: 1,
    ItemField.PRICE.value: 0.0,
    ItemField.TAX.value: 0.0,
}


class CartItem:
    """A single line item in a cart.

    Core fields (name, quantity, price, tax) are typed attributes; every
    other key lives in an extension mapping. Both the typed setters and
    the generic set() funnel through one validated mutation path.

    Identity is a hash over every attribute except quantity. It is
    computed lazily, cached, and invalidated by any mutation other than
    a quantity change.
    """

    __slots__ = ("_name", "_quantity", "_price", "_tax", "_extra", "_identity")

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any):
        """Build an item from an attribute mapping and/or keyword arguments.

        Missing core fields default to name="", quantity=1, price=0.0, tax=0.0.

        Raises:
            InvalidItemError: If quantity, price or tax is negative or not
                numeric, or if an ``id`` attribute is supplied.
        """
        merged: dict[str, Any] = dict(DEFAULTS)
        if attributes:
            merged.update(attributes)
        merged.update(kwargs)

        if ItemField.ID.value in merged:
            raise InvalidItemError.read_only(ItemField.ID.value)

        self._name: str = self._coerce(ItemField.NAME, merged.pop(ItemField.NAME.value))
        self._quantity: int = self._coerce(
            ItemField.QUANTITY, merged.pop(ItemField.QUANTITY.value)
        )
        self._price: float = self._coerce(ItemField.PRICE, merged.pop(ItemField.PRICE.value))
        self._tax: float = self._coerce(ItemField.TAX, merged.pop(ItemField.TAX.value))
        self._extra: dict[str, Any] = merged
        self._identity: str | None = None

    @classmethod
    def from_dict(cls, attributes: Mapping[str, Any]) -> "CartItem":
        """Create an item from a plain attribute mapping."""
        return cls(attributes)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def identity(self) -> str:
        """Stable hash of every attribute except quantity."""
        if self._identity is None:
            self._identity = ItemIdentity.compute(self.attributes())
        return self._identity

    def get_identity(self) -> str:
        return self.identity

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def price(self) -> float:
        return self._price

    @property
    def tax(self) -> float:
        return self._tax

    def set_name(self, name: str) -> "CartItem":
        return self.set(ItemField.NAME.value, name)

    def set_quantity(self, quantity: int) -> "CartItem":
        return self.set(ItemField.QUANTITY.value, quantity)

    def set_price(self, price: float) -> "CartItem":
        return self.set(ItemField.PRICE.value, price)

    def set_tax(self, tax: float) -> "CartItem":
        return self.set(ItemField.TAX.value, tax)

    # ------------------------------------------------------------------
    # Generic attribute bag
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Read any attribute, including ``id`` and the core fields."""
        field = ItemField.lookup(key)
        if field is ItemField.ID:
            return self.identity
        if field is ItemField.NAME:
            return self._name
        if field is ItemField.QUANTITY:
            return self._quantity
        if field is ItemField.PRICE:
            return self._price
        if field is ItemField.TAX:
            return self._tax
        return self._extra.get(key, default)

    def set(self, key: str, value: Any) -> "CartItem":
        """Assign an attribute after validating it.

        Raises:
            InvalidItemError: If key is ``id`` or the value fails validation.
                The item is unchanged in either case.
        """
        field = ItemField.lookup(key)
        if field is None:
            self._extra[key] = value
            self._identity = None
            return self

        coerced = self._coerce(field, value)
        if field is ItemField.QUANTITY:
            # Quantity is not part of the identity; keep the cache.
            self._quantity = coerced
            return self

        if field is ItemField.NAME:
            self._name = coerced
        elif field is ItemField.PRICE:
            self._price = coerced
        elif field is ItemField.TAX:
            self._tax = coerced
        self._identity = None
        return self

    def has(self, key: str) -> bool:
        if ItemField.lookup(key) is not None:
            return True
        return key in self._extra

    def remove(self, key: str) -> "CartItem":
        """Drop an extension attribute. Missing keys are ignored.

        Raises:
            InvalidItemError: If key names a core field.
        """
        field = ItemField.lookup(key)
        if field is not None and field.is_required():
            raise InvalidItemError.required(key)
        if key in self._extra:
            del self._extra[key]
            self._identity = None
        return self

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.attributes())

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    @property
    def single_price(self) -> float:
        """Unit price including tax."""
        return self._price + self._tax

    @property
    def single_price_excluding_tax(self) -> float:
        return self._price

    @property
    def single_tax(self) -> float:
        return self._tax

    @property
    def total_price(self) -> float:
        """Line total including tax."""
        return (self._price + self._tax) * self._quantity

    @property
    def total_price_excluding_tax(self) -> float:
        return self._price * self._quantity

    @property
    def total_tax(self) -> float:
        return self._tax * self._quantity

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def attributes(self) -> dict[str, Any]:
        """Return a shallow copy of the full attribute bag."""
        return {
            ItemField.NAME.value: self._name,
            ItemField.QUANTITY.value: self._quantity,
            ItemField.PRICE.value: self._price,
            ItemField.TAX.value: self._tax,
            **self._extra,
        }

    def serialize(self) -> dict[str, Any]:
        """Snapshot sufficient to rebuild an equivalent item."""
        return {"identity": self.identity, "attributes": self.attributes()}

    def copy(self) -> "CartItem":
        """Return an independent item with the same attributes and identity."""
        return CartItem(_copy.deepcopy(self.attributes()))

    def __repr__(self) -> str:
        return (
            f"CartItem(name={self._name!r}, quantity={self._quantity}, "
            f"price={self._price}, tax={self._tax}, extra={self._extra!r})"
        )

    @staticmethod
    def _coerce(field: ItemField, value: Any) -> Any:
        """Convert a core field value to its type and validate it."""
        if field is ItemField.ID:
            raise InvalidItemError.read_only(field.value)
        if field is ItemField.NAME:
            return "" if value is None else str(value)

        caster = int if field is ItemField.QUANTITY else float
        try:
            coerced = caster(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidItemError(
                f"{field.value} must be a number, got {value!r}"
            ) from e
        if isinstance(coerced, float) and not math.isfinite(coerced):
            raise InvalidItemError(f"{field.value} must be finite, got {value!r}")
        if coerced < 0:
            raise InvalidItemError.negative(field.value, value)
        return coerced


@dataclass(frozen=True)
class CartSummary:
    """Aggregate figures for a cart at one point in time."""

    id: str
    total_items: int
    unique_items: int
    subtotal: float
    tax: float
    total: float
    is_empty: bool

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
