"""The Cart aggregate.

A Cart owns an insertion-ordered mapping of item identity → CartItem,
tracks whether it has unsaved changes, and persists itself through a
StorePort as a JSON blob.

Persistence state machine:
    clean → dirty   add / remove / update / update_quantity (when effective)
    dirty → clean   save (writes), clear (always flushes), restore, refresh
    clean → clean   save is a no-op
"""

import json
import logging
from collections.abc import Callable, Iterator
from types import TracebackType
from typing import Any, TypeVar

from .errors import CartError, CartRestoreError, ItemNotFoundError
from .models import CartItem, CartSummary, ItemField
from .ports import StorePort

logger = logging.getLogger(__name__)

T = TypeVar("T")
ItemPredicate = Callable[[CartItem], bool]

# Blobs some backends hand back for "nothing stored".
EMPTY_ENCODINGS: tuple[Any, ...] = ([], {})


class Cart:
    """A shopping cart bound to one id and one store.

    The cart restores itself from the store on construction. Use it as a
    context manager (or call close()) to get a best-effort save when the
    owner is done with it; callers that need durability call save()
    themselves and handle StoreIOError.

    The cart owns its items: add() stores a copy, and items handed out by
    get(), first() or filter() must be changed through update() so each
    entry stays keyed by its identity.
    """

    def __init__(self, cart_id: str, store: StorePort):
        """Create a cart and load any saved state for cart_id.

        Raises:
            CartRestoreError: If stored data exists but is structurally invalid.
            StoreIOError: If the store cannot be read.
        """
        self._id = cart_id
        self._store = store
        self._items: dict[str, CartItem] = {}
        self._dirty = False
        self.last_restore_skipped = 0
        self.restore()

    @property
    def id(self) -> str:
        return self._id

    @property
    def store(self) -> StorePort:
        return self._store

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, item: CartItem) -> "Cart":
        """Add a copy of item, merging quantities with an existing identical item."""
        self._insert(item.copy())
        self._mark_dirty()
        return self

    def remove(self, identity: str) -> "Cart":
        """Remove an item. Unknown identities are ignored."""
        if identity in self._items:
            del self._items[identity]
            self._mark_dirty()
        return self

    def update(self, identity: str, key: str, value: Any) -> "Cart":
        """Set one attribute on an item in the cart.

        If the change alters the item's identity the entry is re-keyed in
        place. Should the new identity match another entry, the two merge.

        Raises:
            ItemNotFoundError: If identity is not in the cart.
            InvalidItemError: If the item rejects the value.
        """
        item = self._items.get(identity)
        if item is None:
            raise ItemNotFoundError(identity, self._id)

        item.set(key, value)
        if item.identity != identity:
            self._rekey(identity, item)
        self._mark_dirty()
        return self

    def update_quantity(self, identity: str, quantity: int) -> "Cart":
        """Set an item's quantity; zero or less removes the item."""
        if quantity <= 0:
            return self.remove(identity)
        return self.update(identity, ItemField.QUANTITY.value, quantity)

    def clear(self) -> "Cart":
        """Empty the cart and delete its stored state immediately.

        Raises:
            StoreIOError: If the store cannot delete the entry.
        """
        self._items = {}
        self._store.flush(self._id)
        self._dirty = False
        logger.debug(f"Cleared cart {self._id}")
        return self

    def merge(self, other: "Cart") -> "Cart":
        """Add copies of every item in other, merging by identity."""
        for item in other.all():
            self.add(item)
        return self

    def copy(self, new_id: str) -> "Cart":
        """Create a cart on the same store holding copies of these items."""
        new_cart = Cart(new_id, self._store)
        for item in self._items.values():
            new_cart.add(item)
        return new_cart

    # ------------------------------------------------------------------
    # Lookup and traversal
    # ------------------------------------------------------------------

    def get(self, identity: str) -> CartItem | None:
        return self._items.get(identity)

    def find(self, identity: str) -> CartItem | None:
        return self.get(identity)

    def has(self, identity: str) -> bool:
        return identity in self._items

    def all(self) -> list[CartItem]:
        """Items in insertion order."""
        return list(self._items.values())

    def first(self, predicate: ItemPredicate | None = None) -> CartItem | None:
        """Return the first item (matching predicate, if given) or None."""
        for item in self._items.values():
            if predicate is None or predicate(item):
                return item
        return None

    def filter(self, predicate: ItemPredicate) -> list[CartItem]:
        return [item for item in self._items.values() if predicate(item)]

    def map(self, transform: Callable[[CartItem], T]) -> list[T]:
        return [transform(item) for item in self._items.values()]

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, identity: object) -> bool:
        return identity in self._items

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self._items

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    def total_unique_items(self) -> int:
        return len(self._items)

    def total_items(self) -> int:
        """Sum of quantities across all items."""
        return sum(item.quantity for item in self._items.values())

    def count(self) -> int:
        return self.total_items()

    def total(self) -> float:
        """Cart total including tax."""
        return sum((item.total_price for item in self._items.values()), 0.0)

    def total_excluding_tax(self) -> float:
        return sum(
            (item.total_price_excluding_tax for item in self._items.values()), 0.0
        )

    def subtotal(self) -> float:
        return self.total_excluding_tax()

    def tax(self) -> float:
        return sum((item.total_tax for item in self._items.values()), 0.0)

    def summary(self) -> CartSummary:
        return CartSummary(
            id=self._id,
            total_items=self.total_items(),
            unique_items=self.total_unique_items(),
            subtotal=self.subtotal(),
            tax=self.tax(),
            total=self.total(),
            is_empty=self.is_empty(),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self) -> dict[str, Any]:
        """Full cart state; meta figures are informational only."""
        summary = self.summary().as_dict()
        del summary["id"]
        return {
            "id": self._id,
            "items": [item.serialize() for item in self._items.values()],
            "meta": summary,
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.serialize(), indent=indent, default=str)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def is_dirty(self) -> bool:
        return self._dirty

    def save(self) -> "Cart":
        """Write the cart to the store if it has unsaved changes.

        Raises:
            StoreIOError: If the store cannot be written. The cart stays dirty.
        """
        if not self._dirty:
            return self

        self._store.put(self._id, self.to_json())
        self._dirty = False
        logger.debug(
            f"Saved cart {self._id}",
            extra={"unique_items": len(self._items)},
        )
        return self

    def restore(self) -> "Cart":
        """Load the cart from the store, replacing in-memory items.

        An absent or empty blob leaves the cart as it is. Items inside the
        blob that cannot be rebuilt are skipped; their number is kept in
        ``last_restore_skipped``.

        Raises:
            CartRestoreError: If the blob is present but not a valid cart.
            StoreIOError: If the store cannot be read.
        """
        self.last_restore_skipped = 0
        state = self._store.get(self._id)
        if not state or not state.strip():
            return self

        try:
            data = json.loads(state)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CartRestoreError(self._id, "saved state is not valid JSON") from e

        if data in EMPTY_ENCODINGS:
            return self

        self._validate_restored(data)
        self._items = {}
        for position, entry in enumerate(data["items"]):
            item = self._rebuild_item(entry)
            if item is None:
                self.last_restore_skipped += 1
                logger.warning(
                    f"Skipped unreadable item at position {position} "
                    f"while restoring cart {self._id}"
                )
                continue
            self._insert(item)

        self._dirty = False
        return self

    def refresh(self) -> "Cart":
        """Discard unsaved changes and reload from the store."""
        self._items = {}
        self._dirty = False
        return self.restore()

    def close(self) -> None:
        """Save pending changes, never raising.

        This is the one place persistence errors are swallowed: a failed
        save while releasing the cart is logged and dropped.
        """
        if not self._dirty:
            return
        try:
            self.save()
        except Exception as e:
            logger.warning(
                f"Discarding unsaved changes to cart {self._id}: {e}",
                exc_info=True,
            )

    def __enter__(self) -> "Cart":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Cart(id={self._id!r}, unique_items={len(self._items)}, "
            f"dirty={self._dirty})"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _insert(self, item: CartItem) -> None:
        identity = item.identity
        existing = self._items.get(identity)
        if existing is None:
            self._items[identity] = item
        else:
            existing.set_quantity(existing.quantity + item.quantity)

    def _rekey(self, old_identity: str, item: CartItem) -> None:
        """Move item to its new identity, keeping its position."""
        new_identity = item.identity
        existing = self._items.get(new_identity)
        if existing is not None:
            existing.set_quantity(existing.quantity + item.quantity)
            del self._items[old_identity]
            return
        self._items = {
            (new_identity if key == old_identity else key): value
            for key, value in self._items.items()
        }

    def _validate_restored(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise CartRestoreError(self._id, "saved state is not a mapping")
        if "id" not in data or "items" not in data:
            raise CartRestoreError(self._id, "missing cart id or cart items")
        if not isinstance(data["id"], str) or not isinstance(data["items"], list):
            raise CartRestoreError(
                self._id, "cart id must be a string and items must be a list"
            )
        if data["id"] != self._id:
            raise CartRestoreError(
                self._id, f"cart id mismatch (stored id {data['id']!r})"
            )

    @staticmethod
    def _rebuild_item(entry: Any) -> CartItem | None:
        if not isinstance(entry, dict):
            return None
        attributes = entry.get("attributes")
        if not isinstance(attributes, dict):
            return None
        try:
            return CartItem.from_dict(attributes)
        except (CartError, TypeError, ValueError):
            return None
