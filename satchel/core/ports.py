"""Port interfaces for the Satchel cart system.

These abstract base classes define the boundary between the core cart
domain and the persistence adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - StorePort: Persist one opaque blob per cart id

Driving adapters (CLI, HTTP) call the Cart aggregate directly; the
aggregate is the only entry point into the core.
"""

from abc import ABC, abstractmethod


class StorePort(ABC):
    """Port for key-value persistence of serialized carts.

    The store treats cart data as an opaque string. It never parses or
    validates the blob; the Cart aggregate owns the encoding.

    Implementations must handle:
    - Returning an empty string for unknown cart ids
    - Translating backend failures into StoreIOError
    - Sharing: several Cart instances may hold the same store. Writes to
      the same cart id are last-writer-wins.
    """

    @abstractmethod
    def get(self, cart_id: str) -> str:
        """Retrieve the saved blob for a cart.

        Args:
            cart_id: Identifier of the cart.

        Returns:
            The stored blob, or an empty string if nothing is stored.

        Raises:
            StoreIOError: If the backend cannot be read.
        """

    @abstractmethod
    def put(self, cart_id: str, data: str) -> None:
        """Save the blob for a cart, replacing any previous value.

        Args:
            cart_id: Identifier of the cart.
            data: Serialized cart state.

        Raises:
            StoreIOError: If the backend cannot be written.
        """

    @abstractmethod
    def flush(self, cart_id: str) -> None:
        """Delete the saved blob for a cart. Unknown ids are a no-op.

        Raises:
            StoreIOError: If the backend cannot delete the entry.
        """

    @abstractmethod
    def exists(self, cart_id: str) -> bool:
        """Check whether a blob is stored for a cart."""
