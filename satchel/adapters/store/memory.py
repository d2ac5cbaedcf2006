"""In-memory cart store.

Implements StorePort with a plain dict. Useful for tests, the CLI, and
short-lived processes where persistence across restarts is not needed.
"""

import logging

from satchel.core.ports import StorePort

logger = logging.getLogger(__name__)


class MemoryStore(StorePort):
    """Dict-backed store; contents live as long as the instance."""

    def __init__(self) -> None:
        self._storage: dict[str, str] = {}

    def get(self, cart_id: str) -> str:
        return self._storage.get(cart_id, "")

    def put(self, cart_id: str, data: str) -> None:
        self._storage[cart_id] = data

    def flush(self, cart_id: str) -> None:
        self._storage.pop(cart_id, None)

    def exists(self, cart_id: str) -> bool:
        return cart_id in self._storage

    def clear_all(self) -> None:
        """Drop every stored cart."""
        logger.debug(f"Clearing {len(self._storage)} carts from memory store")
        self._storage.clear()

    def cart_ids(self) -> list[str]:
        return list(self._storage)

    def __len__(self) -> int:
        return len(self._storage)
