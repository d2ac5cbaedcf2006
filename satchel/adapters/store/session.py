"""Session-backed cart store.

Implements StorePort on top of any mutable mapping, such as the session
object a web framework hands to request handlers.
"""

from collections.abc import MutableMapping
from typing import Any

from satchel.core.ports import StorePort


class SessionStore(StorePort):
    """Keeps each cart blob under ``<prefix><cart id>`` in a session mapping."""

    def __init__(self, session: MutableMapping[str, Any], prefix: str = "cart_"):
        """Initialize the session store.

        Args:
            session: Mapping to read and write. Not copied; writes are
                visible to the session owner immediately.
            prefix: Key prefix for cart entries.
        """
        self.session = session
        self.prefix = prefix

    def _key(self, cart_id: str) -> str:
        return f"{self.prefix}{cart_id}"

    def get(self, cart_id: str) -> str:
        value = self.session.get(self._key(cart_id), "")
        return value if isinstance(value, str) else ""

    def put(self, cart_id: str, data: str) -> None:
        self.session[self._key(cart_id)] = data

    def flush(self, cart_id: str) -> None:
        self.session.pop(self._key(cart_id), None)

    def exists(self, cart_id: str) -> bool:
        return isinstance(self.session.get(self._key(cart_id)), str)
