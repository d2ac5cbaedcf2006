"""CLI command implementations for cart management.

Maps CLI commands (add, update, remove, show, clear...) to Cart
operations. Handles CLI-specific result formatting and error reporting;
domain errors become ``{"status": "error"}`` results instead of
tracebacks.
"""

import logging
from collections.abc import Callable
from typing import Any

from satchel.core.cart import Cart
from satchel.core.errors import CartError
from satchel.core.models import CartItem

logger = logging.getLogger(__name__)


class CartCommandHandler:
    """Handles CLI commands against a single working cart.

    With autosave enabled every successful mutation is followed by a
    save(), so the store always reflects the last command.
    """

    def __init__(self, cart: Cart, autosave: bool = False):
        """Initialize the CLI command handler.

        Args:
            cart: Cart the commands operate on.
            autosave: Save after each successful mutating command.
        """
        self.cart = cart
        self.autosave = autosave

    def add_item(self, attributes: dict[str, Any]) -> dict[str, Any]:
        """Add an item built from attributes, merging with an identical one."""

        def run() -> dict[str, Any]:
            item = CartItem(attributes)
            self.cart.add(item)
            return {"item_id": item.identity, "quantity": self.cart.get(item.identity).quantity}

        return self._mutate("add", run)

    def update_item(self, item_id: str, key: str, value: Any) -> dict[str, Any]:
        """Set one attribute on an item."""

        def run() -> dict[str, Any]:
            self.cart.update(item_id, key, value)
            return {"item_id": item_id, "key": key}

        return self._mutate("update", run)

    def set_quantity(self, item_id: str, quantity: int) -> dict[str, Any]:
        """Change an item's quantity; zero or less removes it."""

        def run() -> dict[str, Any]:
            self.cart.update_quantity(item_id, quantity)
            return {"item_id": item_id, "quantity": quantity, "removed": quantity <= 0}

        return self._mutate("quantity", run)

    def remove_item(self, item_id: str) -> dict[str, Any]:
        """Remove an item. Reports whether anything was removed."""

        def run() -> dict[str, Any]:
            existed = self.cart.has(item_id)
            self.cart.remove(item_id)
            return {"item_id": item_id, "removed": existed}

        return self._mutate("remove", run)

    def show(self, output_format: str = "json") -> dict[str, Any]:
        """Return the cart contents as JSON data or a text table."""
        if output_format == "text":
            return {
                "status": "success",
                "operation": "show",
                "cart_id": self.cart.id,
                "output": self._format_text(),
            }
        return {
            "status": "success",
            "operation": "show",
            "cart_id": self.cart.id,
            "cart": self.cart.serialize(),
        }

    def summary(self) -> dict[str, Any]:
        return {
            "status": "success",
            "operation": "summary",
            "cart_id": self.cart.id,
            "summary": self.cart.summary().as_dict(),
        }

    def clear(self) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            removed = self.cart.total_unique_items()
            self.cart.clear()
            return {"removed_items": removed}

        return self._run("clear", run)

    def save(self) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            was_dirty = self.cart.is_dirty()
            self.cart.save()
            return {"written": was_dirty}

        return self._run("save", run)

    def refresh(self) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            self.cart.refresh()
            return {"skipped_items": self.cart.last_restore_skipped}

        return self._run("refresh", run)

    def copy(self, new_cart_id: str) -> dict[str, Any]:
        """Copy the working cart to new_cart_id and save the copy."""

        def run() -> dict[str, Any]:
            new_cart = self.cart.copy(new_cart_id)
            new_cart.save()
            return {"new_cart_id": new_cart.id, "total_items": new_cart.total_items()}

        return self._run("copy", run)

    def merge(self, other_cart_id: str) -> dict[str, Any]:
        """Merge the saved cart other_cart_id into the working cart."""

        def run() -> dict[str, Any]:
            other = Cart(other_cart_id, self.cart.store)
            self.cart.merge(other)
            return {"merged_from": other_cart_id, "merged_items": other.total_unique_items()}

        return self._mutate("merge", run)

    def _mutate(self, operation: str, action: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            details = action()
            if self.autosave:
                self.cart.save()
            return details

        return self._run(operation, run)

    def _run(self, operation: str, action: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        try:
            details = action()
        except CartError as e:
            logger.error(f"Failed to {operation} on cart {self.cart.id}: {e}")
            return {
                "status": "error",
                "operation": operation,
                "cart_id": self.cart.id,
                "message": str(e),
            }
        return {
            "status": "success",
            "operation": operation,
            "cart_id": self.cart.id,
            **details,
            "summary": self.cart.summary().as_dict(),
        }

    def _format_text(self) -> str:
        lines = [f"Cart {self.cart.id}", "-" * 72]
        for item in self.cart:
            lines.append(
                f"{item.identity[:12]}  {item.name[:24]:<24} "
                f"{item.quantity:>4} x {item.single_price:>9.2f} = {item.total_price:>10.2f}"
            )
        if self.cart.is_empty():
            lines.append("(empty)")
        lines.append("-" * 72)
        lines.append(f"Subtotal: {self.cart.subtotal():.2f}")
        lines.append(f"Tax:      {self.cart.tax():.2f}")
        lines.append(f"Total:    {self.cart.total():.2f}")
        return "\n".join(lines)
