"""Request-shaped cart operations for the HTTP adapter.

Each method performs one REST operation on a cart, saves when the cart
changed, and returns an ApiResult carrying the HTTP status code and JSON
body. Domain errors map to client error responses; store failures are
left to propagate so the server reports them as 500s.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from satchel.core.cart import Cart
from satchel.core.errors import InvalidItemError, ItemNotFoundError
from satchel.core.models import CartItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResult:
    """HTTP status code plus JSON-serializable body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


class CartAPI:
    """REST-style operations over one cart."""

    def __init__(self, cart: Cart):
        self.cart = cart

    def get_cart(self) -> ApiResult:
        """GET /api/cart"""
        return ApiResult(
            200,
            {
                "success": True,
                "data": self.cart.serialize(),
                "summary": self.cart.summary().as_dict(),
            },
        )

    def get_summary(self) -> ApiResult:
        """GET /api/cart/summary"""
        return ApiResult(200, {"success": True, "summary": self.cart.summary().as_dict()})

    def add_item(self, data: dict[str, Any]) -> ApiResult:
        """POST /api/cart/items"""
        try:
            item = CartItem(data)
        except InvalidItemError as e:
            return self._error(422, str(e))

        self.cart.add(item).save()
        logger.info(
            f"Item added to cart {self.cart.id}",
            extra={"item_id": item.identity, "quantity": item.quantity},
        )
        return ApiResult(
            201,
            {
                "success": True,
                "item_id": item.identity,
                "summary": self.cart.summary().as_dict(),
            },
        )

    def update_item(self, item_id: str, data: dict[str, Any]) -> ApiResult:
        """PUT /api/cart/items/<item_id>

        All changes are checked against a scratch copy first, so a bad
        value leaves the cart untouched.
        """
        item = self.cart.get(item_id)
        if item is None:
            return self._error(404, str(ItemNotFoundError(item_id, self.cart.id)))

        probe = item.copy()
        try:
            for key, value in data.items():
                probe.set(key, value)
        except InvalidItemError as e:
            return self._error(422, str(e))

        current_id = item_id
        for key, value in data.items():
            self.cart.update(current_id, key, value)
            current_id = item.identity
        self.cart.save()
        return ApiResult(
            200,
            {
                "success": True,
                "item_id": current_id,
                "summary": self.cart.summary().as_dict(),
            },
        )

    def remove_item(self, item_id: str) -> ApiResult:
        """DELETE /api/cart/items/<item_id>"""
        if not self.cart.has(item_id):
            return self._error(404, str(ItemNotFoundError(item_id, self.cart.id)))
        self.cart.remove(item_id).save()
        return ApiResult(
            200, {"success": True, "summary": self.cart.summary().as_dict()}
        )

    def clear_cart(self) -> ApiResult:
        """DELETE /api/cart"""
        self.cart.clear()
        return ApiResult(
            200, {"success": True, "summary": self.cart.summary().as_dict()}
        )

    @staticmethod
    def _error(status_code: int, message: str) -> ApiResult:
        return ApiResult(status_code, {"success": False, "error": message})
