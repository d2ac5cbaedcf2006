"""HTTP server adapter for the cart API.

Provides a small JSON-over-HTTP server using Python's built-in
http.server module, run on a worker thread from asyncio.

Routes:
    GET    /health
    GET    /api/cart
    GET    /api/cart/summary
    POST   /api/cart/items
    PUT    /api/cart/items/<item_id>
    DELETE /api/cart/items/<item_id>
    DELETE /api/cart

The cart id comes from the ``X-Cart-Id`` header, falling back to the
configured default. A store factory receives the request cookies, so a
CookieStore can be built per request; its pending Set-Cookie headers are
written to the response.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from http.cookies import CookieError, SimpleCookie
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import unquote, urlsplit

from satchel.adapters.http.api import ApiResult, CartAPI
from satchel.core.cart import Cart
from satchel.core.errors import CartRestoreError
from satchel.core.ports import StorePort

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Mapping[str, str]], StorePort]

MAX_BODY_SIZE = 1024 * 1024
ITEMS_PREFIX = "/api/cart/items/"


def make_cart_handler(
    store_factory: StoreFactory,
    default_cart_id: str,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create a CartHTTPHandler class bound to a store factory.

    Dependencies are captured in a closure rather than stored as
    class-level mutable state.

    Args:
        store_factory: Builds the store for a request from its cookies.
        default_cart_id: Cart id used when the request sends no X-Cart-Id.

    Returns:
        A BaseHTTPRequestHandler subclass.
    """

    class CartHTTPHandler(BaseHTTPRequestHandler):
        """Routes cart requests to CartAPI."""

        def do_GET(self) -> None:
            path = self._path()
            if path == "/health":
                self._send_json(ApiResult(200, {"status": "healthy"}))
            elif path == "/api/cart":
                self._dispatch(lambda api: api.get_cart())
            elif path == "/api/cart/summary":
                self._dispatch(lambda api: api.get_summary())
            else:
                self.send_error(404, "Not found")

        def do_POST(self) -> None:
            if self._path() != "/api/cart/items":
                self.send_error(404, "Not found")
                return
            data = self._read_json()
            if data is None:
                return
            self._dispatch(lambda api: api.add_item(data))

        def do_PUT(self) -> None:
            item_id = self._item_id()
            if not item_id:
                self.send_error(404, "Not found")
                return
            data = self._read_json()
            if data is None:
                return
            self._dispatch(lambda api: api.update_item(item_id, data))

        def do_DELETE(self) -> None:
            path = self._path()
            if path == "/api/cart":
                self._dispatch(lambda api: api.clear_cart())
                return
            item_id = self._item_id()
            if not item_id:
                self.send_error(404, "Not found")
                return
            self._dispatch(lambda api: api.remove_item(item_id))

        def _path(self) -> str:
            return urlsplit(self.path).path.rstrip("/") or "/"

        def _item_id(self) -> str:
            path = self._path()
            if not path.startswith(ITEMS_PREFIX):
                return ""
            return unquote(path[len(ITEMS_PREFIX):])

        def _cookies(self) -> dict[str, str]:
            header = self.headers.get("Cookie", "")
            if not header:
                return {}
            jar = SimpleCookie()
            try:
                jar.load(header)
            except CookieError:
                logger.debug("Ignoring malformed Cookie header")
                return {}
            return {name: morsel.value for name, morsel in jar.items()}

        def _read_json(self) -> dict[str, Any] | None:
            """Read the request body as a JSON object, or send an error."""
            try:
                content_length = int(self.headers.get("Content-Length", 0) or 0)
            except ValueError:
                content_length = -1
            if content_length < 0:
                self.send_error(400, "Invalid Content-Length header")
                return None
            if content_length > MAX_BODY_SIZE:
                self.send_error(413, "Request body too large")
                return None

            body = self.rfile.read(content_length) if content_length > 0 else b""
            try:
                data = json.loads(body) if body else {}
            except ValueError:
                self.send_error(400, "Invalid JSON body")
                return None
            if not isinstance(data, dict):
                self.send_error(400, "JSON body must be an object")
                return None
            return data

        def _dispatch(self, operation: Callable[[CartAPI], ApiResult]) -> None:
            cart_id = self.headers.get("X-Cart-Id") or default_cart_id
            try:
                store = store_factory(self._cookies())
                cart = Cart(cart_id, store)
                result = operation(CartAPI(cart))
            except CartRestoreError as e:
                logger.error(f"Stored cart is unusable: {e}")
                result = ApiResult(409, {"success": False, "error": str(e)})
            except Exception as e:
                # Log full exception server-side for debugging
                logger.error(f"Error handling cart request: {e}", exc_info=True)
                self.send_error(500, "Internal server error")
                return

            header_values = getattr(store, "header_values", None)
            cookies = header_values() if callable(header_values) else []
            self._send_json(result, cookies)

        def _send_json(self, result: ApiResult, cookies: list[str] | None = None) -> None:
            payload = json.dumps(result.body, default=str).encode()
            self.send_response(result.status_code)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            for value in cookies or []:
                self.send_header("Set-Cookie", value)
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return CartHTTPHandler


class CartHTTPServer:
    """HTTP server adapter exposing the cart API."""

    def __init__(
        self,
        store_factory: StoreFactory,
        host: str = "127.0.0.1",
        port: int = 8080,
        default_cart_id: str = "default",
    ):
        """Initialize the HTTP server.

        Args:
            store_factory: Builds the store for each request from its cookies.
            host: Host to listen on.
            port: Port to listen on; 0 picks a free port.
            default_cart_id: Cart id used when requests send no X-Cart-Id.
        """
        self.store_factory = store_factory
        self.host = host
        self.port = port
        self.default_cart_id = default_cart_id
        self.server: HTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); only meaningful after start()."""
        if self.server is None:
            return self.host, self.port
        host, port = self.server.server_address[:2]
        return str(host), int(port)

    async def start(self) -> None:
        """Bind the socket and start serving on a worker thread."""
        handler_class = make_cart_handler(
            store_factory=self.store_factory,
            default_cart_id=self.default_cart_id,
        )
        self.server = HTTPServer((self.host, self.port), handler_class)
        self._server_task = asyncio.create_task(self._run_server())
        host, port = self.address
        logger.info(f"Cart HTTP server listening on {host}:{port}")

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Cart HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("Cart HTTP server stopped")
