"""Composition root for the Satchel cart system.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Store adapter selection
- Entry point selection (interactive CLI or HTTP server)
"""

import asyncio
import json
import logging
import sys
from collections.abc import Callable, Mapping
from typing import Any

from satchel.adapters.cli.commands import CartCommandHandler
from satchel.adapters.http.server import CartHTTPServer, StoreFactory
from satchel.adapters.store.cookie import CookieStore
from satchel.adapters.store.file import FileStore
from satchel.adapters.store.memory import MemoryStore
from satchel.config import Settings, load_settings
from satchel.core.cart import Cart
from satchel.core.ports import StorePort

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_store(settings: Settings) -> StorePort:
    """Create the process-wide store for the configured backend.

    Raises:
        ValueError: For the cookie backend, which only exists per request.
    """
    if settings.store_backend == "memory":
        return MemoryStore()
    if settings.store_backend == "file":
        return FileStore(
            storage_path=settings.file_store_path,
            prefix=settings.file_store_prefix,
            extension=settings.file_store_extension,
        )
    raise ValueError(
        f"Store backend {settings.store_backend!r} needs a request; use it in http mode"
    )


def build_store_factory(settings: Settings) -> StoreFactory:
    """Create the per-request store factory used by the HTTP server.

    Memory and file backends share one store across requests; the cookie
    backend builds a fresh CookieStore from each request's cookies.
    """
    if settings.store_backend == "cookie":

        def cookie_store(cookies: Mapping[str, str]) -> StorePort:
            return CookieStore(
                cookies,
                prefix=settings.cookie_prefix,
                max_age=settings.cookie_max_age_seconds,
                secure=settings.cookie_secure,
            )

        return cookie_store

    shared = build_store(settings)
    return lambda cookies: shared


def execute_cli_command(
    handler: CartCommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Execute a CLI command.

    Raises:
        ValueError: If the command is unknown or a required argument is missing.
    """

    def require(name: str) -> Any:
        if name not in args:
            raise ValueError(f"Missing required parameter: {name}")
        return args[name]

    if command == "add":
        return handler.add_item(args)
    elif command == "update":
        return handler.update_item(require("item_id"), require("key"), require("value"))
    elif command == "qty":
        return handler.set_quantity(require("item_id"), int(require("quantity")))
    elif command == "remove":
        return handler.remove_item(require("item_id"))
    elif command == "show":
        return handler.show(output_format=args.get("format", "json"))
    elif command == "summary":
        return handler.summary()
    elif command == "clear":
        return handler.clear()
    elif command == "save":
        return handler.save()
    elif command == "refresh":
        return handler.refresh()
    elif command == "copy":
        return handler.copy(require("cart_id"))
    elif command == "merge":
        return handler.merge(require("cart_id"))
    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


HELP_TEXT = """
Available Commands (arguments as one JSON object):

  add       {"name": "Shirt", "price": 20.0, "tax": 2.0, "quantity": 1, "sku": "S-1"}
  update    {"item_id": "...", "key": "price", "value": 18.5}
  qty       {"item_id": "...", "quantity": 3}     (0 removes the item)
  remove    {"item_id": "..."}
  show      {"format": "text"}                    (default format: json)
  summary
  clear     Empty the cart and delete its saved state
  save      Write unsaved changes to the store
  refresh   Discard unsaved changes and reload from the store
  copy      {"cart_id": "other"}                  Copy this cart to another id
  merge     {"cart_id": "other"}                  Merge a saved cart into this one
  help      Show this help message
  exit      Exit the CLI
"""


def run_cli(
    handler: CartCommandHandler,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], Any] = print,
) -> None:
    """Run the interactive command loop until exit or EOF."""
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    while True:
        try:
            command_line = read_line(f"{handler.cart.id}> ").strip()
        except EOFError:
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue

        if not command_line:
            continue
        if command_line.lower() == "exit":
            logger.info("Exiting CLI")
            break
        if command_line.lower() == "help":
            write(HELP_TEXT)
            continue

        parts = command_line.split(maxsplit=1)
        command = parts[0].lower()
        args_str = parts[1] if len(parts) > 1 else ""

        try:
            args = json.loads(args_str) if args_str else {}
        except json.JSONDecodeError:
            logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
            continue
        if not isinstance(args, dict):
            logger.error("Arguments must be a JSON object. Use 'help' for command syntax.")
            continue

        try:
            result = execute_cli_command(handler, command, args)
        except (TypeError, ValueError) as e:
            result = {"status": "error", "message": str(e)}

        if "output" in result:
            write(result["output"])
        else:
            write(json.dumps(result, indent=2, default=str))


async def run_http(settings: Settings) -> None:
    """Serve the cart API until cancelled."""
    server = CartHTTPServer(
        store_factory=build_store_factory(settings),
        host=settings.http_host,
        port=settings.http_port,
        default_cart_id=settings.default_cart_id,
    )
    await server.start()
    try:
        while True:
            await asyncio.sleep(1)
    finally:
        await server.stop()


def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire adapters, and start the selected run mode."""
    settings = settings or load_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger.info(f"Starting Satchel in {settings.run_mode} mode (store: {settings.store_backend})")

    if settings.run_mode == "http":
        asyncio.run(run_http(settings))
        return

    store = build_store(settings)
    with Cart(settings.default_cart_id, store) as cart:
        if cart.last_restore_skipped:
            logger.warning(
                f"Restored cart {cart.id} with {cart.last_restore_skipped} unreadable items dropped"
            )
        run_cli(CartCommandHandler(cart, autosave=settings.autosave))


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        bootstrap()
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
