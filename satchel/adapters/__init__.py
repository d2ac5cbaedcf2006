"""External adapters for the Satchel cart system.

This package contains everything outside the pure domain (filesystem,
sessions, cookies, HTTP, terminal I/O) and provides implementations of,
or entry points into, the core.

Adapter Organization:

- store/: StorePort implementations (memory, file, session, cookie)
- cli/: Interactive command handling for a working cart
- http/: JSON-over-HTTP API for carts
"""
