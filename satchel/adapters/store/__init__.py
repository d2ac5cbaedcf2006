"""Cart store adapters for persistence.

Implementations support multiple backends:
- Memory (process lifetime, tests)
- File (one file per cart, survives restarts)
- Session (any mutable mapping, e.g. a web framework session)
- Cookie (per-request cookies with Set-Cookie write-back)
"""

from .cookie import CookieStore
from .file import FileStore
from .memory import MemoryStore
from .session import SessionStore

__all__ = ["CookieStore", "FileStore", "MemoryStore", "SessionStore"]
