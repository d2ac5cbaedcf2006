"""Cookie-backed cart store.

Implements StorePort for HTTP handlers: blobs are read from the request's
cookies and written back as pending ``Set-Cookie`` headers that the HTTP
layer emits with its response. Values are URL-safe base64 so the JSON
blob survives cookie quoting rules.
"""

import base64
import binascii
import logging
from collections.abc import Mapping
from http.cookies import CookieError, SimpleCookie

from satchel.core.errors import StoreIOError
from satchel.core.ports import StorePort

logger = logging.getLogger(__name__)

# Browsers commonly cap a single cookie at 4096 bytes.
MAX_COOKIE_BYTES = 4096


class CookieStore(StorePort):
    """One cookie per cart, named ``<prefix><cart id>``."""

    def __init__(
        self,
        cookies: Mapping[str, str] | None = None,
        prefix: str = "cart_",
        max_age: int = 2592000,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "Lax",
    ):
        """Initialize the cookie store.

        Args:
            cookies: Cookies sent with the current request (name → value).
            prefix: Cookie name prefix.
            max_age: Cookie lifetime in seconds (default 30 days).
            path: Cookie path attribute.
            domain: Cookie domain attribute, omitted when None.
            secure: Whether to set the Secure flag.
            httponly: Whether to set the HttpOnly flag.
            samesite: SameSite attribute value.
        """
        self._cookies: dict[str, str] = dict(cookies or {})
        self.prefix = prefix
        self.max_age = max_age
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite = samesite
        self._outgoing = SimpleCookie()

    def _key(self, cart_id: str) -> str:
        return f"{self.prefix}{cart_id}"

    @staticmethod
    def _encode(data: str) -> str:
        return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii").rstrip("=")

    @staticmethod
    def _decode(value: str) -> str:
        padded = value + "=" * (-len(value) % 4)
        try:
            return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            return ""

    def get(self, cart_id: str) -> str:
        value = self._cookies.get(self._key(cart_id), "")
        if not value:
            return ""
        decoded = self._decode(value)
        if not decoded:
            logger.warning(f"Ignoring undecodable cookie for cart {cart_id}")
        return decoded

    def put(self, cart_id: str, data: str) -> None:
        key = self._key(cart_id)
        encoded = self._encode(data)
        if len(encoded) > MAX_COOKIE_BYTES:
            logger.warning(
                f"Cookie for cart {cart_id} is {len(encoded)} bytes; "
                f"browsers may drop cookies over {MAX_COOKIE_BYTES} bytes"
            )
        self._set_cookie(key, encoded, self.max_age)
        self._cookies[key] = encoded

    def flush(self, cart_id: str) -> None:
        key = self._key(cart_id)
        self._set_cookie(key, "", 0)
        self._cookies.pop(key, None)

    def exists(self, cart_id: str) -> bool:
        return bool(self._cookies.get(self._key(cart_id)))

    def header_values(self) -> list[str]:
        """Return ``Set-Cookie`` header values for every pending change."""
        return [morsel.OutputString() for morsel in self._outgoing.values()]

    def _set_cookie(self, key: str, value: str, max_age: int) -> None:
        try:
            self._outgoing[key] = value
        except CookieError as e:
            raise StoreIOError(f"Cannot write cookie {key!r}: {e}") from e
        morsel = self._outgoing[key]
        morsel["max-age"] = max_age
        morsel["path"] = self.path
        if self.domain:
            morsel["domain"] = self.domain
        morsel["secure"] = self.secure
        morsel["httponly"] = self.httponly
        morsel["samesite"] = self.samesite
