"""Identity hashing for cart line items.

Two items are the same line item when every attribute except quantity
is equal. This module turns an attribute mapping into a stable digest
that survives process restarts.
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

IGNORED_KEYS = frozenset({"quantity"})


class ItemIdentity:
    """Produces stable identities from item attributes.

    No state; all methods are static.
    """

    @staticmethod
    def compute(attributes: Mapping[str, Any]) -> str:
        """Hash all attributes except quantity.

        Same name, price, tax and extension attributes, different
        quantity → same identity.
        """
        canonical = ItemIdentity.canonicalize(attributes)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @staticmethod
    def canonicalize(attributes: Mapping[str, Any]) -> str:
        """Render the hashed attributes as canonical JSON.

        Keys are sorted at every nesting level so insertion order never
        affects the digest. Nested keys are rendered as JSON object keys,
        so the identity matches the one a saved and restored item gets.
        Values JSON cannot represent fall back to str().
        """
        hashed = {
            _key_text(key): _normalize(value)
            for key, value in attributes.items()
            if key not in IGNORED_KEYS
        }
        return json.dumps(
            hashed,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )


def _key_text(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, bool):
        return json.dumps(key)
    return str(key)


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {_key_text(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value
