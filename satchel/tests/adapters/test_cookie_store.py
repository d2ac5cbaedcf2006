"""Tests for the cookie store adapter."""

import json

import pytest

from satchel.adapters.store.cookie import CookieStore
from satchel.core.cart import Cart
from satchel.core.errors import StoreIOError
from satchel.core.models import CartItem


def test_put_emits_set_cookie_with_attributes() -> None:
    store = CookieStore(max_age=60, path="/shop", domain="example.com", secure=True)
    store.put("abc", '{"id": "abc"}')
    [header] = store.header_values()
    assert header.startswith("cart_abc=")
    assert "Max-Age=60" in header
    assert "Path=/shop" in header
    assert "Domain=example.com" in header
    assert "Secure" in header
    assert "HttpOnly" in header
    assert "SameSite=Lax" in header


def test_value_round_trips_through_request_cookies() -> None:
    outgoing = CookieStore()
    outgoing.put("abc", '{"id": "abc", "note": "ünïcode"}')
    value = outgoing.header_values()[0].split(";")[0].split("=", 1)[1]

    incoming = CookieStore({"cart_abc": value})
    assert incoming.exists("abc")
    assert json.loads(incoming.get("abc")) == {"id": "abc", "note": "ünïcode"}


def test_flush_expires_cookie() -> None:
    store = CookieStore({"cart_abc": "e30"})
    store.flush("abc")
    assert not store.exists("abc")
    assert store.get("abc") == ""
    assert "Max-Age=0" in store.header_values()[0]


def test_undecodable_cookie_reads_as_empty() -> None:
    store = CookieStore({"cart_abc": "__4"})
    assert store.get("abc") == ""


def test_secure_flag_omitted_by_default() -> None:
    store = CookieStore()
    store.put("abc", "{}")
    assert "Secure" not in store.header_values()[0]


def test_cart_persists_via_cookie_round_trip() -> None:
    first = CookieStore()
    Cart("web", first).add(CartItem({"name": "Socks", "price": 3.0, "quantity": 2})).save()
    name, value = first.header_values()[0].split(";")[0].split("=", 1)

    second = Cart("web", CookieStore({name: value}))
    assert second.total_items() == 2
    assert second.subtotal() == 6.0


@pytest.mark.parametrize("cart_id", ["user@example.com", "two words"])
def test_illegal_cookie_name_raises_store_error(cart_id: str) -> None:
    store = CookieStore({"cart_ok": "e30"})
    with pytest.raises(StoreIOError, match="Cannot write cookie"):
        store.put(cart_id, "{}")
    with pytest.raises(StoreIOError):
        store.flush(cart_id)
    assert store.header_values() == []
    assert not store.exists(cart_id)
    assert store.exists("ok")
