"""HTTP adapters.

Exposes cart operations as a small JSON API so browsers or other
services can drive a cart over HTTP.
"""
