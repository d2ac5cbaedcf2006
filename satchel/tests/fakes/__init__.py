"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without real storage backends:

- FakeStorePort: In-memory blob store with call recording and failure injection
"""

from .store import FakeStorePort

__all__ = ["FakeStorePort"]
