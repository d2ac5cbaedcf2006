"""Test suite for the Satchel cart system.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - No external dependencies, fast execution
   - Uses the in-memory fake store

2. adapters/: Tests for adapter implementations
   - Store backends against real files, mappings and cookies
   - CLI handler, HTTP API and HTTP server behaviour

3. fakes/: Port implementations for testing
   - FakeStorePort records calls and injects failures
"""
