"""Tests for adapter implementations.

These tests exercise adapters against real files, mappings and a live
HTTP server to validate the translation between core domain objects and
external formats.
"""
