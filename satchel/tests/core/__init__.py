"""Unit tests for the core cart domain."""
