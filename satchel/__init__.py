"""Satchel: a shopping cart domain model with pluggable persistence."""

__version__ = "0.1.0"
