"""Command-line interface adapters.

Provides CLI commands for working with a cart:
- add / update / qty / remove: change line items
- show / summary: inspect the cart
- save / refresh / clear: control persistence
- copy / merge: combine carts on the same store
"""
