# Inventory module
"""
Inventory module for the smart warehouse

This module handles:
- Items: the InventoryItem model and identity assignment
- Stores: in-memory server store and SQLite local-device store
- Saving: validation, insert-or-update and update broadcasts
- Remote access: HTTP client for a store running elsewhere

Sub-modules:
- api: HTTP endpoints under /api/inventory
- service: save/list/remove with notifications
- repo / local_repo: item store implementations
- client: remote store over HTTP
"""
