"""Persistent storage for mod metadata and file hashes.

This module exports the store interface and its SQLite implementation.
"""

from modkeeper.store.base import ModStore
from modkeeper.store.sql import SqlModStore, initialize_store, open_store

__all__ = ["ModStore", "SqlModStore", "initialize_store", "open_store"]
