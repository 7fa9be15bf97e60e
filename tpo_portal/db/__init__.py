"""
Database module - relational store access.
"""
from tpo_portal.db.store import Store, create_store, get_store

__all__ = [
    "Store",
    "create_store",
    "get_store",
]
