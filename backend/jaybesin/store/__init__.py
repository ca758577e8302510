"""
Store package
- DocumentStore: async CRUD + live snapshots over the SQLAlchemy collections
"""

from jaybesin.store.document_store import (
    COLLECTIONS, SETTINGS_COLLECTION, DocumentStore, PersistenceError, to_document,
)
from jaybesin.store.subscriptions import CollectionSnapshot, Subscription

__all__ = [
    "COLLECTIONS",
    "SETTINGS_COLLECTION",
    "DocumentStore",
    "PersistenceError",
    "to_document",
    "CollectionSnapshot",
    "Subscription",
]
