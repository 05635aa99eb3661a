"""Database layer - engine, declarative base, collection store and codec."""

from ledger_kernel.db.base import Base
from ledger_kernel.db.collection_store import CollectionStore, StoredCollection
from ledger_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "Base",
    "CollectionStore",
    "StoredCollection",
    "create_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
]
