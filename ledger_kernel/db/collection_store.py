"""
Module: ledger_kernel.db.collection_store
Responsibility: Key-value persistence of whole ledger collections.  Each
    logical collection (funds, transactions, clients, ad accounts, ad
    transactions, campaigns) is one row holding an ordered JSON array of
    entity records.
Architecture position: Kernel > DB.  May import from db/base.py, db/codec.py
    and domain/.  The unit of work is the only writer.

Invariants enforced:
    - Collections are read and written whole; there is no per-record
      update path that could bypass the ledger functions.
    - An absent collection reads as its configured seed data.  Seeds are
      not written back until an operation replaces the collection.
    - JSON numbers are parsed as Decimal, never float.

Failure modes:
    - CollectionDecodeError if a stored payload is not valid JSON or a
      record cannot be decoded.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, Session, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.db.codec import decode_record, encode_record
from ledger_kernel.domain.snapshot import Collection, LedgerSnapshot
from ledger_kernel.exceptions import CollectionDecodeError, InvalidAmountError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.collection_store")


class StoredCollection(Base):
    """
    One named collection and its serialized records.

    Table: ``ledger_collections``
    """

    __tablename__ = "ledger_collections"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    record_count: Mapped[int] = mapped_column(nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<StoredCollection(name={self.name!r}, records={self.record_count})>"


class CollectionStore:
    """
    Reads and writes whole collections through a caller-owned session.

    Contract:
        The store never commits.  The caller (the unit of work) owns the
        session and its transaction, so every collection written by one
        ledger operation lands in the same commit.
    """

    def __init__(
        self,
        names: Mapping[Collection, str],
        seeds: Mapping[Collection, list[dict[str, Any]]] | None = None,
    ):
        missing = [c.value for c in Collection if c not in names]
        if missing:
            raise ValueError(f"No storage name configured for collections: {missing}")
        self._names = dict(names)
        self._seeds = dict(seeds or {})

    def storage_name(self, collection: Collection) -> str:
        return self._names[collection]

    def raw_payload(self, session: Session, collection: Collection) -> str | None:
        """The stored JSON text of a collection, or None when absent."""
        row = session.get(StoredCollection, self._names[collection])
        return row.payload if row is not None else None

    def load(
        self,
        session: Session,
        collection: Collection,
        for_update: bool = False,
    ) -> tuple:
        """
        Load and decode one collection.

        Postconditions: Returns a tuple of entities in stored order; the
            seed data (possibly empty) when the collection has never been
            written.
        """
        name = self._names[collection]
        row = session.get(StoredCollection, name, with_for_update=for_update)
        if row is None:
            records = self._seeds.get(collection, [])
            logger.debug(
                "collection_seeded",
                extra={"collection": name, "record_count": len(records)},
            )
        else:
            try:
                records = json.loads(row.payload, parse_float=Decimal)
            except json.JSONDecodeError as e:
                raise CollectionDecodeError(name, f"invalid JSON: {e}") from e
            if not isinstance(records, list):
                raise CollectionDecodeError(name, "payload is not a JSON array")

        entities = []
        for index, record in enumerate(records):
            try:
                entities.append(decode_record(collection, record))
            except (KeyError, ValueError, TypeError, InvalidAmountError) as e:
                raise CollectionDecodeError(name, f"record {index}: {e!r}") from e
        return tuple(entities)

    def load_snapshot(self, session: Session, for_update: bool = False) -> LedgerSnapshot:
        """Load every collection into one snapshot."""
        return LedgerSnapshot(
            **{c.value: self.load(session, c, for_update=for_update) for c in Collection}
        )

    def save(
        self,
        session: Session,
        collection: Collection,
        entities: Iterable[Any],
        now: datetime | None = None,
    ) -> None:
        """Replace one collection with ``entities`` and flush (never commit)."""
        name = self._names[collection]
        records = [encode_record(collection, e) for e in entities]
        payload = json.dumps(records, ensure_ascii=False)
        stamp = now or datetime.now(timezone.utc)

        row = session.get(StoredCollection, name)
        if row is None:
            session.add(
                StoredCollection(
                    name=name,
                    payload=payload,
                    record_count=len(records),
                    updated_at=stamp,
                )
            )
        else:
            row.payload = payload
            row.record_count = len(records)
            row.updated_at = stamp
        session.flush()

        logger.debug(
            "collection_saved",
            extra={"collection": name, "record_count": len(records)},
        )
