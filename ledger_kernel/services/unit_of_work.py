"""
LedgerUnitOfWork -- the single-writer, all-or-nothing commit boundary.

Responsibility:
    Loads one consistent LedgerSnapshot, lets a ledger operation stage its
    next snapshot, and writes every collection that changed in a single
    database transaction.  A failure anywhere before commit (a rejected
    operation, an invariant violation, a database error) rolls the whole
    transaction back.

Architecture position:
    Kernel > Services -- imperative shell.  Owns the session lifecycle for
    ledger writes; the ledger modules call ``begin()`` and never touch
    sessions directly.

Invariants enforced:
    - Single writer: an RLock serializes operations within the process;
      rows are read FOR UPDATE on backends that support it.
    - Only changed collections are written; an unchanged collection keeps
      its stored payload byte-for-byte.
    - When verification is enabled, a staged snapshot that introduces a
      structural invariant violation is refused.  Violations already
      present in the loaded data do not block unrelated operations.

Failure modes:
    - LedgerInvariantError: the staged snapshot adds violations.
    - CollectionDecodeError: a stored collection cannot be decoded.
    - Any exception raised inside the ``begin()`` block propagates after
      rollback.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.collection_store import CollectionStore
from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.snapshot import Collection, LedgerSnapshot
from ledger_kernel.exceptions import LedgerInvariantError
from ledger_kernel.invariants import verify_snapshot
from ledger_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.unit_of_work")


class StagedOperation:
    """
    The working state of one ``begin()`` block.

    ``snapshot`` is the state as loaded.  ``stage()`` records the next
    state; calling it again replaces the earlier staging.
    """

    def __init__(self, snapshot: LedgerSnapshot):
        self.snapshot = snapshot
        self.staged: LedgerSnapshot | None = None

    def stage(self, next_snapshot: LedgerSnapshot) -> None:
        self.staged = next_snapshot

    @property
    def changed(self) -> frozenset[Collection]:
        if self.staged is None:
            return frozenset()
        return self.snapshot.changed_collections(self.staged)


class LedgerUnitOfWork:
    """
    Transaction boundary shared by every ledger service of one ledger.

    Contract:
        Services that write the same collections must share one instance
        so they share its lock.  ``read()`` returns a snapshot without
        taking the writer lock.

    Guarantees:
        - Either every changed collection is persisted or none is.
        - The snapshot an operation computes from is the snapshot it
          commits against; no other writer in the process interleaves.
    """

    def __init__(
        self,
        store: CollectionStore,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        verify_invariants: bool = True,
    ):
        self._store = store
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._verify_invariants = verify_invariants
        self._lock = threading.RLock()

    @property
    def store(self) -> CollectionStore:
        return self._store

    def read(self) -> LedgerSnapshot:
        """Load the current snapshot in a short read-only transaction."""
        with session_scope(self._session_factory) as session:
            return self._store.load_snapshot(session)

    @contextmanager
    def begin(self, operation: str, actor_id: str | None = None) -> Iterator[StagedOperation]:
        """
        Open a write transaction for one ledger operation.

        Usage:
            with uow.begin("transfer_funds") as op:
                next_snapshot = ...compute from op.snapshot...
                op.stage(next_snapshot)
        """
        with self._lock, LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=actor_id,
            operation=operation,
        ):
            with session_scope(self._session_factory) as session:
                op = StagedOperation(self._store.load_snapshot(session, for_update=True))
                yield op
                self._write(session, op)

    def _write(self, session: Session, op: StagedOperation) -> None:
        changed = op.changed
        if not changed:
            logger.debug("unit_of_work_noop")
            return

        if self._verify_invariants:
            existing = set(verify_snapshot(op.snapshot))
            introduced = [v for v in verify_snapshot(op.staged) if v not in existing]
            if introduced:
                logger.error(
                    "ledger_invariant_violation",
                    extra={"violations": introduced},
                )
                raise LedgerInvariantError(introduced)

        now = self._clock.now()
        # Stable write order keeps lock acquisition order stable across writers.
        for collection in sorted(changed, key=lambda c: c.value):
            self._store.save(session, collection, op.staged.get(collection), now=now)

        logger.info(
            "unit_of_work_committed",
            extra={"collections": sorted(self._store.storage_name(c) for c in changed)},
        )
