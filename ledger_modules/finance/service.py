"""
ledger_modules.finance.service
==============================

Responsibility:
    The only write path for funds and general transactions.  Each public
    method opens the shared unit of work, computes the next collections
    with the pure functions in ``ledger_modules.finance.ledger`` and
    stages them for one all-or-nothing commit.

Architecture:
    Module layer (ledger_modules).  Owns no session; the unit of work owns
    the transaction boundary.

Invariants enforced:
    - Fund conservation on apply, delete and edit.
    - Transfer conservation: fund total unchanged, two legs with equal
      amounts.
    - Rejected operations leave persisted collections untouched.

Failure modes:
    - Every LedgerError from the ledger functions is logged as
      ``ledger_operation_rejected`` and re-raised unchanged.

Usage::

    service = FinanceLedgerService(uow, clock=clock)
    result = service.transfer_funds("1", "2", Decimal("300"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.entities import Fund, Transaction, TransactionType
from ledger_kernel.domain.policy import BalancePolicy
from ledger_kernel.domain.values import require_positive
from ledger_kernel.exceptions import InvalidReferenceError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.unit_of_work import LedgerUnitOfWork
from ledger_modules._operation_helpers import reject_logged
from ledger_modules.finance import ledger
from ledger_modules.finance.models import DeletionResult, TransferResult

logger = get_logger("modules.finance.service")


class FinanceLedgerService:
    """
    Applies, deletes, edits and transfers against the fund ledger.

    Contract:
        Arguments arrive as caller input (strings or numbers are accepted
        for amounts) and are validated before anything is computed.  Every
        method returns the entities it created or changed.

    Guarantees:
        - Clock and id factory are injected; nothing reads the wall clock
          directly.
    """

    def __init__(
        self,
        uow: LedgerUnitOfWork,
        clock: Clock | None = None,
        policy: BalancePolicy | None = None,
        transfer_category: str = ledger.DEFAULT_TRANSFER_CATEGORY,
        id_factory: Callable[[], str] | None = None,
    ):
        self._uow = uow
        self._clock = clock or SystemClock()
        self._policy = policy or BalancePolicy()
        self._transfer_category = transfer_category
        self._id_factory = id_factory or ledger.new_id

    # =========================================================================
    # Reads
    # =========================================================================

    def list_funds(self) -> tuple[Fund, ...]:
        return self._uow.read().funds

    def list_transactions(self) -> tuple[Transaction, ...]:
        return self._uow.read().transactions

    # =========================================================================
    # Writes
    # =========================================================================

    def apply_transaction(
        self,
        type: TransactionType | str,
        description: str,
        amount: object,
        category: str,
        fund_id: str,
        date: datetime | None = None,
        transaction_id: str | None = None,
        actor_id: str | None = None,
    ) -> Transaction:
        """
        Record a new income or expense against a fund.

        Raises:
            InvalidAmountError, InvalidReferenceError, DuplicateEntityError,
            InsufficientBalanceError.
        """
        with reject_logged(logger, "apply_transaction", fund_id=fund_id):
            transaction = Transaction(
                id=transaction_id or self._id_factory(),
                type=TransactionType(type),
                description=description,
                amount=require_positive(amount, "amount"),
                category=category,
                date=date or self._clock.now(),
                fund_id=fund_id,
            )
            with self._uow.begin("apply_transaction", actor_id=actor_id) as op:
                funds, transactions = ledger.apply_transaction(
                    transaction, op.snapshot.funds, op.snapshot.transactions, self._policy
                )
                op.stage(op.snapshot.with_collections(funds=funds, transactions=transactions))

        logger.info(
            "transaction_applied",
            extra={
                "transaction_id": transaction.id,
                "transaction_type": transaction.type.value,
                "amount": str(transaction.amount),
                "fund_id": transaction.fund_id,
            },
        )
        return transaction

    def delete_transactions(
        self,
        transaction_ids: Iterable[str],
        actor_id: str | None = None,
    ) -> DeletionResult:
        """Delete transactions and restore their funds; unknown ids are ignored."""
        ids = list(transaction_ids)
        with reject_logged(logger, "delete_transactions"):
            with self._uow.begin("delete_transactions", actor_id=actor_id) as op:
                before = op.snapshot
                transactions, funds = ledger.delete_transactions(
                    ids, before.transactions, before.funds
                )
                op.stage(before.with_collections(funds=funds, transactions=transactions))

        deleted = tuple(t for t in before.transactions if t.id in set(ids))
        adjusted = tuple(f for f, old in zip(funds, before.funds) if f != old)
        logger.info(
            "transactions_deleted",
            extra={
                "requested": len(ids),
                "deleted": len(deleted),
                "adjusted_funds": [f.id for f in adjusted],
            },
        )
        return DeletionResult(deleted=deleted, adjusted_funds=adjusted)

    def transfer_funds(
        self,
        from_fund_id: str,
        to_fund_id: str,
        amount: object,
        actor_id: str | None = None,
    ) -> TransferResult:
        """
        Move money between two funds and record both legs.

        Raises:
            InvalidAmountError, SameFundError, InvalidReferenceError,
            InsufficientBalanceError.
        """
        with reject_logged(
            logger, "transfer_funds", from_fund_id=from_fund_id, to_fund_id=to_fund_id
        ):
            with self._uow.begin("transfer_funds", actor_id=actor_id) as op:
                funds, transactions, outgoing, incoming = ledger.transfer_funds(
                    from_fund_id,
                    to_fund_id,
                    amount,
                    op.snapshot.funds,
                    op.snapshot.transactions,
                    clock=self._clock,
                    id_factory=self._id_factory,
                    policy=self._policy,
                    category=self._transfer_category,
                )
                op.stage(op.snapshot.with_collections(funds=funds, transactions=transactions))

        by_id = {f.id: f for f in funds}
        result = TransferResult(
            outgoing=outgoing,
            incoming=incoming,
            source=by_id[from_fund_id],
            destination=by_id[to_fund_id],
        )
        logger.info(
            "transfer_completed",
            extra={
                "from_fund_id": from_fund_id,
                "to_fund_id": to_fund_id,
                "amount": str(result.amount),
                "outgoing_id": outgoing.id,
                "incoming_id": incoming.id,
            },
        )
        return result

    def edit_transaction(
        self,
        transaction_id: str,
        *,
        type: TransactionType | str | None = None,
        description: str | None = None,
        amount: object = None,
        category: str | None = None,
        fund_id: str | None = None,
        date: datetime | None = None,
        actor_id: str | None = None,
    ) -> Transaction:
        """
        Change a transaction as delete + re-create under one commit.

        Only the given fields change; the id is kept.

        Raises:
            InvalidReferenceError when the transaction is unknown, plus every
            ``apply_transaction`` error.
        """
        with reject_logged(logger, "edit_transaction", transaction_id=transaction_id):
            with self._uow.begin("edit_transaction", actor_id=actor_id) as op:
                old = op.snapshot.transaction(transaction_id)
                if old is None:
                    raise InvalidReferenceError("transaction", transaction_id)
                changes: dict[str, object] = {}
                if type is not None:
                    changes["type"] = TransactionType(type)
                if description is not None:
                    changes["description"] = description
                if amount is not None:
                    changes["amount"] = require_positive(amount, "amount")
                if category is not None:
                    changes["category"] = category
                if fund_id is not None:
                    changes["fund_id"] = fund_id
                if date is not None:
                    changes["date"] = date
                replacement = replace(old, **changes)
                funds, transactions = ledger.edit_transaction(
                    transaction_id,
                    replacement,
                    op.snapshot.funds,
                    op.snapshot.transactions,
                    self._policy,
                )
                op.stage(op.snapshot.with_collections(funds=funds, transactions=transactions))

        logger.info(
            "transaction_edited",
            extra={
                "transaction_id": transaction_id,
                "changed_fields": sorted(changes),
            },
        )
        return replacement
