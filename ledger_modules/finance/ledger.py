"""
ledger_modules.finance.ledger
=============================

Responsibility:
    Compute the next fund and transaction collections for every general
    finance operation: applying an income or expense, deleting
    transactions, transferring between funds, and editing a transaction.
    Each function validates first and returns new tuples; nothing is
    mutated and nothing is persisted here.

Architecture:
    Module layer (ledger_modules).  Pure functional core -- no I/O, no
    logging, no sessions.  ``FinanceLedgerService`` wraps these in the
    unit of work.

Invariants enforced:
    - Fund conservation: the sum of fund balances moves by exactly the
      signed amount of an applied transaction and is restored exactly on
      deletion.
    - Transfers leave the fund total unchanged and record one expense on
      the source and one income on the destination with equal amounts.
    - Validation precedes computation; a rejected call returns nothing.

Failure modes:
    - InvalidAmountError: amount missing, zero or negative.
    - InvalidReferenceError: unknown fund, or unknown transaction on edit.
    - DuplicateEntityError: a new transaction reuses an existing id.
    - SameFundError: transfer source equals destination.
    - InsufficientBalanceError: balance would go negative where the
      balance policy forbids it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.entities import Fund, Transaction, TransactionType
from ledger_kernel.domain.policy import BalanceKind, BalancePolicy
from ledger_kernel.domain.values import ZERO, require_positive
from ledger_kernel.exceptions import (
    DuplicateEntityError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidReferenceError,
    SameFundError,
)

DEFAULT_TRANSFER_CATEGORY = "Transfers"


def new_id() -> str:
    return str(uuid4())


def _find_fund(funds: Sequence[Fund], fund_id: str) -> Fund:
    for fund in funds:
        if fund.id == fund_id:
            return fund
    raise InvalidReferenceError("fund", fund_id)


def _replace_funds(funds: Sequence[Fund], updated: dict[str, Fund]) -> tuple[Fund, ...]:
    return tuple(updated.get(f.id, f) for f in funds)


def apply_transaction(
    transaction: Transaction,
    funds: Sequence[Fund],
    transactions: Sequence[Transaction],
    policy: BalancePolicy | None = None,
) -> tuple[tuple[Fund, ...], tuple[Transaction, ...]]:
    """
    Record a new income or expense and move its fund's balance.

    Preconditions:
        - ``transaction.amount`` > 0.
        - ``transaction.fund_id`` names an existing fund.
        - No existing transaction has ``transaction.id``.
    Postconditions:
        - The owning fund's balance moved by ``transaction.signed_amount``.
        - The transaction is first in the returned transactions.

    Raises:
        InvalidAmountError, InvalidReferenceError, DuplicateEntityError,
        InsufficientBalanceError (only when the policy forbids a negative
        fund balance on transactions).
    """
    policy = policy or BalancePolicy()
    if transaction.amount <= ZERO:
        raise InvalidAmountError("amount", transaction.amount)
    fund = _find_fund(funds, transaction.fund_id)
    if any(t.id == transaction.id for t in transactions):
        raise DuplicateEntityError("transaction", transaction.id)

    new_balance = fund.balance + transaction.signed_amount
    if new_balance < ZERO and not policy.allows_negative(BalanceKind.FUND_ON_TRANSACTION):
        raise InsufficientBalanceError("fund", fund.id, fund.balance, transaction.amount)

    next_funds = _replace_funds(funds, {fund.id: replace(fund, balance=new_balance)})
    return next_funds, (transaction, *transactions)


def delete_transactions(
    transaction_ids: Iterable[str],
    transactions: Sequence[Transaction],
    funds: Sequence[Fund],
) -> tuple[tuple[Transaction, ...], tuple[Fund, ...]]:
    """
    Remove transactions and reverse their effect on fund balances.

    Adjustments are accumulated per fund and applied in one pass.  Unknown
    ids are ignored; an adjustment for a fund that no longer exists is
    dropped.
    """
    ids = set(transaction_ids)
    doomed = [t for t in transactions if t.id in ids]
    if not doomed:
        return tuple(transactions), tuple(funds)

    adjustments: dict[str, Decimal] = {}
    for t in doomed:
        adjustments[t.fund_id] = adjustments.get(t.fund_id, ZERO) - t.signed_amount

    next_funds = tuple(
        replace(f, balance=f.balance + adjustments[f.id]) if f.id in adjustments else f
        for f in funds
    )
    next_transactions = tuple(t for t in transactions if t.id not in ids)
    return next_transactions, next_funds


def transfer_funds(
    from_fund_id: str,
    to_fund_id: str,
    amount: object,
    funds: Sequence[Fund],
    transactions: Sequence[Transaction],
    clock: Clock,
    id_factory: Callable[[], str] = new_id,
    policy: BalancePolicy | None = None,
    category: str = DEFAULT_TRANSFER_CATEGORY,
) -> tuple[tuple[Fund, ...], tuple[Transaction, ...], Transaction, Transaction]:
    """
    Move ``amount`` from one fund to another and record both legs.

    Postconditions:
        - Source debited and destination credited by the same amount.
        - An expense "Transfer to <destination>" on the source and an
          income "Transfer from <source>" on the destination, both dated
          ``clock.now()``, lead the returned transactions (income first).

    Returns:
        (funds', transactions', outgoing expense, incoming income)

    Raises:
        InvalidAmountError, SameFundError, InvalidReferenceError,
        InsufficientBalanceError.
    """
    policy = policy or BalancePolicy()
    value = require_positive(amount, "amount")
    if from_fund_id == to_fund_id:
        raise SameFundError(from_fund_id)
    source = _find_fund(funds, from_fund_id)
    destination = _find_fund(funds, to_fund_id)

    if source.balance < value and not policy.allows_negative(BalanceKind.FUND_ON_TRANSFER):
        raise InsufficientBalanceError("fund", source.id, source.balance, value)

    next_funds = _replace_funds(
        funds,
        {
            source.id: replace(source, balance=source.balance - value),
            destination.id: replace(destination, balance=destination.balance + value),
        },
    )

    now = clock.now()
    outgoing = Transaction(
        id=id_factory(),
        type=TransactionType.EXPENSE,
        description=f"Transfer to {destination.name}",
        amount=value,
        category=category,
        date=now,
        fund_id=source.id,
    )
    incoming = Transaction(
        id=id_factory(),
        type=TransactionType.INCOME,
        description=f"Transfer from {source.name}",
        amount=value,
        category=category,
        date=now,
        fund_id=destination.id,
    )
    return next_funds, (incoming, outgoing, *transactions), outgoing, incoming


def edit_transaction(
    transaction_id: str,
    replacement: Transaction,
    funds: Sequence[Fund],
    transactions: Sequence[Transaction],
    policy: BalancePolicy | None = None,
) -> tuple[tuple[Fund, ...], tuple[Transaction, ...]]:
    """
    Replace a transaction as delete + re-create.

    The old transaction's effect is reversed and the replacement applied
    against the same snapshot, so a change of amount, type or fund keeps
    every fund balance consistent.  A replacement that keeps the old id
    also keeps the old position in the list.
    """
    position = next(
        (i for i, t in enumerate(transactions) if t.id == transaction_id), None
    )
    if position is None:
        raise InvalidReferenceError("transaction", transaction_id)
    remaining, restored_funds = delete_transactions([transaction_id], transactions, funds)
    next_funds, next_transactions = apply_transaction(
        replacement, restored_funds, remaining, policy
    )
    if replacement.id == transaction_id:
        next_transactions = (
            *remaining[:position],
            replacement,
            *remaining[position:],
        )
    return next_funds, next_transactions
