"""
ledger_modules.finance.models
=============================

Responsibility:
    Result value objects returned by ``FinanceLedgerService``.  The
    records themselves (Fund, Transaction) are kernel entities.

Invariants enforced:
    - All DTOs are frozen (immutable after construction).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.domain.entities import Fund, Transaction

INCOME_CATEGORIES: tuple[str, ...] = (
    "Web Development",
    "Branding",
    "Consulting",
    "SEO",
    "Other",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Software",
    "Salaries",
    "Utilities",
    "Marketing",
    "Transfers",
    "Other",
)


@dataclass(frozen=True)
class TransferResult:
    """Both legs of a transfer and the funds after it."""

    outgoing: Transaction
    incoming: Transaction
    source: Fund
    destination: Fund

    @property
    def amount(self) -> Decimal:
        return self.outgoing.amount


@dataclass(frozen=True)
class DeletionResult:
    """Transactions removed and the funds whose balance moved."""

    deleted: tuple[Transaction, ...]
    adjusted_funds: tuple[Fund, ...]
