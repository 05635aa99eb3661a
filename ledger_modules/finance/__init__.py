"""
ledger_modules.finance
======================

Responsibility:
    General finance ledger -- named cash funds, income and expense
    transactions, and fund-to-fund transfers.  Balance arithmetic lives in
    the pure functions of ``ledger.py``; ``FinanceLedgerService`` is the
    only write path.

Architecture:
    Module layer (ledger_modules).  May import from ledger_kernel.  MUST
    NOT be imported by ledger_kernel.
"""

from ledger_modules.finance.ledger import (
    apply_transaction,
    delete_transactions,
    edit_transaction,
    transfer_funds,
)
from ledger_modules.finance.models import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    DeletionResult,
    TransferResult,
)
from ledger_modules.finance.service import FinanceLedgerService

__all__ = [
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "DeletionResult",
    "FinanceLedgerService",
    "TransferResult",
    "apply_transaction",
    "delete_transactions",
    "edit_transaction",
    "transfer_funds",
]
