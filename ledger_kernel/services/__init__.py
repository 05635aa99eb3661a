"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.unit_of_work import LedgerUnitOfWork, StagedOperation

__all__ = [
    "LedgerUnitOfWork",
    "StagedOperation",
]
