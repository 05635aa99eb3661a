"""
Pure domain layer.

This module contains the ledger records and value helpers with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.entities import (
    AdAccount,
    AdTransactionType,
    Campaign,
    CampaignStatus,
    Client,
    ClientAdTransaction,
    Fund,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.policy import (
    BalanceKind,
    BalancePolicy,
    RateAveraging,
    blend_rate,
)
from ledger_kernel.domain.snapshot import Collection, LedgerSnapshot
from ledger_kernel.domain.values import (
    display_rate,
    require_positive,
    round_money,
    to_decimal,
)

__all__ = [
    "AdAccount",
    "AdTransactionType",
    "BalanceKind",
    "BalancePolicy",
    "Campaign",
    "CampaignStatus",
    "Client",
    "ClientAdTransaction",
    "Clock",
    "Collection",
    "DeterministicClock",
    "Fund",
    "LedgerSnapshot",
    "RateAveraging",
    "SystemClock",
    "Transaction",
    "TransactionType",
    "blend_rate",
    "display_rate",
    "require_positive",
    "round_money",
    "to_decimal",
]
