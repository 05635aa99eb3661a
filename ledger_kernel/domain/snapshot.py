"""
LedgerSnapshot -- one consistent view of every ledger collection.

Responsibility:
    Holds the six collections an operation may read or replace.  Ledger
    functions compute every next state from a single snapshot, which is
    what makes a multi-entity operation (transfer, campaign completion)
    all-or-nothing: either every replacement collection is committed or
    none is.

Architecture position:
    Kernel > Domain -- pure, immutable.  The unit of work builds a snapshot
    from the collection store and writes back the collections a ledger
    function replaced.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum

from ledger_kernel.domain.entities import (
    AdAccount,
    Campaign,
    Client,
    ClientAdTransaction,
    Fund,
    Transaction,
)


class Collection(str, Enum):
    """Logical collection keys.  Storage names come from configuration."""

    FUNDS = "funds"
    TRANSACTIONS = "transactions"
    CLIENTS = "clients"
    AD_ACCOUNTS = "ad_accounts"
    AD_TRANSACTIONS = "ad_transactions"
    CAMPAIGNS = "campaigns"


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable, ordered collections as loaded at the start of an operation."""

    funds: tuple[Fund, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    clients: tuple[Client, ...] = ()
    ad_accounts: tuple[AdAccount, ...] = ()
    ad_transactions: tuple[ClientAdTransaction, ...] = ()
    campaigns: tuple[Campaign, ...] = ()

    def fund(self, fund_id: str) -> Fund | None:
        return next((f for f in self.funds if f.id == fund_id), None)

    def transaction(self, transaction_id: str) -> Transaction | None:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def client(self, client_id: str) -> Client | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def ad_account(self, account_id: str) -> AdAccount | None:
        return next((a for a in self.ad_accounts if a.id == account_id), None)

    def campaign(self, campaign_id: str) -> Campaign | None:
        return next((c for c in self.campaigns if c.id == campaign_id), None)

    def get(self, collection: Collection) -> tuple:
        return getattr(self, collection.value)

    def with_collections(self, **changes: tuple) -> LedgerSnapshot:
        """Return a new snapshot with the named collections replaced."""
        return replace(self, **{k: tuple(v) for k, v in changes.items()})

    def changed_collections(self, other: LedgerSnapshot) -> frozenset[Collection]:
        """Collections whose contents differ between ``self`` and ``other``."""
        return frozenset(
            Collection(f.name)
            for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        )
