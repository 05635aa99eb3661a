"""
Ledger entities -- the records whose balances the ledger keeps consistent.

Responsibility:
    Frozen dataclass records for funds, general transactions, clients, ad
    accounts, client ad transactions and campaigns.  Structure plus the
    few derived properties every caller needs (signed amounts, campaign
    status checks).  No balance logic lives here.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Imported by the
    codec, the snapshot, the invariant checker and every ledger module.

Invariants enforced:
    - All monetary fields are ``Decimal``.
    - Records are immutable; a balance change produces a new instance via
      ``dataclasses.replace``.
    - Transaction and ClientAdTransaction amounts are stored positive; the
      sign is derived from the type.

Non-goals:
    - Fields used only by the excluded form editors (client logo, contact
      person, campaign requester details beyond ``requested_by``) are not
      modelled; they ride along in ``extra`` so persisted records round-trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from ledger_kernel.domain.values import ZERO


class TransactionType(str, Enum):
    """Direction of a general finance transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class AdTransactionType(str, Enum):
    """Kind of movement on a client's ad balance."""

    DEPOSIT = "deposit"
    SPEND = "spend"


class CampaignStatus(str, Enum):
    """Campaign lifecycle states.  See ``ledger_modules.ads.workflows``."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPEN_CAMPAIGN_STATUSES: frozenset[CampaignStatus] = frozenset(
    {CampaignStatus.PENDING, CampaignStatus.RUNNING}
)


@dataclass(frozen=True)
class Fund:
    """A named cash pool."""

    id: str
    name: str
    balance: Decimal = ZERO
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of a single income or expense event.

    Contract:
        ``amount`` is always positive; ``signed_amount`` gives the effect on
        the owning fund.  Corrections are delete + re-create, never an
        in-place edit.
    """

    id: str
    type: TransactionType
    description: str
    amount: Decimal
    category: str
    date: datetime
    fund_id: str
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def signed_amount(self) -> Decimal:
        """+amount for income, -amount for expense."""
        return self.amount if self.type is TransactionType.INCOME else -self.amount


@dataclass(frozen=True)
class Client:
    """
    A customer holding a USD ad-spend prepayment.

    ``avg_deposit_rate`` is the BDT-per-USD rate applied to the client's
    spend when computing profit.  Under the default policy it is the last
    deposit rate, not a true average.
    """

    id: str
    name: str
    ad_balance_usd: Decimal = ZERO
    avg_deposit_rate: Decimal | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class AdAccount:
    """A prepaid account on an ad platform (facebook, google, ...)."""

    id: str
    name: str
    platform_id: str
    balance_usd: Decimal = ZERO
    avg_cost_per_usd: Decimal | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ClientAdTransaction:
    """
    Immutable deposit into, or spend from, a client's ad balance.

    Deposits carry ``amount_bdt`` and ``rate_per_usd``; spends carry
    ``campaign_id``.
    """

    id: str
    client_id: str
    type: AdTransactionType
    amount_usd: Decimal
    transaction_date: datetime
    amount_bdt: Decimal | None = None
    rate_per_usd: Decimal | None = None
    campaign_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Campaign:
    """
    An ad request and, once completed, its execution record.

    Contract:
        ``actual_spend_usd``, ``ad_account_id``, ``profit`` and
        ``completed_at`` are set together, only on the transition to
        COMPLETED.  ``cancelled_at`` is set only on CANCELLED.
    """

    id: str
    name: str
    client_id: str
    platform_id: str
    status: CampaignStatus
    budget_usd: Decimal
    created_at: datetime
    requested_by: str | None = None
    notes: str | None = None
    actual_spend_usd: Decimal | None = None
    ad_account_id: str | None = None
    profit: Decimal | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_open(self) -> bool:
        """True while the campaign can still be completed or cancelled."""
        return self.status in OPEN_CAMPAIGN_STATUSES

    @property
    def completion_fields(self) -> tuple[object, ...]:
        return (self.actual_spend_usd, self.ad_account_id, self.profit, self.completed_at)
