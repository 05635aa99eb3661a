"""
ledger_modules.ads.models
=========================

Responsibility:
    Result value objects returned by ``AdSpendLedgerService``.  The
    records themselves (Client, AdAccount, ClientAdTransaction, Campaign)
    are kernel entities.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - All DTOs are frozen (immutable after construction).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.domain.entities import (
    AdAccount,
    Campaign,
    Client,
    ClientAdTransaction,
)

KNOWN_PLATFORMS: tuple[str, ...] = ("facebook", "google")

# Deposit form default when a client has no prior rate.
DEFAULT_DEPOSIT_RATE = Decimal("150")


@dataclass(frozen=True)
class DepositResult:
    """The client after a deposit and the deposit record."""

    client: Client
    deposit: ClientAdTransaction


@dataclass(frozen=True)
class RechargeResult:
    """The ad account after a recharge and the rate paid for it."""

    ad_account: AdAccount
    amount_usd: Decimal
    cost_bdt: Decimal
    rate: Decimal


@dataclass(frozen=True)
class CompletionResult:
    """Every entity a campaign completion changed or created."""

    campaign: Campaign
    client: Client
    ad_account: AdAccount
    spend: ClientAdTransaction

    @property
    def profit(self) -> Decimal:
        return self.campaign.profit
