"""
Ledger policies -- negative-balance rules and rate averaging.

Responsibility:
    Small frozen value objects that the ledger functions consult instead of
    hard-coding either behavior.  ``ledger_config`` builds them from YAML;
    tests construct them directly.

Architecture position:
    Kernel > Domain -- pure value objects.  MUST NOT import from
    ``ledger_config`` (the config layer depends on the kernel, not the
    other way round).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.values import ZERO


class BalanceKind(str, Enum):
    """The balance a policy decision applies to."""

    FUND_ON_TRANSACTION = "fund_on_transaction"
    FUND_ON_TRANSFER = "fund_on_transfer"
    CLIENT_AD_BALANCE = "client_ad_balance"
    AD_ACCOUNT_BALANCE = "ad_account_balance"


@dataclass(frozen=True)
class BalancePolicy:
    """
    Whether each kind of balance may go below zero.

    Defaults reproduce the dashboard's behavior: expenses may overdraw a
    fund, transfers may not, clients may overspend their prepayment, and
    ad accounts may run negative after a large spend.
    """

    fund_on_transaction: bool = True
    fund_on_transfer: bool = False
    client_ad_balance: bool = True
    ad_account_balance: bool = True

    def allows_negative(self, kind: BalanceKind) -> bool:
        return getattr(self, kind.value)


class RateAveraging(str, Enum):
    """How a deposit or recharge updates the stored BDT/USD rate."""

    LAST_OBSERVED = "last_observed"
    WEIGHTED = "weighted"


def blend_rate(
    mode: RateAveraging,
    old_balance: Decimal,
    old_rate: Decimal | None,
    added_amount: Decimal,
    new_rate: Decimal,
) -> Decimal:
    """
    Compute the rate stored after adding ``added_amount`` USD at ``new_rate``.

    LAST_OBSERVED overwrites the rate.  WEIGHTED blends by USD balance:
    ``(old_balance*old_rate + added*new_rate) / (old_balance + added)``.
    A prior balance that is zero or negative carries no weight, so the new
    rate is used as-is.
    """
    if mode is RateAveraging.LAST_OBSERVED:
        return new_rate
    if old_rate is None or old_balance <= ZERO:
        return new_rate
    total = old_balance + added_amount
    return (old_balance * old_rate + added_amount * new_rate) / total
