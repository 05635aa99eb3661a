"""
Ledger Invariants Contract.

These invariants are structural law for every ledger operation.  The
balance invariants are enforced by construction in the ledger functions
(every next state is derived from one snapshot).  The structural ones
below are also checkable on a snapshot; the unit of work runs
``verify_snapshot`` before every commit.
"""

from collections import Counter
from enum import Enum, unique

from ledger_kernel.domain.entities import AdTransactionType, CampaignStatus
from ledger_kernel.domain.snapshot import LedgerSnapshot
from ledger_kernel.domain.values import ZERO


@unique
class LedgerInvariant(str, Enum):
    """Non-configurable invariants enforced by the ledger.

    Each value names one structural guarantee.  Configuration may change
    whether a balance may go negative, but never whether these rules apply.
    """

    FUND_CONSERVATION = "fund_conservation"
    """Fund balances move by exactly +income-expense when a transaction is
    applied and are restored exactly on deletion.  Enforced by the finance
    ledger functions."""

    COMPLETION_FIELDS = "completion_fields"
    """actual_spend_usd, ad_account_id, profit and completed_at are all set
    on completed campaigns and none of them on any other status."""

    SINGLE_SPEND_PER_CAMPAIGN = "single_spend_per_campaign"
    """Every completed campaign has exactly one spend record, and every
    spend record points at a completed campaign."""

    DEPOSIT_CORRESPONDENCE = "deposit_correspondence"
    """Every deposit record matches one increase of its client's ad balance
    by the same USD amount.  Enforced by the ad ledger functions."""

    POSITIVE_AMOUNTS = "positive_amounts"
    """Transaction and client ad transaction amounts are stored positive."""


ALL_LEDGER_INVARIANTS: frozenset[LedgerInvariant] = frozenset(LedgerInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "ledger_modules",
    "ledger_config",
    "scripts",
)


def verify_snapshot(snapshot: LedgerSnapshot) -> list[str]:
    """
    Check the snapshot-level invariants and describe every violation.

    Returns an empty list when the snapshot is consistent.  Reporting views
    tolerate incomplete campaigns; this checker does not.
    """
    violations: list[str] = []

    for t in snapshot.transactions:
        if t.amount <= ZERO:
            violations.append(
                f"{LedgerInvariant.POSITIVE_AMOUNTS.value}: transaction {t.id} amount {t.amount}"
            )
    for t in snapshot.ad_transactions:
        if t.amount_usd <= ZERO:
            violations.append(
                f"{LedgerInvariant.POSITIVE_AMOUNTS.value}: ad transaction {t.id} amount {t.amount_usd}"
            )

    spend_counts = Counter(
        t.campaign_id
        for t in snapshot.ad_transactions
        if t.type is AdTransactionType.SPEND
    )
    campaign_status = {c.id: c.status for c in snapshot.campaigns}

    for c in snapshot.campaigns:
        set_fields = [f is not None for f in c.completion_fields]
        if c.status is CampaignStatus.COMPLETED:
            if not all(set_fields):
                violations.append(
                    f"{LedgerInvariant.COMPLETION_FIELDS.value}: completed campaign {c.id} missing completion fields"
                )
            if spend_counts.get(c.id, 0) != 1:
                violations.append(
                    f"{LedgerInvariant.SINGLE_SPEND_PER_CAMPAIGN.value}: campaign {c.id} "
                    f"has {spend_counts.get(c.id, 0)} spend records"
                )
        elif any(set_fields):
            violations.append(
                f"{LedgerInvariant.COMPLETION_FIELDS.value}: {c.status.value} campaign {c.id} "
                "has completion fields set"
            )

    for campaign_id, count in spend_counts.items():
        if campaign_status.get(campaign_id) is not CampaignStatus.COMPLETED:
            violations.append(
                f"{LedgerInvariant.SINGLE_SPEND_PER_CAMPAIGN.value}: spend for campaign "
                f"{campaign_id} which is not completed"
            )

    return violations
