"""
Pure ad-management report functions.

ZERO I/O.  ZERO side effects.  Campaigns without a recorded profit or
spend count as zero or are left out; they are never an error here, even
though the unit of work would refuse to commit such a completed campaign.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from ledger_kernel.domain.entities import AdAccount, Campaign, CampaignStatus, Client
from ledger_kernel.domain.values import MONEY_DECIMAL_PLACES, ZERO, display_rate, round_money
from ledger_modules.reporting.models import (
    AdDashboard,
    CampaignProfitRow,
    ClientBalance,
    ClientBalanceOverview,
    PlatformProfit,
)

DEFAULT_LOW_BALANCE_THRESHOLD = Decimal("1000")


def platform_label(platform_id: str) -> str:
    """Display name of a platform id: ``facebook`` -> ``Facebook``."""
    return platform_id[:1].upper() + platform_id[1:]


def _completed(campaigns: Iterable[Campaign]) -> list[Campaign]:
    return [c for c in campaigns if c.status is CampaignStatus.COMPLETED]


def total_profit(campaigns: Iterable[Campaign]) -> Decimal:
    """Sum of recorded profit over completed campaigns."""
    return sum((c.profit for c in _completed(campaigns) if c.profit is not None), ZERO)


def ad_dashboard(
    campaigns: Sequence[Campaign],
    ad_accounts: Sequence[AdAccount],
    low_balance_threshold: Decimal = DEFAULT_LOW_BALANCE_THRESHOLD,
) -> AdDashboard:
    """
    Headline figures: completed spend, profit, running campaigns, accounts
    below the threshold, and profit per platform.
    """
    completed = _completed(campaigns)
    by_platform: dict[str, Decimal] = {}
    for c in completed:
        if c.profit is None:
            continue
        label = platform_label(c.platform_id)
        by_platform[label] = by_platform.get(label, ZERO) + c.profit

    return AdDashboard(
        total_spend_usd=sum(
            (c.actual_spend_usd for c in completed if c.actual_spend_usd is not None), ZERO
        ),
        total_profit_bdt=total_profit(completed),
        active_campaigns=sum(1 for c in campaigns if c.status is CampaignStatus.RUNNING),
        low_balance_accounts=sum(
            1 for a in ad_accounts if a.balance_usd < low_balance_threshold
        ),
        profit_by_platform=tuple(
            PlatformProfit(platform=p, profit=v) for p, v in by_platform.items()
        ),
    )


def campaign_profit_rows(
    campaigns: Sequence[Campaign],
    clients: Sequence[Client],
    ad_accounts: Sequence[AdAccount],
    decimal_places: int = MONEY_DECIMAL_PLACES,
) -> tuple[CampaignProfitRow, ...]:
    """
    One row per completed campaign with a recorded profit.

    revenue = spend * client rate, cost = spend * ad account rate; a
    missing client, account or rate counts as zero.
    """
    client_by_id = {c.id: c for c in clients}
    account_by_id = {a.id: a for a in ad_accounts}
    rows = []
    for c in _completed(campaigns):
        if c.profit is None:
            continue
        spend = c.actual_spend_usd or ZERO
        client = client_by_id.get(c.client_id)
        account = account_by_id.get(c.ad_account_id) if c.ad_account_id else None
        client_rate = (client.avg_deposit_rate if client else None) or ZERO
        account_rate = (account.avg_cost_per_usd if account else None) or ZERO
        rows.append(
            CampaignProfitRow(
                campaign_id=c.id,
                campaign_name=c.name,
                client_name=client.name if client else "",
                platform=platform_label(c.platform_id),
                spend_usd=spend,
                revenue_bdt=round_money(spend * client_rate, decimal_places),
                cost_bdt=round_money(spend * account_rate, decimal_places),
                profit_bdt=c.profit,
                completed_at=c.completed_at,
            )
        )
    return tuple(rows)


def client_balance_overview(
    clients: Sequence[Client],
    rate_places: int | None = None,
) -> ClientBalanceOverview:
    """
    Every client's prepaid balance, the total, and the overdrawn ones.

    With ``rate_places`` the deposit rates are rounded for display; a client
    without a rate keeps ``None``.
    """
    rows = tuple(
        ClientBalance(
            client_id=c.id,
            name=c.name,
            ad_balance_usd=c.ad_balance_usd,
            avg_deposit_rate=(
                display_rate(c.avg_deposit_rate, rate_places)
                if rate_places is not None and c.avg_deposit_rate is not None
                else c.avg_deposit_rate
            ),
        )
        for c in clients
    )
    return ClientBalanceOverview(
        clients=rows,
        total_balance_usd=sum((r.ad_balance_usd for r in rows), ZERO),
        overdrawn=tuple(r for r in rows if r.ad_balance_usd < ZERO),
    )
