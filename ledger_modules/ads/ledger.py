"""
ledger_modules.ads.ledger
=========================

Responsibility:
    Pure functions for the ad-spend ledger: client deposits (BDT converted
    to USD), ad account recharges, and the campaign lifecycle including
    completion, which moves three balances and derives profit in BDT.

Architecture:
    Module layer (ledger_modules).  Pure functional core -- no I/O, no
    logging.  ``AdSpendLedgerService`` wraps these in the unit of work.
    Lifecycle legality comes from ``workflows.CAMPAIGN_WORKFLOW``.

Invariants enforced:
    - A deposit raises its client's ad balance by exactly the deposit
      record's ``amount_usd``.
    - Completion sets actual spend, ad account, profit and completion time
      together and appends exactly one spend record.
    - Every next collection is computed from one snapshot, so a completion
      lands whole or not at all.

Failure modes:
    - InvalidAmountError: non-positive or missing amount, cost or rate.
    - MissingReferenceError: unknown client, ad account or campaign.
    - PlatformMismatchError: ad account platform differs from the
      campaign's.
    - InvalidStateError: the campaign status does not allow the action.
    - InsufficientBalanceError: only when the balance policy forbids a
      negative client or ad account balance.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Any

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.entities import (
    AdAccount,
    AdTransactionType,
    Campaign,
    CampaignStatus,
    Client,
    ClientAdTransaction,
)
from ledger_kernel.domain.policy import (
    BalanceKind,
    BalancePolicy,
    RateAveraging,
    blend_rate,
)
from ledger_kernel.domain.values import (
    MONEY_DECIMAL_PLACES,
    ZERO,
    require_positive,
    round_money,
)
from ledger_kernel.exceptions import (
    DuplicateEntityError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidStateError,
    MissingReferenceError,
    PlatformMismatchError,
)
from ledger_modules.ads.workflows import CAMPAIGN_WORKFLOW, Transition, find_transition
from ledger_modules.finance.ledger import new_id


def _find(items: Sequence[Any], entity_type: str, entity_id: str) -> Any:
    for item in items:
        if item.id == entity_id:
            return item
    raise MissingReferenceError(entity_type, entity_id)


def _swap(items: Sequence[Any], updated: Any) -> tuple:
    return tuple(updated if item.id == updated.id else item for item in items)


def _require_transition(campaign: Campaign, action: str) -> Transition:
    transition = find_transition(CAMPAIGN_WORKFLOW, campaign.status.value, action)
    if transition is None:
        raise InvalidStateError(campaign.id, campaign.status.value, action)
    return transition


def _check_balance(
    policy: BalancePolicy,
    kind: BalanceKind,
    entity_type: str,
    entity_id: str,
    available: Decimal,
    requested: Decimal,
) -> None:
    if available - requested < ZERO and not policy.allows_negative(kind):
        raise InsufficientBalanceError(entity_type, entity_id, available, requested)


def campaign_profit(
    spend_usd: Decimal,
    client_rate: Decimal | None,
    account_rate: Decimal | None,
    decimal_places: int = MONEY_DECIMAL_PLACES,
) -> Decimal:
    """
    Profit in BDT: what the client is charged minus what the agency paid.

    A missing rate counts as zero.
    """
    revenue = spend_usd * (client_rate or ZERO)
    cost = spend_usd * (account_rate or ZERO)
    return round_money(revenue - cost, decimal_places)


# =============================================================================
# Deposits and recharges
# =============================================================================


def add_deposit(
    client_id: str,
    amount_bdt: object,
    rate: object,
    clients: Sequence[Client],
    clock: Clock,
    id_factory: Callable[[], str] = new_id,
    averaging: RateAveraging = RateAveraging.LAST_OBSERVED,
    usd_decimal_places: int = MONEY_DECIMAL_PLACES,
) -> tuple[tuple[Client, ...], ClientAdTransaction]:
    """
    Credit a client's ad balance with a BDT payment converted at ``rate``.

    Postconditions:
        - ``amount_usd = round(amount_bdt / rate, 2)`` is added to the
          client's ad balance.
        - ``avg_deposit_rate`` is updated per ``averaging`` (default: the
          deposit's rate).
        - The returned deposit record carries amount_usd, amount_bdt and
          the rate.  The caller prepends it to the ad transactions.
    """
    bdt = require_positive(amount_bdt, "amount_bdt")
    deposit_rate = require_positive(rate, "rate")
    client = _find(clients, "client", client_id)

    amount_usd = round_money(bdt / deposit_rate, usd_decimal_places)
    if amount_usd <= ZERO:
        raise InvalidAmountError("amount_usd", amount_usd)
    updated = replace(
        client,
        ad_balance_usd=client.ad_balance_usd + amount_usd,
        avg_deposit_rate=blend_rate(
            averaging, client.ad_balance_usd, client.avg_deposit_rate, amount_usd, deposit_rate
        ),
    )
    deposit = ClientAdTransaction(
        id=id_factory(),
        client_id=client.id,
        type=AdTransactionType.DEPOSIT,
        amount_usd=amount_usd,
        transaction_date=clock.now(),
        amount_bdt=bdt,
        rate_per_usd=deposit_rate,
    )
    return _swap(clients, updated), deposit


def recharge_ad_account(
    account_id: str,
    amount_usd: object,
    cost_bdt: object,
    ad_accounts: Sequence[AdAccount],
    averaging: RateAveraging = RateAveraging.LAST_OBSERVED,
) -> tuple[AdAccount, ...]:
    """
    Add prepaid USD to an ad account bought for ``cost_bdt``.

    The rate ``cost_bdt / amount_usd`` is kept at full precision.
    """
    usd = require_positive(amount_usd, "amount_usd")
    cost = require_positive(cost_bdt, "cost_bdt")
    account = _find(ad_accounts, "ad_account", account_id)

    rate = cost / usd
    updated = replace(
        account,
        balance_usd=account.balance_usd + usd,
        avg_cost_per_usd=blend_rate(
            averaging, account.balance_usd, account.avg_cost_per_usd, usd, rate
        ),
    )
    return _swap(ad_accounts, updated)


# =============================================================================
# Campaign lifecycle
# =============================================================================


def submit_campaign(
    campaign: Campaign,
    campaigns: Sequence[Campaign],
    clients: Sequence[Client],
) -> tuple[Campaign, ...]:
    """Add a new ad request in the workflow's initial state (newest first)."""
    require_positive(campaign.budget_usd, "budget_usd")
    _find(clients, "client", campaign.client_id)
    if any(c.id == campaign.id for c in campaigns):
        raise DuplicateEntityError("campaign", campaign.id)
    pending = replace(
        campaign,
        status=CampaignStatus(CAMPAIGN_WORKFLOW.initial_state),
        actual_spend_usd=None,
        ad_account_id=None,
        profit=None,
        completed_at=None,
        cancelled_at=None,
    )
    return (pending, *campaigns)


def start_campaign(campaign_id: str, campaigns: Sequence[Campaign]) -> tuple[Campaign, ...]:
    campaign = _find(campaigns, "campaign", campaign_id)
    transition = _require_transition(campaign, "start")
    return _swap(campaigns, replace(campaign, status=CampaignStatus(transition.to_state)))


def update_campaign(
    campaign_id: str,
    campaigns: Sequence[Campaign],
    *,
    name: str | None = None,
    budget_usd: object = None,
    platform_id: str | None = None,
    notes: str | None = None,
) -> tuple[Campaign, ...]:
    """
    Edit the request details of an open campaign.

    Completed and cancelled campaigns are history and cannot be edited.
    """
    campaign = _find(campaigns, "campaign", campaign_id)
    if not campaign.is_open:
        raise InvalidStateError(campaign.id, campaign.status.value, "update")
    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = name
    if budget_usd is not None:
        changes["budget_usd"] = require_positive(budget_usd, "budget_usd")
    if platform_id is not None:
        changes["platform_id"] = platform_id
    if notes is not None:
        changes["notes"] = notes
    return _swap(campaigns, replace(campaign, **changes))


def complete_campaign(
    campaign_id: str,
    spend_usd: object,
    ad_account_id: str,
    campaigns: Sequence[Campaign],
    clients: Sequence[Client],
    ad_accounts: Sequence[AdAccount],
    clock: Clock,
    id_factory: Callable[[], str] = new_id,
    policy: BalancePolicy | None = None,
    profit_decimal_places: int = MONEY_DECIMAL_PLACES,
) -> tuple[
    tuple[Campaign, ...],
    tuple[Client, ...],
    tuple[AdAccount, ...],
    ClientAdTransaction,
]:
    """
    Record a campaign's actual spend and settle every affected balance.

    Checks run in order: campaign exists, status allows completion, spend
    is positive, client and ad account exist, platforms match.

    Postconditions:
        1. profit = spend * client rate - spend * account rate (2 dp BDT).
        2. Campaign is completed with actual_spend_usd, ad_account_id,
           profit and completed_at.
        3. Client ad balance and ad account balance drop by the spend.
        4. The returned spend record is appended to the ad transactions by
           the caller.

    Returns:
        (campaigns', clients', ad_accounts', spend record)
    """
    policy = policy or BalancePolicy()
    campaign = _find(campaigns, "campaign", campaign_id)
    transition = _require_transition(campaign, "complete")
    spend = require_positive(spend_usd, "spend_usd")
    client = _find(clients, "client", campaign.client_id)
    account = _find(ad_accounts, "ad_account", ad_account_id)
    if account.platform_id != campaign.platform_id:
        raise PlatformMismatchError(account.id, account.platform_id, campaign.platform_id)

    _check_balance(
        policy, BalanceKind.CLIENT_AD_BALANCE, "client", client.id, client.ad_balance_usd, spend
    )
    _check_balance(
        policy, BalanceKind.AD_ACCOUNT_BALANCE, "ad_account", account.id, account.balance_usd, spend
    )

    now = clock.now()
    profit = campaign_profit(
        spend, client.avg_deposit_rate, account.avg_cost_per_usd, profit_decimal_places
    )
    completed = replace(
        campaign,
        status=CampaignStatus(transition.to_state),
        actual_spend_usd=spend,
        ad_account_id=account.id,
        profit=profit,
        completed_at=now,
    )
    spend_record = ClientAdTransaction(
        id=id_factory(),
        client_id=client.id,
        type=AdTransactionType.SPEND,
        amount_usd=spend,
        transaction_date=now,
        campaign_id=campaign.id,
    )
    return (
        _swap(campaigns, completed),
        _swap(clients, replace(client, ad_balance_usd=client.ad_balance_usd - spend)),
        _swap(ad_accounts, replace(account, balance_usd=account.balance_usd - spend)),
        spend_record,
    )


def cancel_campaign(
    campaign_id: str,
    campaigns: Sequence[Campaign],
    clock: Clock,
) -> tuple[Campaign, ...]:
    """Move an open campaign to cancelled.  No balance moves."""
    campaign = _find(campaigns, "campaign", campaign_id)
    transition = _require_transition(campaign, "cancel")
    cancelled = replace(
        campaign,
        status=CampaignStatus(transition.to_state),
        cancelled_at=clock.now(),
    )
    return _swap(campaigns, cancelled)
