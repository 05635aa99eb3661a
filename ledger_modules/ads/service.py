"""
ledger_modules.ads.service
==========================

Responsibility:
    The only write path for clients' ad balances, ad accounts, ad
    transactions and campaigns.  Each public method opens the shared unit
    of work, computes the next collections with ``ledger_modules.ads.ledger``
    and stages them for one commit.

Architecture:
    Module layer (ledger_modules).  Owns no session; the unit of work owns
    the transaction boundary.

Invariants enforced:
    - Deposit records are prepended and spend records appended to the ad
      transactions, matching the order the dashboard shows them in.
    - A campaign completion writes campaigns, clients, ad accounts and ad
      transactions in one transaction.
    - Rejected operations leave persisted collections untouched.

Failure modes:
    - Every LedgerError from the ledger functions is logged as
      ``ledger_operation_rejected`` and re-raised unchanged.

Usage::

    service = AdSpendLedgerService(uow, clock=clock)
    service.add_deposit("c-1", Decimal("15000"), Decimal("120"))
    result = service.complete_campaign("cmp-1", Decimal("800"), "acc-1")
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.entities import (
    AdAccount,
    Campaign,
    CampaignStatus,
    Client,
    ClientAdTransaction,
)
from ledger_kernel.domain.policy import BalancePolicy, RateAveraging
from ledger_kernel.domain.values import MONEY_DECIMAL_PLACES, require_positive
from ledger_kernel.exceptions import MissingReferenceError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.unit_of_work import LedgerUnitOfWork
from ledger_modules._operation_helpers import reject_logged
from ledger_modules.ads import ledger
from ledger_modules.ads.models import (
    DEFAULT_DEPOSIT_RATE,
    CompletionResult,
    DepositResult,
    RechargeResult,
)
from ledger_modules.finance.ledger import new_id

logger = get_logger("modules.ads.service")


class AdSpendLedgerService:
    """
    Deposits, recharges and the campaign lifecycle.

    Contract:
        Amount arguments accept caller input (strings or numbers) and are
        validated before anything is computed.  Every method returns the
        entities it created or changed.

    Guarantees:
        - Clock and id factory are injected.
        - Rates are stored at full precision; USD amounts are rounded to
          ``usd_decimal_places``.
    """

    def __init__(
        self,
        uow: LedgerUnitOfWork,
        clock: Clock | None = None,
        policy: BalancePolicy | None = None,
        rate_averaging: RateAveraging = RateAveraging.LAST_OBSERVED,
        usd_decimal_places: int = MONEY_DECIMAL_PLACES,
        id_factory: Callable[[], str] | None = None,
    ):
        self._uow = uow
        self._clock = clock or SystemClock()
        self._policy = policy or BalancePolicy()
        self._rate_averaging = rate_averaging
        self._usd_places = usd_decimal_places
        self._id_factory = id_factory or new_id

    # =========================================================================
    # Reads
    # =========================================================================

    def list_clients(self) -> tuple[Client, ...]:
        return self._uow.read().clients

    def list_ad_accounts(self) -> tuple[AdAccount, ...]:
        return self._uow.read().ad_accounts

    def list_campaigns(self) -> tuple[Campaign, ...]:
        return self._uow.read().campaigns

    def list_ad_transactions(self) -> tuple[ClientAdTransaction, ...]:
        return self._uow.read().ad_transactions

    def suggested_deposit_rate(self, client_id: str) -> Decimal:
        """The rate the deposit form starts from: the client's rate, else 150."""
        client = self._uow.read().client(client_id)
        if client is None:
            raise MissingReferenceError("client", client_id)
        return client.avg_deposit_rate or DEFAULT_DEPOSIT_RATE

    # =========================================================================
    # Deposits and recharges
    # =========================================================================

    def add_deposit(
        self,
        client_id: str,
        amount_bdt: object,
        rate: object,
        actor_id: str | None = None,
    ) -> DepositResult:
        """
        Convert a BDT payment to USD and credit the client's ad balance.

        Raises:
            InvalidAmountError, MissingReferenceError.
        """
        with reject_logged(logger, "add_deposit", client_id=client_id):
            with self._uow.begin("add_deposit", actor_id=actor_id) as op:
                clients, deposit = ledger.add_deposit(
                    client_id,
                    amount_bdt,
                    rate,
                    op.snapshot.clients,
                    clock=self._clock,
                    id_factory=self._id_factory,
                    averaging=self._rate_averaging,
                    usd_decimal_places=self._usd_places,
                )
                op.stage(
                    op.snapshot.with_collections(
                        clients=clients,
                        ad_transactions=(deposit, *op.snapshot.ad_transactions),
                    )
                )

        client = next(c for c in clients if c.id == client_id)
        logger.info(
            "deposit_recorded",
            extra={
                "client_id": client_id,
                "amount_bdt": str(deposit.amount_bdt),
                "rate_per_usd": str(deposit.rate_per_usd),
                "amount_usd": str(deposit.amount_usd),
                "ad_balance_usd": str(client.ad_balance_usd),
            },
        )
        return DepositResult(client=client, deposit=deposit)

    def recharge_ad_account(
        self,
        account_id: str,
        amount_usd: object,
        cost_bdt: object,
        actor_id: str | None = None,
    ) -> RechargeResult:
        """
        Add prepaid USD to an ad account.

        Raises:
            InvalidAmountError, MissingReferenceError.
        """
        with reject_logged(logger, "recharge_ad_account", ad_account_id=account_id):
            usd = require_positive(amount_usd, "amount_usd")
            cost = require_positive(cost_bdt, "cost_bdt")
            with self._uow.begin("recharge_ad_account", actor_id=actor_id) as op:
                accounts = ledger.recharge_ad_account(
                    account_id, usd, cost, op.snapshot.ad_accounts, self._rate_averaging
                )
                op.stage(op.snapshot.with_collections(ad_accounts=accounts))

        account = next(a for a in accounts if a.id == account_id)
        result = RechargeResult(ad_account=account, amount_usd=usd, cost_bdt=cost, rate=cost / usd)
        logger.info(
            "ad_account_recharged",
            extra={
                "ad_account_id": account_id,
                "amount_usd": str(usd),
                "cost_bdt": str(cost),
                "balance_usd": str(account.balance_usd),
            },
        )
        return result

    # =========================================================================
    # Campaign lifecycle
    # =========================================================================

    def submit_campaign(
        self,
        name: str,
        client_id: str,
        platform_id: str,
        budget_usd: object,
        requested_by: str | None = None,
        notes: str | None = None,
        created_at: datetime | None = None,
        campaign_id: str | None = None,
        actor_id: str | None = None,
    ) -> Campaign:
        """Create an ad request in ``pending``."""
        with reject_logged(logger, "submit_campaign", client_id=client_id):
            campaign = Campaign(
                id=campaign_id or self._id_factory(),
                name=name,
                client_id=client_id,
                platform_id=platform_id,
                status=CampaignStatus.PENDING,
                budget_usd=require_positive(budget_usd, "budget_usd"),
                created_at=created_at or self._clock.now(),
                requested_by=requested_by,
                notes=notes,
            )
            with self._uow.begin("submit_campaign", actor_id=actor_id) as op:
                campaigns = ledger.submit_campaign(
                    campaign, op.snapshot.campaigns, op.snapshot.clients
                )
                op.stage(op.snapshot.with_collections(campaigns=campaigns))

        logger.info(
            "campaign_submitted",
            extra={
                "campaign_id": campaign.id,
                "client_id": client_id,
                "platform_id": platform_id,
                "budget_usd": str(campaign.budget_usd),
            },
        )
        return campaigns[0]

    def start_campaign(self, campaign_id: str, actor_id: str | None = None) -> Campaign:
        with reject_logged(logger, "start_campaign", campaign_id=campaign_id):
            with self._uow.begin("start_campaign", actor_id=actor_id) as op:
                campaigns = ledger.start_campaign(campaign_id, op.snapshot.campaigns)
                op.stage(op.snapshot.with_collections(campaigns=campaigns))

        logger.info("campaign_started", extra={"campaign_id": campaign_id})
        return next(c for c in campaigns if c.id == campaign_id)

    def update_campaign(
        self,
        campaign_id: str,
        *,
        name: str | None = None,
        budget_usd: object = None,
        platform_id: str | None = None,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> Campaign:
        with reject_logged(logger, "update_campaign", campaign_id=campaign_id):
            with self._uow.begin("update_campaign", actor_id=actor_id) as op:
                campaigns = ledger.update_campaign(
                    campaign_id,
                    op.snapshot.campaigns,
                    name=name,
                    budget_usd=budget_usd,
                    platform_id=platform_id,
                    notes=notes,
                )
                op.stage(op.snapshot.with_collections(campaigns=campaigns))

        logger.info("campaign_updated", extra={"campaign_id": campaign_id})
        return next(c for c in campaigns if c.id == campaign_id)

    def complete_campaign(
        self,
        campaign_id: str,
        spend_usd: object,
        ad_account_id: str,
        actor_id: str | None = None,
    ) -> CompletionResult:
        """
        Record actual spend, derive profit and settle balances atomically.

        Raises:
            InvalidStateError, InvalidAmountError, MissingReferenceError,
            PlatformMismatchError, InsufficientBalanceError (policy only).
        """
        with reject_logged(
            logger, "complete_campaign", campaign_id=campaign_id, ad_account_id=ad_account_id
        ):
            with self._uow.begin("complete_campaign", actor_id=actor_id) as op:
                campaigns, clients, accounts, spend = ledger.complete_campaign(
                    campaign_id,
                    spend_usd,
                    ad_account_id,
                    op.snapshot.campaigns,
                    op.snapshot.clients,
                    op.snapshot.ad_accounts,
                    clock=self._clock,
                    id_factory=self._id_factory,
                    policy=self._policy,
                )
                op.stage(
                    op.snapshot.with_collections(
                        campaigns=campaigns,
                        clients=clients,
                        ad_accounts=accounts,
                        ad_transactions=(*op.snapshot.ad_transactions, spend),
                    )
                )

        campaign = next(c for c in campaigns if c.id == campaign_id)
        result = CompletionResult(
            campaign=campaign,
            client=next(c for c in clients if c.id == campaign.client_id),
            ad_account=next(a for a in accounts if a.id == ad_account_id),
            spend=spend,
        )
        logger.info(
            "campaign_completed",
            extra={
                "campaign_id": campaign_id,
                "client_id": campaign.client_id,
                "ad_account_id": ad_account_id,
                "spend_usd": str(spend.amount_usd),
                "profit": str(campaign.profit),
            },
        )
        return result

    def cancel_campaign(self, campaign_id: str, actor_id: str | None = None) -> Campaign:
        """
        Cancel a pending or running campaign.  No balance moves.

        Raises:
            InvalidStateError, MissingReferenceError.
        """
        with reject_logged(logger, "cancel_campaign", campaign_id=campaign_id):
            with self._uow.begin("cancel_campaign", actor_id=actor_id) as op:
                campaigns = ledger.cancel_campaign(
                    campaign_id, op.snapshot.campaigns, clock=self._clock
                )
                op.stage(op.snapshot.with_collections(campaigns=campaigns))

        logger.info("campaign_cancelled", extra={"campaign_id": campaign_id})
        return next(c for c in campaigns if c.id == campaign_id)
