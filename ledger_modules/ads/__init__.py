"""
ledger_modules.ads
==================

Responsibility:
    Ad-spend ledger -- client USD prepayments bought in BDT, prepaid ad
    platform accounts, and the campaign lifecycle whose completion settles
    both balances and derives profit from the spread between the client's
    deposit rate and the account's cost rate.

Architecture:
    Module layer (ledger_modules).  May import from ledger_kernel.  MUST
    NOT be imported by ledger_kernel.
"""

from ledger_modules.ads.ledger import (
    add_deposit,
    campaign_profit,
    cancel_campaign,
    complete_campaign,
    recharge_ad_account,
    start_campaign,
    submit_campaign,
    update_campaign,
)
from ledger_modules.ads.models import (
    DEFAULT_DEPOSIT_RATE,
    KNOWN_PLATFORMS,
    CompletionResult,
    DepositResult,
    RechargeResult,
)
from ledger_modules.ads.service import AdSpendLedgerService
from ledger_modules.ads.workflows import CAMPAIGN_WORKFLOW

__all__ = [
    "AdSpendLedgerService",
    "CAMPAIGN_WORKFLOW",
    "CompletionResult",
    "DEFAULT_DEPOSIT_RATE",
    "DepositResult",
    "KNOWN_PLATFORMS",
    "RechargeResult",
    "add_deposit",
    "campaign_profit",
    "cancel_campaign",
    "complete_campaign",
    "recharge_ad_account",
    "start_campaign",
    "submit_campaign",
    "update_campaign",
]
