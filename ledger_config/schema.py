"""
LedgerConfig schema.

Defines the typed runtime artifact the YAML configuration set is parsed
into.  Everything the ledger treats as a business choice rather than a
law lives here: storage names, negative-balance policy, rate averaging,
the category used for transfer records, and the reporting thresholds.

Key distinction:
  YAML set     = source artifact (human-authored, versioned)
  LedgerConfig = runtime artifact (validated, frozen)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from ledger_kernel.domain.policy import BalancePolicy, RateAveraging
from ledger_kernel.domain.snapshot import Collection

DEFAULT_COLLECTION_NAMES: dict[Collection, str] = {
    Collection.FUNDS: "fundsV2",
    Collection.TRANSACTIONS: "transactionsV2",
    Collection.CLIENTS: "ad_clients",
    Collection.AD_ACCOUNTS: "ad_accounts",
    Collection.AD_TRANSACTIONS: "ad_transactions",
    Collection.CAMPAIGNS: "ad_campaigns",
}


@dataclass(frozen=True)
class LedgerConfig:
    """
    Validated ledger configuration.

    ``seeds`` holds the raw records (stored field names) used for any
    collection that has never been written.
    """

    config_id: str
    version: str
    collection_names: dict[Collection, str] = field(
        default_factory=lambda: dict(DEFAULT_COLLECTION_NAMES)
    )
    balance_policy: BalancePolicy = field(default_factory=BalancePolicy)
    rate_averaging: RateAveraging = RateAveraging.LAST_OBSERVED
    transfer_category: str = "Transfers"
    low_balance_threshold_usd: Decimal = Decimal("1000")
    usd_decimal_places: int = 2
    rate_display_places: int = 2
    verify_invariants_on_commit: bool = True
    seed_file: Path | None = None
    seeds: dict[Collection, list[dict[str, Any]]] = field(default_factory=dict)
