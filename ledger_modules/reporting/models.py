"""
Reporting Models (``ledger_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass report structures for the finance and ad-management
read-models -- summaries, category breakdowns, monthly totals, period
comparisons, fund overviews, ad dashboards and campaign profit rows.

Architecture position
---------------------
**Modules layer** -- pure data definitions with no I/O.  Consumed by the
pure functions in ``finance_reports.py`` and ``ad_reports.py`` and by
``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` -- immutable after construction.
* All monetary fields use ``Decimal`` -- never ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Finance report variants offered for export."""

    PNL = "pnl"
    INCOME = "income"
    EXPENSE = "expense"


class DateRange(str, Enum):
    """Look-back window of the finance reports."""

    ALL = "all"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"

    @property
    def days(self) -> int | None:
        return {"all": None, "30d": 30, "90d": 90}[self.value]


# =========================================================================
# Finance
# =========================================================================


@dataclass(frozen=True)
class Totals:
    """Income, expense and their difference over a set of transactions."""

    income: Decimal
    expense: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    """Totals for one calendar month; ``month`` is ``YYYY-MM``."""

    month: str
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class MetricChange:
    """A metric for the current window and its percent change."""

    value: Decimal
    change: Decimal


@dataclass(frozen=True)
class PeriodComparison:
    """Current window against the equally long window before it."""

    window_days: int
    current_start: datetime
    previous_start: datetime
    income: MetricChange
    expense: MetricChange
    profit: MetricChange


@dataclass(frozen=True)
class ReportLine:
    """One labelled line of a profit and loss report."""

    item: str
    amount: Decimal


@dataclass(frozen=True)
class FundBalance:
    fund_id: str
    name: str
    balance: Decimal


@dataclass(frozen=True)
class FundOverview:
    funds: tuple[FundBalance, ...]
    total_balance: Decimal


# =========================================================================
# Ad management
# =========================================================================


@dataclass(frozen=True)
class PlatformProfit:
    platform: str
    profit: Decimal


@dataclass(frozen=True)
class AdDashboard:
    """Headline figures of the ad manager."""

    total_spend_usd: Decimal
    total_profit_bdt: Decimal
    active_campaigns: int
    low_balance_accounts: int
    profit_by_platform: tuple[PlatformProfit, ...]


@dataclass(frozen=True)
class CampaignProfitRow:
    """
    Profit breakdown of one completed campaign.

    Revenue and cost use the rates on the client and ad account at the
    time the report is produced; ``profit`` is the value fixed at
    completion.
    """

    campaign_id: str
    campaign_name: str
    client_name: str
    platform: str
    spend_usd: Decimal
    revenue_bdt: Decimal
    cost_bdt: Decimal
    profit_bdt: Decimal
    completed_at: datetime | None


@dataclass(frozen=True)
class ClientBalance:
    client_id: str
    name: str
    ad_balance_usd: Decimal
    avg_deposit_rate: Decimal | None


@dataclass(frozen=True)
class ClientBalanceOverview:
    """Prepaid balances held for clients; overdrawn clients listed apart."""

    clients: tuple[ClientBalance, ...]
    total_balance_usd: Decimal
    overdrawn: tuple[ClientBalance, ...]
