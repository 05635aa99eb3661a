"""
Reporting Module Service (``ledger_modules.reporting.service``).

Responsibility
--------------
Read-only entry point for the finance and ad-management reports.  Loads
one snapshot through the unit of work and hands its collections to the
pure functions in ``finance_reports.py`` and ``ad_reports.py``.

Architecture position
---------------------
**Modules layer** -- thin glue.  Never stages writes; ``uow.read()`` does
not take the writer lock.

Invariants enforced
-------------------
* Read-only -- no collection is ever written.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.
* Time windows are measured from the injected clock.

Failure modes
-------------
* Invalid report parameters (unknown report type or date range)  ->
  ``ValueError`` before any data is read.
* Undecodable stored collection  -> ``CollectionDecodeError`` propagates.
"""

from __future__ import annotations

from decimal import Decimal

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.entities import Transaction, TransactionType
from ledger_kernel.domain.values import MONEY_DECIMAL_PLACES, RATE_DISPLAY_PLACES
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.unit_of_work import LedgerUnitOfWork
from ledger_modules.reporting import ad_reports, finance_reports
from ledger_modules.reporting.export import export_rows_csv
from ledger_modules.reporting.models import (
    AdDashboard,
    CampaignProfitRow,
    CategoryAmount,
    ClientBalanceOverview,
    DateRange,
    FundOverview,
    MonthlyTotal,
    PeriodComparison,
    ReportLine,
    ReportType,
    Totals,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Builds reports from the current ledger state.

    Contract:
        Every method reads a fresh snapshot; results are frozen report
        models or tuples of them.
    """

    def __init__(
        self,
        uow: LedgerUnitOfWork,
        clock: Clock | None = None,
        low_balance_threshold_usd: Decimal = ad_reports.DEFAULT_LOW_BALANCE_THRESHOLD,
        decimal_places: int = MONEY_DECIMAL_PLACES,
        rate_display_places: int = RATE_DISPLAY_PLACES,
    ):
        self._uow = uow
        self._clock = clock or SystemClock()
        self._low_balance_threshold = low_balance_threshold_usd
        self._decimal_places = decimal_places
        self._rate_display_places = rate_display_places

    # =========================================================================
    # Finance
    # =========================================================================

    def summary(self) -> Totals:
        return finance_reports.summarize(self._uow.read().transactions)

    def category_breakdown(
        self,
        type_: TransactionType | str,
        date_range: DateRange | str = DateRange.ALL,
    ) -> tuple[CategoryAmount, ...]:
        transactions = finance_reports.filter_by_range(
            self._uow.read().transactions, self._clock.now(), date_range
        )
        return finance_reports.category_breakdown(transactions, TransactionType(type_))

    def monthly_totals(self) -> tuple[MonthlyTotal, ...]:
        return finance_reports.monthly_totals(self._uow.read().transactions)

    def period_comparison(
        self, days: int = finance_reports.DEFAULT_COMPARISON_DAYS
    ) -> PeriodComparison:
        return finance_reports.period_comparison(
            self._uow.read().transactions, self._clock.now(), days
        )

    def recent_transactions(
        self, limit: int = finance_reports.DEFAULT_RECENT_LIMIT
    ) -> tuple[Transaction, ...]:
        return finance_reports.recent_transactions(self._uow.read().transactions, limit)

    def profit_and_loss(self, date_range: DateRange | str = DateRange.ALL) -> tuple[ReportLine, ...]:
        return finance_reports.profit_and_loss(
            self._uow.read().transactions, self._clock.now(), date_range
        )

    def finance_report(
        self,
        report_type: ReportType | str = ReportType.PNL,
        date_range: DateRange | str = DateRange.ALL,
    ) -> tuple[ReportLine, ...] | tuple[CategoryAmount, ...]:
        """The rows of the reports page: P&L, or income/expense by category."""
        kind = ReportType(report_type)
        window = DateRange(date_range)
        if kind is ReportType.PNL:
            rows = self.profit_and_loss(window)
        else:
            rows = self.category_breakdown(TransactionType(kind.value), window)
        logger.info(
            "report_generated",
            extra={"report_type": kind.value, "date_range": window.value, "rows": len(rows)},
        )
        return rows

    def export_finance_report_csv(
        self,
        report_type: ReportType | str = ReportType.PNL,
        date_range: DateRange | str = DateRange.ALL,
    ) -> str:
        return export_rows_csv(self.finance_report(report_type, date_range))

    def fund_overview(self) -> FundOverview:
        return finance_reports.fund_overview(self._uow.read().funds)

    # =========================================================================
    # Ad management
    # =========================================================================

    def ad_dashboard(self) -> AdDashboard:
        snapshot = self._uow.read()
        return ad_reports.ad_dashboard(
            snapshot.campaigns, snapshot.ad_accounts, self._low_balance_threshold
        )

    def campaign_profit_report(self) -> tuple[tuple[CampaignProfitRow, ...], Decimal]:
        """Per-campaign profit rows and the total profit across them."""
        snapshot = self._uow.read()
        rows = ad_reports.campaign_profit_rows(
            snapshot.campaigns, snapshot.clients, snapshot.ad_accounts, self._decimal_places
        )
        total = ad_reports.total_profit(snapshot.campaigns)
        logger.info(
            "report_generated",
            extra={"report_type": "campaign_profit", "rows": len(rows)},
        )
        return rows, total

    def client_balance_overview(self) -> ClientBalanceOverview:
        return ad_reports.client_balance_overview(
            self._uow.read().clients, self._rate_display_places
        )
