"""
Reporting read-model (``ledger_modules.reporting``).

Pure, read-only aggregations over ledger collections: finance dashboard
figures, profit and loss, category breakdowns, fund balances, the ad
dashboard, campaign profit rows and CSV export.
"""

from ledger_modules.reporting.ad_reports import (
    ad_dashboard,
    campaign_profit_rows,
    client_balance_overview,
    total_profit,
)
from ledger_modules.reporting.export import export_rows_csv, render_to_dict
from ledger_modules.reporting.finance_reports import (
    category_breakdown,
    fund_overview,
    monthly_totals,
    period_comparison,
    profit_and_loss,
    recent_transactions,
    summarize,
)
from ledger_modules.reporting.models import DateRange, ReportType
from ledger_modules.reporting.service import ReportingService

__all__ = [
    "DateRange",
    "ReportType",
    "ReportingService",
    "ad_dashboard",
    "campaign_profit_rows",
    "category_breakdown",
    "client_balance_overview",
    "export_rows_csv",
    "fund_overview",
    "monthly_totals",
    "period_comparison",
    "profit_and_loss",
    "recent_transactions",
    "render_to_dict",
    "summarize",
    "total_profit",
]
