"""
Pure finance report functions.

These functions turn fund and transaction collections into the figures
shown on the finance dashboard and reports pages.  ZERO I/O.  ZERO side
effects.

Functions in this module follow the kernel domain purity convention:
- No database access
- No clock access (``now`` is an argument)
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from decimal import Decimal

from ledger_kernel.domain.entities import Fund, Transaction, TransactionType
from ledger_kernel.domain.values import ZERO, percentage_change
from ledger_modules.reporting.models import (
    CategoryAmount,
    DateRange,
    FundBalance,
    FundOverview,
    MetricChange,
    MonthlyTotal,
    PeriodComparison,
    ReportLine,
    Totals,
)

DEFAULT_COMPARISON_DAYS = 30
DEFAULT_RECENT_LIMIT = 5


def _sum(transactions: Iterable[Transaction], type_: TransactionType) -> Decimal:
    return sum((t.amount for t in transactions if t.type is type_), ZERO)


def summarize(transactions: Iterable[Transaction]) -> Totals:
    """Total income, total expense and net profit."""
    items = list(transactions)
    income = _sum(items, TransactionType.INCOME)
    expense = _sum(items, TransactionType.EXPENSE)
    return Totals(income=income, expense=expense, net_profit=income - expense)


def category_breakdown(
    transactions: Iterable[Transaction],
    type_: TransactionType,
) -> tuple[CategoryAmount, ...]:
    """
    Totals per category for one transaction type, largest first.

    Ties keep the order in which categories first appear.
    """
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if t.type is type_:
            totals[t.category] = totals.get(t.category, ZERO) + t.amount
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(CategoryAmount(category=c, amount=a) for c, a in ranked)


def monthly_totals(transactions: Iterable[Transaction]) -> tuple[MonthlyTotal, ...]:
    """Income and expense per calendar month, oldest month first."""
    months: dict[str, dict[TransactionType, Decimal]] = {}
    for t in transactions:
        key = t.date.strftime("%Y-%m")
        bucket = months.setdefault(
            key, {TransactionType.INCOME: ZERO, TransactionType.EXPENSE: ZERO}
        )
        bucket[t.type] += t.amount
    return tuple(
        MonthlyTotal(
            month=key,
            income=months[key][TransactionType.INCOME],
            expense=months[key][TransactionType.EXPENSE],
        )
        for key in sorted(months)
    )


def period_comparison(
    transactions: Iterable[Transaction],
    now: datetime,
    days: int = DEFAULT_COMPARISON_DAYS,
) -> PeriodComparison:
    """
    Compare the last ``days`` days with the ``days`` days before them.

    The current window is ``[now - days, ...)``; the previous window is
    ``[now - 2*days, now - days)``.
    """
    current_start = now - timedelta(days=days)
    previous_start = now - timedelta(days=2 * days)
    items = list(transactions)
    current = summarize(t for t in items if t.date >= current_start)
    previous = summarize(t for t in items if previous_start <= t.date < current_start)
    return PeriodComparison(
        window_days=days,
        current_start=current_start,
        previous_start=previous_start,
        income=MetricChange(
            current.income, percentage_change(current.income, previous.income)
        ),
        expense=MetricChange(
            current.expense, percentage_change(current.expense, previous.expense)
        ),
        profit=MetricChange(
            current.net_profit, percentage_change(current.net_profit, previous.net_profit)
        ),
    )


def recent_transactions(
    transactions: Iterable[Transaction],
    limit: int = DEFAULT_RECENT_LIMIT,
) -> tuple[Transaction, ...]:
    """The ``limit`` most recent transactions by date, newest first."""
    return tuple(sorted(transactions, key=lambda t: t.date, reverse=True)[:limit])


def filter_by_range(
    transactions: Iterable[Transaction],
    now: datetime,
    date_range: DateRange | str = DateRange.ALL,
) -> tuple[Transaction, ...]:
    days = DateRange(date_range).days
    if days is None:
        return tuple(transactions)
    start = now - timedelta(days=days)
    return tuple(t for t in transactions if t.date >= start)


def profit_and_loss(
    transactions: Iterable[Transaction],
    now: datetime,
    date_range: DateRange | str = DateRange.ALL,
) -> tuple[ReportLine, ...]:
    """Total income, total expenses and net profit over a date range."""
    totals = summarize(filter_by_range(transactions, now, date_range))
    return (
        ReportLine(item="Total Income", amount=totals.income),
        ReportLine(item="Total Expenses", amount=totals.expense),
        ReportLine(item="Net Profit", amount=totals.net_profit),
    )


def fund_overview(funds: Sequence[Fund]) -> FundOverview:
    """Every fund's balance and the total across funds."""
    rows = tuple(FundBalance(fund_id=f.id, name=f.name, balance=f.balance) for f in funds)
    return FundOverview(funds=rows, total_balance=sum((f.balance for f in funds), ZERO))
