"""
Ledger Modules.

Thin orchestration layers over the ledger kernel.  Each module contains:
- Pure ledger functions (the balance arithmetic)
- A service (the only write path, wrapped in the unit of work)
- Result models
- Workflows (state machines), where the module has a lifecycle

Modules:
- Finance: Funds, income and expense transactions, transfers
- Ads: Client deposits, ad account recharges, campaign lifecycle
- Reporting: Read-only dashboards, P&L, CSV export
"""

from ledger_modules import ads, finance, reporting
from ledger_modules.runtime import LedgerServices, build_services

__all__ = [
    "LedgerServices",
    "ads",
    "build_services",
    "finance",
    "reporting",
]
